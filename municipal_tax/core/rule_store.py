"""RuleStore: 지자체별 세율 규칙 저장소

규칙 컬렉션을 소유하고 add/update/list를 제공합니다.
변경 작업은 지자체 단위 Lock으로 직렬화하고, 조회는 불변 튜플을
통째로 교체하는 방식이라 Lock 없이 수행됩니다.
"""

import itertools
import logging
import threading
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from .exceptions import NotFoundError, ValidationError
from .rule import RuleFields, RuleRecord, normalize_municipality, validate_rule_fields

logger = logging.getLogger(__name__)


class RuleStore:
    """세율 규칙 저장소

    Attributes:
        rules: 지자체 키 -> RuleRecord 튜플
        by_id: 규칙 ID -> RuleRecord
    """

    def __init__(self):
        self.rules: Dict[str, Tuple[RuleRecord, ...]] = {}
        self.by_id: Dict[int, RuleRecord] = {}
        self._ids = itertools.count(1)
        self._id_lock = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def _next_id(self) -> int:
        with self._id_lock:
            return next(self._ids)

    @staticmethod
    def _validate(fields: RuleFields) -> None:
        errors = validate_rule_fields(fields)
        if errors:
            raise ValidationError(errors)

    def add(self, fields: RuleFields, source: str = "api") -> RuleRecord:
        """규칙 추가

        기존 규칙과 겹쳐도 중복 제거하지 않습니다 (조회 시 우선순위로 해결).

        Args:
            fields: 규칙 입력값
            source: 출처 태그

        Returns:
            새 ID가 부여된 RuleRecord

        Raises:
            ValidationError: 불변 조건 위반
        """
        self._validate(fields)
        key = normalize_municipality(fields.municipality_name)

        with self._lock_for(key):
            record = RuleRecord.from_fields(self._next_id(), fields, source=source)
            self.rules[key] = self.rules.get(key, ()) + (record,)
            self.by_id[record.id] = record

        logger.info("Added %s (source=%s)", record, source)
        return record

    def update(self, rule_id: int, fields: RuleFields) -> RuleRecord:
        """규칙 수정

        ID, 출처, 생성 시각은 유지하고 매칭 관련 필드를 모두 교체합니다.
        지자체 변경도 허용합니다.

        Raises:
            NotFoundError: 존재하지 않는 ID
            ValidationError: 불변 조건 위반
        """
        self.get(rule_id)
        self._validate(fields)
        new_key = normalize_municipality(fields.municipality_name)

        while True:
            old_key = self.get(rule_id).municipality_key
            # 교착 방지를 위해 정렬된 순서로 Lock 획득
            locks = [self._lock_for(k) for k in sorted({old_key, new_key})]
            for lock in locks:
                lock.acquire()
            try:
                current = self.get(rule_id)
                # Lock 대기 중 다른 update가 지자체를 옮겼으면 다시 시도
                if current.municipality_key != old_key:
                    continue
                updated = self._replace(current, fields, new_key)
                break
            finally:
                for lock in reversed(locks):
                    lock.release()

        logger.info("Updated %s", updated)
        return updated

    def _replace(self, current: RuleRecord, fields: RuleFields, new_key: str) -> RuleRecord:
        """Lock을 잡은 상태에서 레코드 교체"""
        old_key = current.municipality_key
        updated = replace(
            RuleRecord.from_fields(current.id, fields, source=current.source),
            created_at=current.created_at,
            updated_at=datetime.now(),
        )

        if old_key == new_key:
            self.rules[new_key] = tuple(
                updated if r.id == current.id else r for r in self.rules[new_key]
            )
        else:
            self.rules[old_key] = tuple(r for r in self.rules[old_key] if r.id != current.id)
            self.rules[new_key] = self.rules.get(new_key, ()) + (updated,)
        self.by_id[current.id] = updated
        return updated

    def get(self, rule_id: int) -> RuleRecord:
        """ID로 규칙 조회

        Raises:
            NotFoundError: 존재하지 않는 ID
        """
        record = self.by_id.get(rule_id)
        if record is None:
            raise NotFoundError(rule_id)
        return record

    def list(self, municipality_name: str) -> Tuple[RuleRecord, ...]:
        """지자체의 규칙 목록 (없으면 빈 튜플)"""
        return self.rules.get(normalize_municipality(municipality_name), ())

    def municipalities(self) -> List[str]:
        """등록된 지자체명 목록 (각 지자체의 첫 규칙 표기 기준)"""
        return sorted(rules[0].municipality_name for rules in self.rules.values() if rules)

    def hydrate(self, records: Iterable[RuleRecord]) -> int:
        """영속 저장소에서 읽은 레코드 적재

        ID를 그대로 유지하고, 이후 부여할 ID가 기존 최대값보다 크도록
        카운터를 조정합니다. 이미 적재된 ID는 새 레코드로 교체하므로
        같은 레코드를 여러 번 적재해도 중복되지 않습니다.

        Returns:
            적재된 레코드 수
        """
        count = 0
        for record in records:
            key = record.municipality_key
            existing = self.by_id.get(record.id)
            keys = sorted({key, existing.municipality_key}) if existing else [key]
            locks = [self._lock_for(k) for k in keys]
            for lock in locks:
                lock.acquire()
            try:
                if existing is not None:
                    old_key = existing.municipality_key
                    self.rules[old_key] = tuple(r for r in self.rules[old_key] if r.id != record.id)
                self.rules[key] = self.rules.get(key, ()) + (record,)
                self.by_id[record.id] = record
            finally:
                for lock in reversed(locks):
                    lock.release()
            count += 1

        with self._id_lock:
            next_id = max(self.by_id, default=0) + 1
            self._ids = itertools.count(next_id)

        logger.info("Hydrated %d tax rules", count)
        return count

    def __len__(self) -> int:
        return len(self.by_id)

    def __str__(self) -> str:
        return f"RuleStore({len(self)} rules, {len(self.rules)} municipalities)"


# 싱글톤 인스턴스
_default_store: Optional[RuleStore] = None


def get_default_store() -> RuleStore:
    """애플리케이션 전역 RuleStore 반환"""
    global _default_store
    if _default_store is None:
        _default_store = RuleStore()
    return _default_store


def reset_default_store() -> None:
    """전역 RuleStore 초기화 (주로 테스트용)"""
    global _default_store
    _default_store = None
