"""RuleResolver: 지자체/날짜별 적용 세율 결정

여러 규칙이 같은 날짜에 매칭되면 구체성 우선순위로 하나를 고릅니다.

우선순위 (높을수록 우선):
1. Daily (특정 일자 지정)
2. Weekly
3. Monthly
4. Yearly

같은 우선순위에 여러 규칙이 있으면 가장 나중에 생성된 규칙(ID가 가장 큰 것)을
선택합니다. 이 경우 경고 로그를 남기고 결과에 tie_broken=True로 표시합니다.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from .recurrence import matches
from .rule import RecurrenceKind, RuleRecord
from .rule_store import RuleStore

logger = logging.getLogger(__name__)


PRECEDENCE: Dict[RecurrenceKind, int] = {
    RecurrenceKind.DAILY: 4,
    RecurrenceKind.WEEKLY: 3,
    RecurrenceKind.MONTHLY: 2,
    RecurrenceKind.YEARLY: 1,
}


class ResolutionOutcome(Enum):
    """조회 결과 유형"""
    MATCHED = "MATCHED"
    NO_MATCH = "NO_MATCH"
    UNKNOWN_MUNICIPALITY = "UNKNOWN_MUNICIPALITY"


@dataclass(frozen=True)
class TaxResolution:
    """세율 조회 결과

    Attributes:
        outcome: 결과 유형
        municipality_name: 조회한 지자체명
        date: 조회 날짜
        tax_value: 적용 세율 (MATCHED일 때만)
        rule_id: 적용된 규칙 ID (MATCHED일 때만)
        recurrence_kind: 적용된 규칙의 반복 유형 (MATCHED일 때만)
        tie_broken: 같은 우선순위 규칙 중 ID로 선택했는지 여부
    """

    outcome: ResolutionOutcome
    municipality_name: str
    date: date
    tax_value: Optional[Decimal] = None
    rule_id: Optional[int] = None
    recurrence_kind: Optional[RecurrenceKind] = None
    tie_broken: bool = False

    @property
    def matched(self) -> bool:
        return self.outcome == ResolutionOutcome.MATCHED

    def to_dict(self) -> Dict[str, Any]:
        return {
            'outcome': self.outcome.value,
            'municipality_name': self.municipality_name,
            'date': self.date.isoformat(),
            'tax_value': str(self.tax_value) if self.tax_value is not None else None,
            'rule_id': self.rule_id,
            'recurrence_kind': self.recurrence_kind.value if self.recurrence_kind else None,
            'tie_broken': self.tie_broken,
        }


class RuleResolver:
    """세율 결정기

    RuleStore를 읽기만 하며 상태를 변경하지 않습니다.
    """

    def __init__(self, store: RuleStore):
        self.store = store

    def resolve(self, municipality_name: str, target_date: date) -> Optional[Decimal]:
        """적용 세율 조회

        알 수 없는 지자체나 매칭 규칙이 없는 경우 None을 반환합니다.
        예외를 발생시키지 않습니다.
        """
        return self.resolve_detail(municipality_name, target_date).tax_value

    def resolve_detail(self, municipality_name: str, target_date: date) -> TaxResolution:
        """적용 세율과 결정 근거 조회

        Args:
            municipality_name: 지자체명 (대소문자 무시)
            target_date: 조회 날짜

        Returns:
            TaxResolution
        """
        rules = self.store.list(municipality_name)
        if not rules:
            return TaxResolution(
                outcome=ResolutionOutcome.UNKNOWN_MUNICIPALITY,
                municipality_name=municipality_name,
                date=target_date,
            )

        candidates = [rule for rule in rules if matches(rule, target_date)]
        if not candidates:
            return TaxResolution(
                outcome=ResolutionOutcome.NO_MATCH,
                municipality_name=municipality_name,
                date=target_date,
            )

        winner = max(candidates, key=self._rank)
        tied = [r for r in candidates if PRECEDENCE[r.recurrence_kind] == PRECEDENCE[winner.recurrence_kind]]
        tie_broken = len(tied) > 1
        if tie_broken:
            logger.warning(
                "%d %s rules match %s on %s; using most recent rule #%d (candidates: %s)",
                len(tied),
                winner.recurrence_kind.value,
                municipality_name,
                target_date.isoformat(),
                winner.id,
                ", ".join(f"#{r.id}" for r in tied),
            )

        return TaxResolution(
            outcome=ResolutionOutcome.MATCHED,
            municipality_name=winner.municipality_name,
            date=target_date,
            tax_value=winner.tax_value,
            rule_id=winner.id,
            recurrence_kind=winner.recurrence_kind,
            tie_broken=tie_broken,
        )

    @staticmethod
    def _rank(rule: RuleRecord):
        return (PRECEDENCE[rule.recurrence_kind], rule.id)
