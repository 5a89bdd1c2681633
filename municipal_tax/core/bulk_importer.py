"""BulkImporter: 세율 규칙 일괄 가져오기

파싱된 행(dict)을 하나씩 검증하여 RuleStore에 추가합니다.
한 행의 실패가 전체 가져오기를 중단시키지 않습니다.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .exceptions import ValidationError
from .rule import RuleFields, municipality_from_row
from .rule_store import RuleStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RowFailure:
    """실패한 행 정보

    Attributes:
        row_number: 데이터 행 번호 (1부터 시작)
        municipality_name: 행의 지자체명 (읽을 수 있는 경우)
        reason: 실패 사유
    """
    row_number: int
    municipality_name: Optional[str]
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'row_number': self.row_number,
            'municipality_name': self.municipality_name,
            'reason': self.reason,
        }


@dataclass
class ImportReport:
    """가져오기 결과 요약"""
    source_label: str
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    failures: List[RowFailure] = field(default_factory=list)
    created_ids: List[int] = field(default_factory=list)
    cancelled: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'source_label': self.source_label,
            'total': self.total,
            'succeeded': self.succeeded,
            'failed': self.failed,
            'failures': [f.to_dict() for f in self.failures],
            'created_ids': list(self.created_ids),
            'cancelled': self.cancelled,
        }

    def __str__(self) -> str:
        return (
            f"ImportReport({self.source_label}: {self.succeeded}/{self.total} succeeded, "
            f"{self.failed} failed{', cancelled' if self.cancelled else ''})"
        )


class BulkImporter:
    """세율 규칙 일괄 가져오기

    Attributes:
        store: 규칙을 추가할 RuleStore
    """

    def __init__(self, store: RuleStore):
        self.store = store

    def import_rows(
        self,
        rows: Iterable[Mapping[str, Any]],
        source_label: str,
        cancel_event: Optional[threading.Event] = None
    ) -> ImportReport:
        """행 단위 가져오기

        각 행은 RuleStore.add와 같은 필드를 가집니다. 중복 제거는 하지 않으므로
        같은 행을 두 번 가져오면 규칙이 두 개 생깁니다.

        Args:
            rows: 파싱된 행 목록
            source_label: 출처 태그 (가져온 규칙의 source에 기록)
            cancel_event: 설정되면 다음 행 처리 전에 중단 (이미 추가된 행은 유지)

        Returns:
            ImportReport
        """
        report = ImportReport(source_label=source_label)

        for row_number, row in enumerate(rows, start=1):
            if cancel_event is not None and cancel_event.is_set():
                report.cancelled = True
                logger.warning("Import %s cancelled after %d rows", source_label, report.total)
                break

            report.total += 1
            if not isinstance(row, Mapping):
                report.failed += 1
                report.failures.append(RowFailure(row_number, None, f"row is not a mapping: {row!r}"))
                continue

            try:
                fields = RuleFields.from_row(row)
                record = self.store.add(fields, source=source_label)
            except ValidationError as e:
                report.failed += 1
                report.failures.append(RowFailure(
                    row_number=row_number,
                    municipality_name=municipality_from_row(row),
                    reason=str(e),
                ))
                logger.debug("Import %s row %d rejected: %s", source_label, row_number, e)
                continue

            report.succeeded += 1
            report.created_ids.append(record.id)

        logger.info("%s", report)
        return report
