"""세율 규칙 저장소 (SQLAlchemy)

RuleRecord <-> TaxRuleDB 변환과 저장/조회를 담당합니다.
트랜잭션 커밋은 호출자가 결정합니다.
"""

from decimal import Decimal
from typing import Iterable, List

from sqlalchemy.orm import Session

from ..core.rule import RecurrenceKind, RuleRecord, Weekday
from .models import TaxRuleDB


def _normalize_decimal(value) -> Decimal:
    """Numeric 컬럼의 고정 소수 자릿수 제거 (0.200000 -> 0.2)"""
    result = Decimal(str(value)).normalize()
    if result.as_tuple().exponent > 0:
        result = result.quantize(Decimal(1))
    return result


def record_to_db(record: RuleRecord) -> TaxRuleDB:
    return TaxRuleDB(
        id=record.id,
        municipality_name=record.municipality_name,
        recurrence_kind=record.recurrence_kind.value,
        tax_value=record.tax_value,
        start_date=record.start_date,
        end_date=record.end_date,
        day_of_month=record.day_of_month,
        day_of_week=record.day_of_week.value if record.day_of_week else None,
        day_of_year=record.day_of_year,
        source=record.source,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def db_to_record(row: TaxRuleDB) -> RuleRecord:
    return RuleRecord(
        id=row.id,
        municipality_name=row.municipality_name,
        recurrence_kind=RecurrenceKind(row.recurrence_kind),
        tax_value=_normalize_decimal(row.tax_value),
        start_date=row.start_date,
        end_date=row.end_date,
        day_of_month=row.day_of_month,
        day_of_week=Weekday(row.day_of_week) if row.day_of_week else None,
        day_of_year=row.day_of_year,
        source=row.source,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class TaxRuleRepository:
    """세율 규칙 영속 저장소

    Attributes:
        db: SQLAlchemy 세션
    """

    def __init__(self, db: Session):
        self.db = db

    def save(self, record: RuleRecord) -> None:
        """레코드 저장 (같은 id가 있으면 덮어씀)"""
        self.db.merge(record_to_db(record))

    def save_all(self, records: Iterable[RuleRecord]) -> int:
        count = 0
        for record in records:
            self.save(record)
            count += 1
        return count

    def load_all(self) -> List[RuleRecord]:
        """저장된 모든 규칙 (id 순)"""
        rows = self.db.query(TaxRuleDB).order_by(TaxRuleDB.id).all()
        return [db_to_record(row) for row in rows]

    def count(self) -> int:
        return self.db.query(TaxRuleDB).count()
