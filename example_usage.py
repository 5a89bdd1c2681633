"""세율 규칙 엔진 사용 예제"""

from datetime import date
from decimal import Decimal

from municipal_tax.core import (
    BulkImporter,
    RecurrenceKind,
    RuleFields,
    RuleResolver,
    RuleStore,
    Weekday,
)


def example_precedence():
    """연간 기본 세율과 특정일 세율이 겹치는 경우"""
    print("=" * 60)
    print("예제 1: 우선순위 (Daily > Weekly > Monthly > Yearly)")
    print("=" * 60)

    store = RuleStore()
    store.add(RuleFields(
        municipality_name="Copenhagen",
        recurrence_kind=RecurrenceKind.YEARLY,
        tax_value=Decimal("0.2"),
        start_date=date(2024, 1, 1),
        end_date=date(2024, 12, 31),
    ))
    store.add(RuleFields(
        municipality_name="Copenhagen",
        recurrence_kind=RecurrenceKind.MONTHLY,
        tax_value=Decimal("0.4"),
        start_date=date(2024, 1, 1),
        end_date=date(2024, 12, 31),
        day_of_month=1,
    ))
    store.add(RuleFields(
        municipality_name="Copenhagen",
        recurrence_kind=RecurrenceKind.DAILY,
        tax_value=Decimal("0.1"),
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 1),
    ))

    resolver = RuleResolver(store)
    for target in [date(2024, 1, 1), date(2024, 3, 1), date(2024, 3, 16), date(2025, 1, 1)]:
        resolution = resolver.resolve_detail("copenhagen", target)
        print(f"{target}: {resolution.outcome.value:22s} tax={resolution.tax_value} "
              f"kind={resolution.recurrence_kind.value if resolution.recurrence_kind else '-'}")


def example_weekly():
    """요일 규칙"""
    print("\n" + "=" * 60)
    print("예제 2: 주간 규칙 (월요일)")
    print("=" * 60)

    store = RuleStore()
    store.add(RuleFields(
        municipality_name="Roskilde",
        recurrence_kind=RecurrenceKind.WEEKLY,
        tax_value=Decimal("0.05"),
        start_date=date(2024, 1, 1),
        end_date=date(2024, 12, 31),
        day_of_week=Weekday.MONDAY,
    ))

    resolver = RuleResolver(store)
    print(f"2024-01-08 (월): {resolver.resolve('Roskilde', date(2024, 1, 8))}")
    print(f"2024-01-09 (화): {resolver.resolve('Roskilde', date(2024, 1, 9))}")


def example_import():
    """일괄 가져오기와 실패 행 보고"""
    print("\n" + "=" * 60)
    print("예제 3: 일괄 가져오기")
    print("=" * 60)

    rows = [
        {"MunicipalityName": "Mumbai", "Type": "Monthly", "TaxValue": "0.07",
         "StartDate": "2024.01.01", "EndDate": "2024.12.31", "DayOfMonth": "15"},
        {"MunicipalityName": "Pune", "Type": "Monthly", "TaxValue": "0.07",
         "StartDate": "2024.01.01", "EndDate": "2024.12.31"},  # DayOfMonth 누락
    ]

    store = RuleStore()
    report = BulkImporter(store).import_rows(rows, source_label="example")
    print(report)
    for failure in report.failures:
        print(f"  - {failure.row_number}행 ({failure.municipality_name}): {failure.reason}")


if __name__ == "__main__":
    example_precedence()
    example_weekly()
    example_import()
