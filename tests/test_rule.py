"""RuleFields 정규화 및 검증 테스트"""

import pytest
from datetime import date, datetime
from decimal import Decimal

from municipal_tax.core import (
    RecurrenceKind,
    RuleFields,
    RuleRecord,
    ValidationError,
    Weekday,
    validate_rule_fields,
)
from municipal_tax.core.rule import normalize_municipality, parse_date


def _fields(**overrides):
    values = dict(
        municipality_name="Copenhagen",
        recurrence_kind=RecurrenceKind.YEARLY,
        tax_value=Decimal("0.2"),
        start_date=date(2024, 1, 1),
        end_date=date(2024, 12, 31),
    )
    values.update(overrides)
    return RuleFields(**values)


class TestFromRow:
    """행 정규화 테스트"""

    def test_csv_style_headers_and_dotted_dates(self):
        """원본 CSV 헤더와 YYYY.MM.DD 날짜"""
        fields = RuleFields.from_row({
            "MunicipalityName": " Delhi ",
            "Type": "daily",
            "TaxValue": "0.05",
            "StartDate": "2024.08.15",
            "EndDate": "2024.08.15",
            "DayOfMonth": "",
            "DayOfWeek": "",
            "DayOfYear": "",
        })

        assert fields.municipality_name == "Delhi"
        assert fields.recurrence_kind == RecurrenceKind.DAILY
        assert fields.tax_value == Decimal("0.05")
        assert fields.start_date == date(2024, 8, 15)
        assert fields.day_of_month is None
        assert fields.day_of_week is None

    def test_snake_case_keys_and_typed_values(self):
        """snake_case 키와 이미 변환된 값"""
        fields = RuleFields.from_row({
            "municipality_name": "Roskilde",
            "recurrence_kind": "Weekly",
            "tax_value": 0.1,
            "start_date": date(2024, 1, 1),
            "end_date": datetime(2024, 12, 31, 0, 0),
            "day_of_week": "mon",
        })

        assert fields.tax_value == Decimal("0.1")
        assert fields.end_date == date(2024, 12, 31)
        assert fields.day_of_week == Weekday.MONDAY

    def test_unknown_columns_are_ignored(self):
        fields = RuleFields.from_row({"municipality": "Odense", "comment": "ignored", "id": "7"})

        assert fields.municipality_name == "Odense"

    def test_parse_errors_are_collected(self):
        """여러 필드의 파싱 오류를 한 번에 보고"""
        with pytest.raises(ValidationError) as exc_info:
            RuleFields.from_row({
                "municipalityName": "Odense",
                "recurrenceKind": "Hourly",
                "taxValue": "abc",
                "startDate": "15/08/2024",
            })

        errors = exc_info.value.errors
        assert len(errors) == 3
        assert any(e.startswith("recurrence_kind") for e in errors)
        assert any(e.startswith("tax_value") for e in errors)
        assert any(e.startswith("start_date") for e in errors)

    def test_non_finite_tax_value_rejected(self):
        with pytest.raises(ValidationError, match="tax_value"):
            RuleFields.from_row({"taxValue": "NaN"})


class TestValidation:
    """불변 조건 검증 테스트"""

    def test_valid_yearly(self):
        assert validate_rule_fields(_fields()) == []

    def test_monthly_requires_day_of_month(self):
        errors = validate_rule_fields(_fields(recurrence_kind=RecurrenceKind.MONTHLY))

        assert "day_of_month is required for Monthly rules" in errors

    def test_weekly_requires_day_of_week(self):
        errors = validate_rule_fields(_fields(recurrence_kind=RecurrenceKind.WEEKLY))

        assert "day_of_week is required for Weekly rules" in errors

    def test_daily_rejects_day_fields(self):
        """Daily 규칙에는 보조 필드가 없어야 함"""
        errors = validate_rule_fields(_fields(
            recurrence_kind=RecurrenceKind.DAILY,
            day_of_month=1,
            day_of_week=Weekday.FRIDAY,
            day_of_year=10,
        ))

        assert "day_of_month is only allowed for Monthly rules" in errors
        assert "day_of_week is only allowed for Weekly rules" in errors
        assert "day_of_year is only allowed for Yearly rules" in errors

    def test_range_limits(self):
        assert "day_of_month must be between 1 and 31" in validate_rule_fields(
            _fields(recurrence_kind=RecurrenceKind.MONTHLY, day_of_month=32)
        )
        assert "day_of_year must be between 1 and 366" in validate_rule_fields(
            _fields(day_of_year=0)
        )

    def test_multiple_violations_reported_together(self):
        """여러 위반 사항을 모두 보고"""
        errors = validate_rule_fields(_fields(
            tax_value=Decimal("-0.1"),
            start_date=date(2024, 12, 31),
            end_date=date(2024, 1, 1),
        ))

        assert "tax_value must be >= 0" in errors
        assert "start_date must not be after end_date" in errors

    def test_missing_required_fields(self):
        errors = validate_rule_fields(RuleFields())

        assert "municipality_name is required" in errors
        assert "recurrence_kind is required" in errors
        assert "tax_value is required" in errors
        assert "start_date is required" in errors
        assert "end_date is required" in errors

    def test_zero_tax_is_valid(self):
        assert validate_rule_fields(_fields(tax_value=Decimal("0"))) == []

    def test_tax_value_precision_limit(self):
        """저장 컬럼보다 세밀한 세율은 거부"""
        errors = validate_rule_fields(_fields(tax_value=Decimal("0.1234567")))
        assert errors == ["tax_value must have at most 6 decimal places"]

        # 뒤쪽 0은 정밀도에 포함하지 않음
        assert validate_rule_fields(_fields(tax_value=Decimal("0.1000000"))) == []
        assert validate_rule_fields(_fields(tax_value=Decimal("0.123456"))) == []

    def test_tax_value_upper_limit(self):
        errors = validate_rule_fields(_fields(tax_value=Decimal("1000000")))
        assert errors == ["tax_value must be less than 1000000"]

        assert validate_rule_fields(_fields(tax_value=Decimal("999999.999999"))) == []


class TestRuleRecord:
    """RuleRecord 테스트"""

    def test_from_fields_strips_name_and_keeps_case(self):
        record = RuleRecord.from_fields(1, _fields(municipality_name="  Copenhagen "))

        assert record.municipality_name == "Copenhagen"
        assert record.municipality_key == "copenhagen"
        assert record.source == "api"

    def test_to_dict(self):
        record = RuleRecord.from_fields(
            3,
            _fields(recurrence_kind=RecurrenceKind.WEEKLY, day_of_week=Weekday.MONDAY),
            source="Local:rules.csv",
        )
        data = record.to_dict()

        assert data['id'] == 3
        assert data['recurrence_kind'] == "Weekly"
        assert data['day_of_week'] == "Monday"
        assert data['tax_value'] == "0.2"
        assert data['source'] == "Local:rules.csv"

    def test_record_is_immutable(self):
        record = RuleRecord.from_fields(1, _fields())

        with pytest.raises(AttributeError):
            record.tax_value = Decimal("0.3")


class TestHelpers:

    def test_normalize_municipality(self):
        assert normalize_municipality("  COPENHAGEN ") == normalize_municipality("copenhagen")

    def test_parse_date_formats(self):
        assert parse_date("2024.06.15") == date(2024, 6, 15)
        assert parse_date("2024-06-15") == date(2024, 6, 15)
        assert parse_date("2024/06/15") == date(2024, 6, 15)

        with pytest.raises(ValueError):
            parse_date("2024.02.30")

    def test_weekday_numbers(self):
        assert Weekday.MONDAY.number == 0
        assert Weekday.SUNDAY.number == 6
