"""TaxRule: 지자체 세율 규칙 데이터 모델

하나의 세율 규칙은 적용 기간(start_date ~ end_date)과 반복 유형
(Yearly, Monthly, Weekly, Daily)으로 정의됩니다.
입력 행(API 요청, CSV 행, YAML 시드)은 RuleFields로 정규화한 뒤 검증합니다.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from .exceptions import ValidationError


class RecurrenceKind(Enum):
    """반복 유형"""
    YEARLY = "Yearly"
    MONTHLY = "Monthly"
    WEEKLY = "Weekly"
    DAILY = "Daily"


class Weekday(Enum):
    """요일 (date.weekday() 순서와 동일)"""
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @property
    def number(self) -> int:
        """date.weekday() 값 (월요일=0)"""
        return list(Weekday).index(self)


# 입력 키 정규화 결과 -> RuleFields 속성명
_FIELD_ALIASES = {
    'municipalityname': 'municipality_name',
    'municipality': 'municipality_name',
    'recurrencekind': 'recurrence_kind',
    'type': 'recurrence_kind',
    'taxtype': 'recurrence_kind',
    'taxvalue': 'tax_value',
    'rate': 'tax_value',
    'tax': 'tax_value',
    'startdate': 'start_date',
    'enddate': 'end_date',
    'dayofmonth': 'day_of_month',
    'dayofweek': 'day_of_week',
    'dayofyear': 'day_of_year',
}

_DATE_FORMATS = ('%Y-%m-%d', '%Y.%m.%d', '%Y/%m/%d')

# 세율 저장 정밀도 (tax_rules.tax_value 컬럼과 동일)
TAX_VALUE_DIGITS = 12
TAX_VALUE_PLACES = 6
MAX_TAX_VALUE = Decimal(10) ** (TAX_VALUE_DIGITS - TAX_VALUE_PLACES)


def normalize_municipality(name: str) -> str:
    """지자체명 조회 키 (대소문자 무시, 앞뒤 공백 제거)"""
    return name.strip().casefold()


def parse_date(value: Any) -> date:
    """날짜 파싱 (YYYY-MM-DD, YYYY.MM.DD, 가져오기 파일은 YYYY/MM/DD도 허용)

    Raises:
        ValueError: 지원하지 않는 형식
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"invalid date {value!r}")


def parse_decimal(value: Any) -> Decimal:
    """세율 파싱. float은 str()을 거쳐 이진 오차를 피합니다."""
    if isinstance(value, bool):
        raise ValueError(f"invalid decimal {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"invalid decimal {value!r}")

    if not result.is_finite():
        raise ValueError(f"invalid decimal {value!r}")
    return result


def parse_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"invalid integer {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValueError(f"invalid integer {value!r}")


def parse_recurrence_kind(value: Any) -> RecurrenceKind:
    if isinstance(value, RecurrenceKind):
        return value
    text = str(value).strip().lower()
    for kind in RecurrenceKind:
        if kind.value.lower() == text:
            return kind
    raise ValueError(
        f"invalid recurrence kind {value!r} "
        f"(expected one of {', '.join(k.value for k in RecurrenceKind)})"
    )


def parse_weekday(value: Any) -> Weekday:
    """요일 파싱 (전체 이름 또는 3글자 약어, 대소문자 무시)"""
    if isinstance(value, Weekday):
        return value
    text = str(value).strip().lower()
    for day in Weekday:
        name = day.value.lower()
        if text == name or (len(text) == 3 and name.startswith(text)):
            return day
    raise ValueError(f"invalid day of week {value!r}")


def _normalize_key(key: str) -> str:
    return re.sub(r'[\s_\-]', '', key).lower()


def municipality_from_row(row: Mapping[str, Any]) -> Optional[str]:
    """행에서 지자체명만 추출 (다른 컬럼의 파싱 실패와 무관)"""
    for key, value in row.items():
        if key is None:
            continue
        if _FIELD_ALIASES.get(_normalize_key(str(key))) == 'municipality_name' and value:
            return str(value).strip()
    return None


_PARSERS = {
    'municipality_name': lambda v: str(v).strip(),
    'recurrence_kind': parse_recurrence_kind,
    'tax_value': parse_decimal,
    'start_date': parse_date,
    'end_date': parse_date,
    'day_of_month': parse_int,
    'day_of_week': parse_weekday,
    'day_of_year': parse_int,
}


@dataclass(frozen=True)
class RuleFields:
    """규칙 생성/수정 입력값

    add, update, import가 모두 같은 형태를 사용합니다.
    필수 여부와 조합 검증은 validate_rule_fields()에서 수행합니다.
    """

    municipality_name: Optional[str] = None
    recurrence_kind: Optional[RecurrenceKind] = None
    tax_value: Optional[Decimal] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    day_of_month: Optional[int] = None
    day_of_week: Optional[Weekday] = None
    day_of_year: Optional[int] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "RuleFields":
        """파싱된 행(dict)에서 RuleFields 생성

        키는 대소문자, 밑줄, 하이픈, 공백을 무시하고 매칭합니다.
        (municipalityName, MunicipalityName, municipality_name 모두 동일)
        빈 문자열은 None으로 취급하고, 알 수 없는 컬럼은 무시합니다.

        Args:
            row: 컬럼명 -> 값 매핑

        Returns:
            정규화된 RuleFields

        Raises:
            ValidationError: 값 파싱에 실패한 경우 (실패 항목 전부 포함)
        """
        values: Dict[str, Any] = {}
        errors: List[str] = []

        for key, raw in row.items():
            if key is None:
                continue
            attr = _FIELD_ALIASES.get(_normalize_key(str(key)))
            if attr is None:
                continue
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                continue

            try:
                values[attr] = _PARSERS[attr](raw)
            except ValueError as e:
                errors.append(f"{attr}: {e}")

        if errors:
            raise ValidationError(errors)

        return cls(**values)


def validate_rule_fields(fields: RuleFields) -> List[str]:
    """규칙 불변 조건 검증

    Returns:
        위반 사항 목록 (비어 있으면 유효)
    """
    errors = []

    if not fields.municipality_name or not fields.municipality_name.strip():
        errors.append("municipality_name is required")
    if fields.recurrence_kind is None:
        errors.append("recurrence_kind is required")

    if fields.tax_value is None:
        errors.append("tax_value is required")
    elif fields.tax_value < 0:
        errors.append("tax_value must be >= 0")
    elif fields.tax_value >= MAX_TAX_VALUE:
        errors.append(f"tax_value must be less than {MAX_TAX_VALUE}")
    elif fields.tax_value.normalize().as_tuple().exponent < -TAX_VALUE_PLACES:
        errors.append(f"tax_value must have at most {TAX_VALUE_PLACES} decimal places")

    if fields.start_date is None:
        errors.append("start_date is required")
    if fields.end_date is None:
        errors.append("end_date is required")
    if fields.start_date and fields.end_date and fields.start_date > fields.end_date:
        errors.append("start_date must not be after end_date")

    kind = fields.recurrence_kind

    # 반복 유형별 보조 필드
    if kind == RecurrenceKind.MONTHLY:
        if fields.day_of_month is None:
            errors.append("day_of_month is required for Monthly rules")
        elif not 1 <= fields.day_of_month <= 31:
            errors.append("day_of_month must be between 1 and 31")
    elif fields.day_of_month is not None:
        errors.append("day_of_month is only allowed for Monthly rules")

    if kind == RecurrenceKind.WEEKLY:
        if fields.day_of_week is None:
            errors.append("day_of_week is required for Weekly rules")
    elif fields.day_of_week is not None:
        errors.append("day_of_week is only allowed for Weekly rules")

    if kind == RecurrenceKind.YEARLY:
        if fields.day_of_year is not None and not 1 <= fields.day_of_year <= 366:
            errors.append("day_of_year must be between 1 and 366")
    elif fields.day_of_year is not None:
        errors.append("day_of_year is only allowed for Yearly rules")

    return errors


@dataclass(frozen=True)
class RuleRecord:
    """저장된 세율 규칙

    RuleStore가 생성하는 불변 객체입니다. 수정 시에는 같은 id를 가진
    새 객체로 교체됩니다.

    Attributes:
        id: 규칙 고유 식별자 (생성 시 부여, 변경 불가)
        municipality_name: 지자체명 (입력 대소문자 유지)
        recurrence_kind: 반복 유형
        tax_value: 세율 (0.08 = 8%)
        start_date: 적용 시작일 (포함)
        end_date: 적용 종료일 (포함)
        day_of_month: Monthly 전용 (1~31)
        day_of_week: Weekly 전용
        day_of_year: Yearly 선택 항목 (1~366)
        source: 출처 ("api", 가져오기 source_label, "seed:<file>")
        created_at: 생성 시각
        updated_at: 마지막 수정 시각
    """

    id: int
    municipality_name: str
    recurrence_kind: RecurrenceKind
    tax_value: Decimal
    start_date: date
    end_date: date
    day_of_month: Optional[int] = None
    day_of_week: Optional[Weekday] = None
    day_of_year: Optional[int] = None
    source: str = "api"
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: Optional[datetime] = None

    @classmethod
    def from_fields(cls, rule_id: int, fields: RuleFields, source: str = "api") -> "RuleRecord":
        """검증된 RuleFields로 레코드 생성"""
        return cls(
            id=rule_id,
            municipality_name=fields.municipality_name.strip(),
            recurrence_kind=fields.recurrence_kind,
            tax_value=fields.tax_value,
            start_date=fields.start_date,
            end_date=fields.end_date,
            day_of_month=fields.day_of_month,
            day_of_week=fields.day_of_week,
            day_of_year=fields.day_of_year,
            source=source,
        )

    @property
    def municipality_key(self) -> str:
        return normalize_municipality(self.municipality_name)

    def is_active_on(self, target_date: date) -> bool:
        """적용 기간 내 여부"""
        return self.start_date <= target_date <= self.end_date

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'municipality_name': self.municipality_name,
            'recurrence_kind': self.recurrence_kind.value,
            'tax_value': str(self.tax_value),
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
            'day_of_month': self.day_of_month,
            'day_of_week': self.day_of_week.value if self.day_of_week else None,
            'day_of_year': self.day_of_year,
            'source': self.source,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __str__(self) -> str:
        return (
            f"TaxRule(#{self.id} {self.municipality_name} "
            f"{self.recurrence_kind.value} {self.tax_value}, "
            f"{self.start_date}~{self.end_date})"
        )
