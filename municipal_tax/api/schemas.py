"""API 요청/응답 스키마 (Pydantic)

요청 스키마는 타입 변환까지만 담당합니다.
규칙 불변 조건 검증은 core의 validate_rule_fields()에서 수행하며,
위반 시 400 응답에 위반 사항 목록을 담아 돌려줍니다.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from ..core import ImportReport, RuleRecord, TaxResolution


# ============================================================================
# 세율 규칙
# ============================================================================

class TaxRuleRequest(BaseModel):
    """세율 규칙 추가 요청"""
    municipality_name: str = Field(..., description="지자체명")
    recurrence_kind: str = Field(..., description="Yearly, Monthly, Weekly, Daily")
    tax_value: Decimal = Field(..., description="세율 (0.08 = 8%)")
    start_date: date = Field(..., description="적용 시작일 (포함)")
    end_date: date = Field(..., description="적용 종료일 (포함)")
    day_of_month: Optional[int] = Field(None, description="Monthly 전용 (1~31)")
    day_of_week: Optional[str] = Field(None, description="Weekly 전용 (Monday~Sunday)")
    day_of_year: Optional[int] = Field(None, description="Yearly 선택 (1~366)")

    class Config:
        json_schema_extra = {
            "example": {
                "municipality_name": "Chennai",
                "recurrence_kind": "Monthly",
                "tax_value": "0.04",
                "start_date": "2024-01-01",
                "end_date": "2024-12-31",
                "day_of_month": 1
            }
        }


class TaxRuleUpdateRequest(TaxRuleRequest):
    """세율 규칙 수정 요청"""
    id: int = Field(..., description="수정할 규칙 ID")


class TaxRuleResponse(BaseModel):
    """세율 규칙 응답"""
    id: int
    municipality_name: str
    recurrence_kind: str
    tax_value: Decimal
    start_date: date
    end_date: date
    day_of_month: Optional[int] = None
    day_of_week: Optional[str] = None
    day_of_year: Optional[int] = None
    source: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: RuleRecord) -> "TaxRuleResponse":
        return cls(
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


# ============================================================================
# 세율 조회
# ============================================================================

class TaxResponse(BaseModel):
    """세율 조회 응답

    지자체는 있지만 적용 규칙이 없으면 tax=0, rule_id=None 입니다.
    """
    municipality: str
    date: date
    tax: Decimal
    rule_id: Optional[int] = None
    recurrence_kind: Optional[str] = None

    @classmethod
    def from_resolution(cls, resolution: TaxResolution) -> "TaxResponse":
        return cls(
            municipality=resolution.municipality_name,
            date=resolution.date,
            tax=resolution.tax_value if resolution.matched else Decimal("0"),
            rule_id=resolution.rule_id,
            recurrence_kind=resolution.recurrence_kind.value if resolution.recurrence_kind else None,
        )


# ============================================================================
# 일괄 가져오기
# ============================================================================

class RowFailureResponse(BaseModel):
    """실패 행"""
    row_number: int
    municipality_name: Optional[str] = None
    reason: str


class ImportReportResponse(BaseModel):
    """가져오기 결과"""
    source_label: str
    total: int
    succeeded: int
    failed: int
    failures: List[RowFailureResponse]
    created_ids: List[int]
    cancelled: bool
    message: str

    @classmethod
    def from_report(cls, report: ImportReport) -> "ImportReportResponse":
        return cls(
            message=f"{report.succeeded}/{report.total}개 규칙을 가져왔습니다.",
            **report.to_dict()
        )


# ============================================================================
# 에러 응답
# ============================================================================

class ValidationErrorDetail(BaseModel):
    """규칙 검증 실패 상세"""
    message: str
    errors: List[str]


class ErrorResponse(BaseModel):
    """에러 응답"""
    detail: Union[str, ValidationErrorDetail]
