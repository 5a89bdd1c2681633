"""데이터베이스 모델 정의"""

from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Integer, Numeric, String
from sqlalchemy.orm import declarative_base

from ..core.rule import TAX_VALUE_DIGITS, TAX_VALUE_PLACES

Base = declarative_base()


class TaxRuleDB(Base):
    """세율 규칙 테이블

    RuleStore의 RuleRecord를 그대로 저장합니다.
    id는 RuleStore가 부여한 값을 사용합니다 (자동 증가 아님).
    """
    __tablename__ = "tax_rules"

    id = Column(Integer, primary_key=True, autoincrement=False)

    municipality_name = Column(String(200), nullable=False, index=True)
    recurrence_kind = Column(String(20), nullable=False, comment="Yearly, Monthly, Weekly, Daily")
    tax_value = Column(Numeric(TAX_VALUE_DIGITS, TAX_VALUE_PLACES), nullable=False, comment="세율 (0.08 = 8%)")

    # 적용 기간 (양 끝 포함)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    # 반복 유형별 보조 필드
    day_of_month = Column(Integer, nullable=True, comment="Monthly 전용")
    day_of_week = Column(String(20), nullable=True, comment="Weekly 전용")
    day_of_year = Column(Integer, nullable=True, comment="Yearly 선택")

    # 메타데이터
    source = Column(String(200), nullable=False, default="api", comment="출처")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return (
            f"<TaxRule(id={self.id}, municipality={self.municipality_name}, "
            f"kind={self.recurrence_kind}, tax={self.tax_value})>"
        )
