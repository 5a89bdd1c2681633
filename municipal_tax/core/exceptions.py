"""세금 규칙 엔진 예외 정의"""

from typing import List


class TaxRuleError(Exception):
    """세금 규칙 엔진 기본 예외"""


class ValidationError(TaxRuleError):
    """규칙 필드 검증 실패

    위반된 제약 조건을 모두 모아서 전달합니다.

    Attributes:
        errors: 위반 사항 목록
    """

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class NotFoundError(TaxRuleError):
    """존재하지 않는 규칙 ID"""

    def __init__(self, rule_id: int):
        self.rule_id = rule_id
        super().__init__(f"Tax rule {rule_id} not found")


class ImportSourceError(TaxRuleError):
    """가져오기 입력을 읽을 수 없는 경우 (파일 없음, 형식 오류 등)"""
