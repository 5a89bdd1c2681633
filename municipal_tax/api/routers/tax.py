"""세율 조회 API 라우터"""

from fastapi import APIRouter, Depends, HTTPException, status

from ...core import ResolutionOutcome, RuleResolver
from ...core.rule import parse_date
from ..dependencies import get_resolver
from ..schemas import ErrorResponse, TaxResponse

router = APIRouter()


@router.get(
    "/{municipality_name}/{tax_date}",
    response_model=TaxResponse,
    responses={
        400: {"model": ErrorResponse, "description": "날짜 형식 오류"},
        404: {"model": ErrorResponse, "description": "등록되지 않은 지자체"},
    }
)
async def get_tax(
    municipality_name: str,
    tax_date: str,
    resolver: RuleResolver = Depends(get_resolver)
):
    """지자체/날짜별 적용 세율 조회

    날짜는 YYYY.MM.DD 또는 YYYY-MM-DD 형식입니다.
    (YYYY/MM/DD는 경로 구분자와 겹치므로 가져오기 파일에서만 사용할 수 있습니다.)
    지자체는 있지만 해당 날짜에 적용되는 규칙이 없으면 세율 0을 반환합니다.
    """
    try:
        target_date = parse_date(tax_date)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"날짜 형식이 올바르지 않습니다: {tax_date} (YYYY.MM.DD)"
        )

    resolution = resolver.resolve_detail(municipality_name, target_date)

    if resolution.outcome == ResolutionOutcome.UNKNOWN_MUNICIPALITY:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"지자체 '{municipality_name}'를 찾을 수 없습니다."
        )

    return TaxResponse.from_resolution(resolution)
