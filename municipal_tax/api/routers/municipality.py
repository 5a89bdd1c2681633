"""세율 규칙 관리 API 라우터"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ...config import Settings
from ...core import (
    BulkImporter,
    ImportSourceError,
    NotFoundError,
    RuleFields,
    RuleStore,
    ValidationError,
)
from ...database import TaxRuleRepository, get_db
from ...sources import open_source
from ..dependencies import get_importer, get_rule_store, get_settings
from ..schemas import (
    ErrorResponse,
    ImportReportResponse,
    TaxRuleRequest,
    TaxRuleResponse,
    TaxRuleUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _validation_failed(e: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": "세율 규칙 검증 실패", "errors": e.errors}
    )


@router.post(
    "/taxrule",
    response_model=TaxRuleResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "규칙 검증 실패"}}
)
async def add_tax_rule(
    request: TaxRuleRequest,
    store: RuleStore = Depends(get_rule_store),
    db: Session = Depends(get_db)
):
    """세율 규칙 추가"""
    try:
        fields = RuleFields.from_row(request.model_dump())
        record = store.add(fields)
    except ValidationError as e:
        raise _validation_failed(e)

    try:
        TaxRuleRepository(db).save(record)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to persist tax rule #%d", record.id)
        raise

    return TaxRuleResponse.from_record(record)


@router.put(
    "/taxrule",
    response_model=TaxRuleResponse,
    responses={
        400: {"model": ErrorResponse, "description": "규칙 검증 실패"},
        404: {"model": ErrorResponse, "description": "존재하지 않는 규칙 ID"},
    }
)
async def update_tax_rule(
    request: TaxRuleUpdateRequest,
    store: RuleStore = Depends(get_rule_store),
    db: Session = Depends(get_db)
):
    """세율 규칙 수정

    ID는 유지되고 나머지 필드는 모두 교체됩니다.
    """
    try:
        fields = RuleFields.from_row(request.model_dump(exclude={'id'}))
        record = store.update(request.id, fields)
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"세율 규칙 ID {request.id}를 찾을 수 없습니다."
        )
    except ValidationError as e:
        raise _validation_failed(e)

    try:
        TaxRuleRepository(db).save(record)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to persist tax rule #%d", record.id)
        raise

    return TaxRuleResponse.from_record(record)


@router.get("/{municipality_name}/taxrules", response_model=List[TaxRuleResponse])
async def list_tax_rules(
    municipality_name: str,
    store: RuleStore = Depends(get_rule_store)
):
    """지자체의 세율 규칙 목록 (ID 순)"""
    records = sorted(store.list(municipality_name), key=lambda r: r.id)
    return [TaxRuleResponse.from_record(r) for r in records]


@router.post(
    "/import-tax-rules",
    response_model=ImportReportResponse,
    responses={400: {"model": ErrorResponse, "description": "파일을 읽을 수 없음"}}
)
async def import_tax_rules(
    file_path: str = Query(..., alias="filePath", description="가져올 CSV 파일 경로"),
    file_source_type: str = Query("Local", alias="fileSourceType", description="파일 소스 유형"),
    importer: BulkImporter = Depends(get_importer),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db)
):
    """CSV 파일에서 세율 규칙 일괄 가져오기

    행 단위로 처리하며, 실패한 행은 결과의 failures에 기록됩니다.
    파일 자체를 읽을 수 없는 경우에만 400을 반환합니다.
    """
    try:
        rows = open_source(file_source_type, file_path, base_dir=settings.import_base_dir)
    except ImportSourceError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"가져오기 실패: {str(e)}"
        )

    report = importer.import_rows(rows, source_label=f"{file_source_type}:{file_path}")

    try:
        repository = TaxRuleRepository(db)
        repository.save_all(importer.store.get(rule_id) for rule_id in report.created_ids)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to persist imported tax rules from %s", file_path)
        raise

    return ImportReportResponse.from_report(report)
