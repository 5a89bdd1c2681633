"""FastAPI 애플리케이션 메인"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from .. import __version__
from ..config import settings
from ..core import BulkImporter, ImportSourceError, RuleStore, get_default_store, load_seed_rules
from ..database import SessionLocal, TaxRuleRepository, init_db
from ..logging_config import configure_logging
from .middleware import RequestLoggingMiddleware
from .routers import municipality, tax

logger = logging.getLogger(__name__)


def load_rules(store: RuleStore, db: Session, seed_file: Optional[Path] = None) -> int:
    """저장된 규칙을 RuleStore에 적재

    데이터베이스가 비어 있고 시드 파일이 있으면 시드 규칙을 가져와 저장합니다.

    Returns:
        적재된 규칙 수
    """
    repository = TaxRuleRepository(db)
    loaded = store.hydrate(repository.load_all())
    if loaded or seed_file is None:
        return loaded

    try:
        report = load_seed_rules(BulkImporter(store), seed_file)
    except ImportSourceError as e:
        logger.warning("Seed rules skipped: %s", e)
        return 0

    repository.save_all(store.get(rule_id) for rule_id in report.created_ids)
    db.commit()
    return report.succeeded


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 라이프사이클 관리"""
    configure_logging(settings.log_level, settings.log_file)

    # 시작 시 데이터베이스 초기화 및 규칙 적재
    init_db()
    db = SessionLocal()
    try:
        count = load_rules(get_default_store(), db, settings.seed_rules_file)
    finally:
        db.close()
    logger.info("Municipality tax API started with %d tax rules", count)
    yield


# FastAPI 앱 생성
app = FastAPI(
    title="Municipality Tax API",
    description="지자체별 세율 규칙 관리 및 조회 API",
    version=__version__,
    lifespan=lifespan
)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # 프로덕션에서는 특정 도메인만 허용
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

# 라우터 등록
app.include_router(
    tax.router,
    prefix="/api/Tax",
    tags=["세율조회"]
)

app.include_router(
    municipality.router,
    prefix="/api/Municipality",
    tags=["세율규칙"]
)


@app.get("/")
async def root():
    """루트 엔드포인트"""
    return {
        "message": "Municipality Tax API",
        "version": __version__,
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """헬스체크 엔드포인트"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("municipal_tax.api.main:app", host="0.0.0.0", port=5000)
