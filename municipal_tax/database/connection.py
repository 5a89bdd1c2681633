"""데이터베이스 연결 설정"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from ..config import settings
from .models import Base


def create_db_engine(database_url: str, echo: bool = False):
    """SQLAlchemy 엔진 생성

    SQLite는 요청 스레드가 바뀌어도 같은 연결을 쓸 수 있도록 설정합니다.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False}
        )

    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,  # 연결 풀 헬스체크
        pool_size=5,
        max_overflow=10
    )


engine = create_db_engine(settings.database_url, echo=settings.sql_echo)

# 세션 팩토리
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def get_db() -> Generator[Session, None, None]:
    """데이터베이스 세션 의존성

    FastAPI 의존성으로 사용됩니다.

    Yields:
        데이터베이스 세션
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """데이터베이스 초기화

    모든 테이블을 생성합니다.
    """
    Base.metadata.create_all(bind=bind or engine)
