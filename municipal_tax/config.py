"""애플리케이션 설정 (환경 변수)"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# 패키지 데이터로 함께 배포되는 규칙 파일
RULES_DIR = Path(__file__).parent / "rules"
DEFAULT_SEED_RULES_FILE = RULES_DIR / "seed_rules.yaml"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class Settings:
    """환경 변수 기반 설정

    Attributes:
        database_url: SQLAlchemy 데이터베이스 URL (DATABASE_URL)
        sql_echo: SQL 로깅 여부 (SQL_ECHO)
        log_level: 로그 레벨 (LOG_LEVEL)
        log_file: 일 단위 롤링 로그 파일 경로, 없으면 콘솔만 (LOG_FILE)
        seed_rules_file: 시드 규칙 YAML 경로, 빈 문자열이면 비활성화 (SEED_RULES_FILE)
        import_base_dir: 가져오기 상대 경로 기준 디렉토리 (IMPORT_BASE_DIR)
    """

    database_url: str = "sqlite:///./municipal_tax.db"
    sql_echo: bool = False
    log_level: str = "INFO"
    log_file: Optional[str] = None
    seed_rules_file: Optional[Path] = DEFAULT_SEED_RULES_FILE
    import_base_dir: Path = Path(".")

    @classmethod
    def from_env(cls) -> "Settings":
        seed = os.getenv("SEED_RULES_FILE")
        if seed is None:
            seed_path = DEFAULT_SEED_RULES_FILE
        else:
            seed_path = Path(seed) if seed.strip() else None

        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            sql_echo=_env_bool("SQL_ECHO", False),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            log_file=os.getenv("LOG_FILE") or None,
            seed_rules_file=seed_path,
            import_base_dir=Path(os.getenv("IMPORT_BASE_DIR", ".")),
        )


settings = Settings.from_env()
