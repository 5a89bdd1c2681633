"""데이터베이스 모듈"""

from .models import Base, TaxRuleDB
from .connection import (
    engine,
    SessionLocal,
    create_db_engine,
    get_db,
    init_db
)
from .repository import TaxRuleRepository

__all__ = [
    'Base',
    'TaxRuleDB',
    'TaxRuleRepository',
    'engine',
    'SessionLocal',
    'create_db_engine',
    'get_db',
    'init_db'
]
