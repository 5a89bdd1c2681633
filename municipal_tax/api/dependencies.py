"""FastAPI 의존성"""

from fastapi import Depends

from ..config import Settings, settings
from ..core import BulkImporter, RuleResolver, RuleStore, get_default_store


def get_rule_store() -> RuleStore:
    return get_default_store()


def get_resolver(store: RuleStore = Depends(get_rule_store)) -> RuleResolver:
    return RuleResolver(store)


def get_importer(store: RuleStore = Depends(get_rule_store)) -> BulkImporter:
    return BulkImporter(store)


def get_settings() -> Settings:
    return settings
