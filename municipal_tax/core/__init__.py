"""핵심 비즈니스 로직"""

from .exceptions import TaxRuleError, ValidationError, NotFoundError, ImportSourceError
from .rule import RecurrenceKind, Weekday, RuleFields, RuleRecord, validate_rule_fields
from .recurrence import matches
from .resolver import RuleResolver, TaxResolution, ResolutionOutcome
from .rule_store import RuleStore, get_default_store, reset_default_store
from .bulk_importer import BulkImporter, ImportReport, RowFailure
from .seed import load_seed_rules

__all__ = [
    'TaxRuleError',
    'ValidationError',
    'NotFoundError',
    'ImportSourceError',
    'RecurrenceKind',
    'Weekday',
    'RuleFields',
    'RuleRecord',
    'validate_rule_fields',
    'matches',
    'RuleResolver',
    'TaxResolution',
    'ResolutionOutcome',
    'RuleStore',
    'get_default_store',
    'reset_default_store',
    'BulkImporter',
    'ImportReport',
    'RowFailure',
    'load_seed_rules',
]
