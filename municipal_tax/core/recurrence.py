"""반복 유형별 날짜 매칭

모든 함수는 부수효과가 없는 순수 함수입니다.
적용 기간 밖의 날짜는 반복 유형과 무관하게 매칭되지 않습니다.
"""

from datetime import date
from typing import Callable, Dict

from .rule import RecurrenceKind, RuleRecord


def _matches_daily(rule: RuleRecord, target_date: date) -> bool:
    return True


def _matches_weekly(rule: RuleRecord, target_date: date) -> bool:
    return rule.day_of_week is not None and target_date.weekday() == rule.day_of_week.number


def _matches_monthly(rule: RuleRecord, target_date: date) -> bool:
    # 짧은 달에 없는 날짜(예: 31일)는 다음 달로 넘기지 않음
    return target_date.day == rule.day_of_month


def _matches_yearly(rule: RuleRecord, target_date: date) -> bool:
    if rule.day_of_year is None:
        return True
    return target_date.timetuple().tm_yday == rule.day_of_year


MATCHERS: Dict[RecurrenceKind, Callable[[RuleRecord, date], bool]] = {
    RecurrenceKind.DAILY: _matches_daily,
    RecurrenceKind.WEEKLY: _matches_weekly,
    RecurrenceKind.MONTHLY: _matches_monthly,
    RecurrenceKind.YEARLY: _matches_yearly,
}


def matches(rule: RuleRecord, target_date: date) -> bool:
    """규칙이 해당 날짜에 적용되는지 확인

    Args:
        rule: 세율 규칙
        target_date: 조회 날짜

    Returns:
        적용 기간 내이고 반복 패턴에 맞으면 True
    """
    if not rule.is_active_on(target_date):
        return False
    return MATCHERS[rule.recurrence_kind](rule, target_date)
