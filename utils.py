from datetime import datetime


def to_local_naive(value: datetime) -> datetime:
    """Fixture dates are local calendar days, so compare against naive local time"""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def percentage(part: float, whole: float) -> float:
    """Percentage with one decimal place, 0.0 for an empty whole"""
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, 1)
