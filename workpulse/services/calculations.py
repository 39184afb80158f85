from datetime import datetime, timedelta

from workpulse.config import SECONDS_PER_MINUTE


def format_duration(seconds: int) -> str:
    """Format seconds as HH:MM:SS, or MM:SS when under an hour"""
    hours, remainder = divmod(int(abs(seconds)), 3600)
    minutes, secs = divmod(remainder, 60)
    sign = "-" if seconds < 0 else ""
    if hours > 0:
        return f"{sign}{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{sign}{minutes:02d}:{secs:02d}"


def format_minutes(seconds: int) -> str:
    """Format seconds as whole minutes, e.g. '25 min'"""
    return f"{int(seconds) // 60} min"


def format_time(dt: datetime) -> str:
    """Format datetime as HH:MM:SS"""
    return dt.strftime("%H:%M:%S")


def format_date_key(dt: datetime) -> str:
    """Format datetime as the YYYY/MM/DD key history is grouped by"""
    return dt.strftime("%Y/%m/%d")


def day_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Half-open local-time range [start_of_day, start_of_day + 1 day) containing now"""
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return start_of_day, start_of_day + timedelta(days=1)


def target_seconds(target_minutes: int) -> int:
    return target_minutes * SECONDS_PER_MINUTE


def calculate_target_progress(target_minutes: int, remaining_seconds: int) -> float:
    """
    Fraction of the target focus block already done, 0.0 to 1.0.
    Returns 0 when there is no meaningful target.
    """
    total = target_seconds(target_minutes)
    if total <= 0:
        return 0.0
    return max(0.0, min(1.0, 1.0 - remaining_seconds / total))
