"""Reporting period selection: one calendar month."""

from datetime import date
from typing import Optional, Union
import calendar
import logging
import re

from .models.transaction import ReportingPeriod
from .utils.exceptions import PeriodError

logger = logging.getLogger(__name__)


def previous_month(today: Optional[date] = None) -> tuple[int, int]:
    """Return (year, month) of the month before ``today``."""
    today = today or date.today()
    if today.month == 1:
        return today.year - 1, 12
    return today.year, today.month - 1


def build_period(
    month: Optional[Union[int, str]] = None,
    year: Optional[Union[int, str]] = None,
    today: Optional[date] = None,
) -> ReportingPeriod:
    """
    Validate month/year input and build the reporting period.

    Blank values default to the previous calendar month.

    Args:
        month: Month number 1-12 (leading zeros allowed)
        year: Four-digit year

    Returns:
        Period covering the first to the last day of the month

    Raises:
        PeriodError: If month or year is malformed
    """
    default_year, default_month = previous_month(today)

    month_value = _parse_month(month, default_month)
    year_value = _parse_year(year, default_year)

    last_day = calendar.monthrange(year_value, month_value)[1]
    period = ReportingPeriod(
        year=year_value,
        month=month_value,
        begin=date(year_value, month_value, 1),
        end=date(year_value, month_value, last_day),
    )
    logger.debug(f"Date range: {period.begin_timestamp} to {period.end_timestamp}")
    return period


def _parse_month(value: Optional[Union[int, str]], default: int) -> int:
    if value is None or str(value).strip() == "":
        return default
    text = str(value).strip()
    if not text.isdigit() or not 1 <= int(text) <= 12:
        raise PeriodError("Month must be a number between 1 and 12")
    return int(text)


def _parse_year(value: Optional[Union[int, str]], default: int) -> int:
    if value is None or str(value).strip() == "":
        return default
    text = str(value).strip()
    if not re.fullmatch(r"[0-9]{4}", text):
        raise PeriodError("Year must be a 4-digit number")
    return int(text)
