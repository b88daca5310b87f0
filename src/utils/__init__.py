"""Shared utilities."""

from src.utils.civil_date import add_days, add_months, now_local, parse_civil_date, today

__all__ = ["today", "now_local", "add_days", "add_months", "parse_civil_date"]
