"""Utility functions for rentmate."""

from rentmate.utils.date_parser import parse_date
from rentmate.utils.amount_parser import parse_amount, parse_share
from rentmate.utils.user_resolver import resolve_user

__all__ = ["parse_date", "parse_amount", "parse_share", "resolve_user"]
