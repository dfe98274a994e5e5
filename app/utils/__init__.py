"""Utility functions."""

from app.utils.time import as_utc, format_datetime, utc_now

__all__ = ["utc_now", "format_datetime", "as_utc"]
