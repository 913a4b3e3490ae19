"""Utility modules."""
from quiz_api.utils.time_utils import ensure_utc, seconds_until, to_iso
from quiz_api.utils.validation import validate_id

__all__ = [
    "ensure_utc",
    "seconds_until",
    "to_iso",
    "validate_id",
]
