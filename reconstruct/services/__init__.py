from reconstruct.services.activity import increment, reconcile
from reconstruct.services.calendar import normalize_color_code
from reconstruct.services.email import send_welcome_email
from reconstruct.services.upsert import resolve_saveable_table

__all__ = [
    "increment",
    "normalize_color_code",
    "reconcile",
    "resolve_saveable_table",
    "send_welcome_email",
]
