"""Calendar schedule transcoder for the production scheduling portal.

Converts between structured schedules (days of labeled activity stripes) and
the annotated day-by-day text exchanged with users and the generation service.
"""

from src.transcoder.decoder import decode_text
from src.transcoder.encoder import encode_schedule, fill_month
from src.transcoder.merge_codes import assign_merge_codes
from src.transcoder.models import ScheduleDay, Stripe
from src.transcoder.recovery import RecoveryGate, looks_like_json

__all__ = [
    "ScheduleDay",
    "Stripe",
    "encode_schedule",
    "fill_month",
    "decode_text",
    "assign_merge_codes",
    "RecoveryGate",
    "looks_like_json",
]
