# apps/detention/seats.py
"""
Seat guard: the only code that changes ``DetentionSlot.current_count``.

Both operations are a single conditional UPDATE, so two requests racing for
the last seat cannot both win.
"""

import logging

from django.db.models import F

from apps.core.exceptions import persistence_guard
from .models import DetentionSlot

logger = logging.getLogger(__name__)


def reserve_seat(slot_id):
    """Take one seat if the slot has room. Returns True when a seat was taken."""
    with persistence_guard('reserve a detention seat'):
        updated = DetentionSlot.objects.filter(
            pk=slot_id,
            current_count__lt=F('capacity'),
        ).update(current_count=F('current_count') + 1)
    if not updated:
        logger.info(f"No seat left on slot {slot_id}")
    return bool(updated)


def release_seat(slot_id):
    """Give one seat back. Returns False when the slot was already empty."""
    with persistence_guard('release a detention seat'):
        updated = DetentionSlot.objects.filter(
            pk=slot_id,
            current_count__gt=0,
        ).update(current_count=F('current_count') - 1)
    return bool(updated)
