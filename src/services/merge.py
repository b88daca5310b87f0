"""Merge of partial booking sets by booking id."""

from typing import Iterable, Sequence

from structlog import get_logger

from src.models.booking import Booking

logger = get_logger(__name__)


def exclude_cancelled(bookings: Iterable[Booking]) -> list[Booking]:
    """Drop bookings whose status is cancelled."""
    return [booking for booking in bookings if not booking.is_cancelled]


def merge_bookings(
    partials: Sequence[Iterable[Booking]],
    exclude_cancelled_status: bool = True,
) -> list[Booking]:
    """Fold partial booking sets into one set keyed by booking id.

    Partials are folded in the order given, so when the same id appears in
    two partials the later one wins. That order is the call-site order of the
    fetches, not a precedence between filter dimensions; differing versions
    are logged as merge conflicts.

    Cancelled bookings are removed after folding unless
    exclude_cancelled_status is False, so a booking whose latest version is
    cancelled disappears even if an earlier source still lists it as active.

    Args:
        partials: Booking sets in fetch order
        exclude_cancelled_status: Remove cancelled bookings

    Returns:
        One booking per id, in first-seen order
    """
    merged: dict = {}
    conflicts = 0

    for index, partial in enumerate(partials):
        for booking in partial:
            previous = merged.get(booking.id)
            if previous is not None and previous.to_payload() != booking.to_payload():
                conflicts += 1
                logger.debug(
                    "Merge conflict, later source wins",
                    booking_id=booking.id,
                    source_index=index,
                )
            merged[booking.id] = booking

    if conflicts:
        logger.info("Merged bookings with conflicting versions", conflicts=conflicts)

    result = list(merged.values())
    if exclude_cancelled_status:
        result = exclude_cancelled(result)
    return result
