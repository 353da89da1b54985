import logging

from django.db import transaction
from rest_framework import status
from rest_framework.exceptions import APIException, NotFound

from bookings.models import Booking
from villas.models import Villa
from .ledger import build_report, group_by_villa, filter_by_check_in, with_extra_bed

logger = logging.getLogger(__name__)


class StaleEntryError(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Report has changed, reload it and try again"
    default_code = "stale_entry"


def fetch_bookings():
    return list(Booking.objects.order_by("id"))


def fetch_villas():
    return list(Villa.objects.order_by("id"))


def load_report(date_from=None, date_to=None):
    """Build the ledger for ``[date_from, date_to]`` from the current store."""
    return build_report(fetch_bookings(), fetch_villas(), date_from, date_to)


def load_villa_groups(identity, date_from, date_to):
    bookings = filter_by_check_in(fetch_bookings(), date_from, date_to)
    return group_by_villa(bookings, fetch_villas(), identity)


def resolve_entry(ledger, entry_id, order_id=None):
    """
    Look up an entry by its position. When ``order_id`` is given the entry
    must still belong to that booking, since positions shift as bookings
    are added or removed.
    """
    entry = ledger.get_entry(entry_id)
    if entry is None:
        raise NotFound(f"Entry {entry_id} not found")
    if order_id is not None and entry.notes != order_id:
        logger.warning(f"Entry {entry_id} is {entry.notes}, expected {order_id}")
        raise StaleEntryError()
    return entry


def resolve_booking(entry):
    booking = Booking.objects.filter(order_id=entry.notes).first()
    if booking is None:
        raise NotFound(f"Booking {entry.notes} not found")
    return booking


def edit_entry_extra_bed(ledger, entry_id, extra_bed, price_extra_bed, identity=None, order_id=None):
    """
    Set the extra-bed count and price on the booking behind a ledger entry
    and swap the updated entry into ``ledger``.
    """
    entry = resolve_entry(ledger, entry_id, order_id)

    with transaction.atomic():
        booking = resolve_booking(entry)
        booking.extra_bed = extra_bed
        booking.price_extra_bed = price_extra_bed
        booking.save(update_fields=["extra_bed", "price_extra_bed", "updated_at"])

    updated = with_extra_bed(entry, extra_bed, price_extra_bed)
    ledger.replace_entry(updated)

    logger.info(
        f"Extra bed on {entry.notes} set to {extra_bed} @ {price_extra_bed}"
        f" by {identity.username if identity else 'system'}"
    )
    return updated


def delete_entry(ledger, entry_id, identity=None, order_id=None):
    entry = resolve_entry(ledger, entry_id, order_id)

    with transaction.atomic():
        booking = resolve_booking(entry)
        booking.delete()

    ledger.remove_entry(entry_id)

    logger.info(f"Booking {entry.notes} deleted from report by {identity.username if identity else 'system'}")
    return entry
