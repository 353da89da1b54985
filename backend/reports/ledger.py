"""
Financial reconciliation over bookings and villas.

Everything here is pure: callers hand in already-fetched bookings and
villas (model instances or any objects exposing the same attributes) and
get plain values back. Persistence lives in ``reports.services``.
"""
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

UNKNOWN_VILLA = "Unknown Villa"
PAID = "paid"

OWNER_RATIO = Decimal("0.6")
MANAGER_RATIO = Decimal("0.4")

ZERO = Decimal("0")
WHOLE = Decimal("1")
CENTS = Decimal("0.01")


@dataclass(frozen=True)
class LedgerEntry:
    id: int
    date_in: date
    date_out: date
    visitor_name: str
    person_in_charge: str
    deposite: Decimal
    villa: str
    # Booking guests, kept under the historical column name
    capacity: int
    guests: int
    villa_capacity: int | None
    extra_bed: int
    price_extra_bed: Decimal
    villa_price: Decimal
    owner_share: Decimal
    manager_share: Decimal
    notes: str
    payment_status: str

    @property
    def is_paid(self):
        return self.payment_status == PAID

    @property
    def order_id(self):
        return self.notes


@dataclass(frozen=True)
class Summary:
    total_revenue: Decimal
    total_bookings: int
    average_booking_value: Decimal
    occupancy_rate: float


@dataclass(frozen=True)
class Totals:
    deposite: Decimal = ZERO
    extra_bed: int = 0
    price_extra_bed: Decimal = ZERO
    villa_price: Decimal = ZERO
    owner_share: Decimal = ZERO
    manager_share: Decimal = ZERO


@dataclass(frozen=True)
class VillaGroup:
    villa_id: int | None
    villa_name: str
    total_revenue: Decimal
    total_bookings: int
    average_booking_value: Decimal
    bookings: list = field(default_factory=list)


@dataclass
class FinancialReport:
    date_from: date
    date_to: date
    entries: list
    summary: Summary
    villa_count: int = 0

    @property
    def totals(self):
        return compute_financial_totals(self.entries)

    def get_entry(self, entry_id):
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None

    def replace_entry(self, entry):
        self.entries = [entry if e.id == entry.id else e for e in self.entries]

    def remove_entry(self, entry_id):
        self.entries = [e for e in self.entries if e.id != entry_id]
        self.summary = summarize_stays(
            [e.villa_price for e in self.entries],
            [(e.date_out - e.date_in).days for e in self.entries],
            self.villa_count,
            self.date_from,
            self.date_to,
        )


def to_decimal(value):
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def split_revenue(villa_price):
    """
    60/40 owner/manager split, each share rounded half-up to a whole unit.
    The two shares are not forced to add back up to ``villa_price``.
    """
    price = to_decimal(villa_price)
    owner_share = (price * OWNER_RATIO).quantize(WHOLE, rounding=ROUND_HALF_UP)
    manager_share = (price * MANAGER_RATIO).quantize(WHOLE, rounding=ROUND_HALF_UP)
    return owner_share, manager_share


def default_date_range(today=None):
    today = today or date.today()
    return today.replace(day=1), today


def filter_by_check_in(bookings, date_from, date_to):
    return [b for b in bookings if date_from <= b.check_in_date <= date_to]


def index_villas(villas):
    return {villa.id: villa for villa in villas}


def make_entry(sequence, booking, villa):
    villa_price = to_decimal(booking.amount)
    owner_share, manager_share = split_revenue(villa_price)

    return LedgerEntry(
        id=sequence,
        date_in=booking.check_in_date,
        date_out=booking.check_out_date,
        visitor_name=booking.name,
        person_in_charge=booking.name,
        deposite=villa_price,
        villa=villa.name if villa else UNKNOWN_VILLA,
        capacity=booking.guests,
        guests=booking.guests,
        villa_capacity=villa.capacity if villa else None,
        extra_bed=booking.extra_bed or 0,
        price_extra_bed=to_decimal(booking.price_extra_bed),
        villa_price=villa_price,
        owner_share=owner_share,
        manager_share=manager_share,
        notes=booking.order_id,
        payment_status=booking.payment_status,
    )


def average(total, count):
    if not count:
        return ZERO
    return (total / count).quantize(CENTS, rounding=ROUND_HALF_UP)


def summarize(bookings, villa_count, date_from, date_to):
    return summarize_stays(
        [to_decimal(b.amount) for b in bookings],
        [(b.check_out_date - b.check_in_date).days for b in bookings],
        villa_count,
        date_from,
        date_to,
    )


def summarize_stays(amounts, nights, villa_count, date_from, date_to):
    total_revenue = sum(amounts, ZERO)
    total_bookings = len(amounts)

    days_in_range = (date_to - date_from).days + 1
    possible_nights = days_in_range * villa_count
    booked_nights = sum(nights)
    occupancy_rate = booked_nights / possible_nights * 100 if possible_nights > 0 else 0.0

    return Summary(
        total_revenue=total_revenue,
        total_bookings=total_bookings,
        average_booking_value=average(total_revenue, total_bookings),
        occupancy_rate=occupancy_rate,
    )


def compute_financial_totals(entries):
    """Column totals over paid entries only."""
    paid = [entry for entry in entries if entry.is_paid]
    return Totals(
        deposite=sum((e.deposite for e in paid), ZERO),
        extra_bed=sum(e.extra_bed for e in paid),
        price_extra_bed=sum((e.price_extra_bed for e in paid), ZERO),
        villa_price=sum((e.villa_price for e in paid), ZERO),
        owner_share=sum((e.owner_share for e in paid), ZERO),
        manager_share=sum((e.manager_share for e in paid), ZERO),
    )


def build_report(bookings, villas, date_from=None, date_to=None):
    if date_from is None or date_to is None:
        default_from, default_to = default_date_range()
        date_from = date_from or default_from
        date_to = date_to or default_to

    villas = list(villas)
    villa_map = index_villas(villas)
    filtered = filter_by_check_in(bookings, date_from, date_to)

    entries = [
        make_entry(index, booking, villa_map.get(booking.villa_id))
        for index, booking in enumerate(filtered, start=1)
    ]
    return FinancialReport(
        date_from=date_from,
        date_to=date_to,
        entries=entries,
        summary=summarize(filtered, len(villas), date_from, date_to),
        villa_count=len(villas),
    )


def search_entries(entries, term):
    term = (term or "").strip().lower()
    if not term:
        return list(entries)
    return [
        entry for entry in entries
        if term in entry.visitor_name.lower()
        or term in entry.villa.lower()
        or term in (entry.notes or "").lower()
    ]


def with_extra_bed(entry, extra_bed, price_extra_bed):
    return replace(
        entry,
        extra_bed=extra_bed or 0,
        price_extra_bed=to_decimal(price_extra_bed),
    )


def group_by_villa(bookings, villas, identity):
    """
    Per-villa revenue for the caller: admins see every villa, owners the
    villas they own (matched on user id), everyone else nothing.
    """
    if identity is None or not (identity.is_admin or identity.is_owner):
        return []

    villa_map = index_villas(villas)
    grouped = {}
    for booking in bookings:
        grouped.setdefault(booking.villa_id, []).append(booking)

    groups = []
    for villa_id, villa_bookings in grouped.items():
        villa = villa_map.get(villa_id)
        if not identity.is_admin and (villa is None or villa.owner_id != identity.id):
            continue

        total_revenue = sum((to_decimal(b.amount) for b in villa_bookings), ZERO)
        groups.append(VillaGroup(
            villa_id=villa_id,
            villa_name=villa.name if villa else UNKNOWN_VILLA,
            total_revenue=total_revenue,
            total_bookings=len(villa_bookings),
            average_booking_value=average(total_revenue, len(villa_bookings)),
            bookings=villa_bookings,
        ))
    return groups
