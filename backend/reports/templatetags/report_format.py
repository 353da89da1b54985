from django import template

from reports.exporters import format_rupiah
from reports.ledger import PAID

register = template.Library()


@register.filter
def rupiah(value):
    return format_rupiah(value)


@register.filter
def payment_label(status):
    return "Paid" if status == PAID else "Unpaid"


@register.filter
def percent(value):
    return f"{float(value or 0):.1f}%"
