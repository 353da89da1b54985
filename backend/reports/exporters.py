import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from io import BytesIO

from django.template.loader import render_to_string
from django.utils import timezone
from django.utils.text import slugify
from rest_framework.exceptions import APIException
from xhtml2pdf import pisa

from .ledger import search_entries, compute_financial_totals, to_decimal

logger = logging.getLogger(__name__)


class ReportExportError(APIException):
    """The PDF renderer could not produce a document."""
    status_code = 500
    default_detail = "Failed to generate PDF"
    default_code = "export_failed"


def format_rupiah(amount):
    """Whole Rupiah with dot thousands separators: ``Rp 1.000.000``."""
    if amount is None:
        return "Rp 0"
    try:
        value = to_decimal(amount).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return "Rp 0"

    formatted = f"{abs(int(value)):,}".replace(",", ".")
    if value < 0:
        return f"-Rp {formatted}"
    return f"Rp {formatted}"


def render_pdf(template_name, context):
    html = render_to_string(template_name, context)
    buffer = BytesIO()
    try:
        result = pisa.CreatePDF(html, dest=buffer, encoding="UTF-8")
    except Exception as exc:
        logger.exception(f"PDF renderer crashed on {template_name}")
        raise ReportExportError() from exc

    if result.err:
        logger.error(f"PDF renderer reported {result.err} error(s) on {template_name}")
        raise ReportExportError()
    return buffer.getvalue()


def report_filename(report):
    return f"financial-report-{report.date_from:%Y%m%d}-{report.date_to:%Y%m%d}.pdf"


def export_report_pdf(report, title="Villa Financial Report", search=None):
    entries = search_entries(report.entries, search)
    context = {
        "title": title,
        "date_from": report.date_from,
        "date_to": report.date_to,
        "summary": report.summary,
        "entries": entries,
        "totals": compute_financial_totals(entries),
        "generated_at": timezone.localtime(),
    }
    pdf = render_pdf("reports/report_pdf.html", context)
    logger.info(f"Report PDF rendered for {report.date_from} - {report.date_to} ({len(entries)} entries)")
    return pdf


def invoice_filename(entry):
    return f"invoice-{slugify(entry.villa) or 'villa'}-{entry.notes}.pdf"


def export_invoice_pdf(entry):
    context = {
        "entry": entry,
        "total": entry.villa_price + entry.price_extra_bed,
        "generated_at": timezone.localtime(),
    }
    pdf = render_pdf("reports/invoice_pdf.html", context)
    logger.info(f"Invoice PDF rendered for {entry.notes}")
    return pdf
