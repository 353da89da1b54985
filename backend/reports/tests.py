from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from unittest import mock

from django.test import SimpleTestCase, TestCase
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.test import APITestCase

from bookings.models import Booking
from core.testing import SessionMixin, create_booking, create_user, create_villa
from reports.exporters import (
    ReportExportError, export_invoice_pdf, export_report_pdf, format_rupiah, invoice_filename,
)
from reports.ledger import (
    UNKNOWN_VILLA, build_report, compute_financial_totals, default_date_range,
    group_by_villa, search_entries, split_revenue,
)
from reports.services import StaleEntryError, delete_entry, edit_entry_extra_bed, load_report
from users.identity import Identity
from users.models import UserProfile

JULY = (date(2025, 7, 1), date(2025, 7, 31))


def villa(id, name, owner_id=1, capacity=4):
    return SimpleNamespace(id=id, name=name, owner_id=owner_id, capacity=capacity)


def booking(villa_id, check_in, nights=2, amount="1000000", status="paid", order_id=None, **kwargs):
    check_in = date.fromisoformat(check_in)
    return SimpleNamespace(
        villa_id=villa_id,
        check_in_date=check_in,
        check_out_date=date.fromordinal(check_in.toordinal() + nights),
        name=kwargs.get("name", "Rina Putri"),
        guests=kwargs.get("guests", 2),
        amount=Decimal(amount),
        extra_bed=kwargs.get("extra_bed"),
        price_extra_bed=kwargs.get("price_extra_bed"),
        order_id=order_id or f"ORDER-{villa_id}-{check_in:%m%d}",
        payment_status=status,
    )


class RevenueSplitTests(SimpleTestCase):

    def test_sixty_forty(self):
        self.assertEqual(split_revenue(Decimal("1000000")), (Decimal("600000"), Decimal("400000")))

    def test_shares_round_half_up_independently(self):
        # 0.6 * 5 = 3, 0.4 * 5 = 2; 0.6 * 7 = 4.2 -> 4, 0.4 * 7 = 2.8 -> 3
        self.assertEqual(split_revenue(5), (Decimal("3"), Decimal("2")))
        self.assertEqual(split_revenue(7), (Decimal("4"), Decimal("3")))
        # 0.6 * 2.5 = 1.5 -> 2, 0.4 * 2.5 = 1.0 -> 1
        self.assertEqual(split_revenue(Decimal("2.5")), (Decimal("2"), Decimal("1")))

    def test_shares_stay_within_one_unit_of_price(self):
        for price in ["1", "3", "7", "13", "999", "1234567", "150001"]:
            with self.subTest(price=price):
                owner, manager = split_revenue(Decimal(price))
                self.assertLessEqual(abs(owner + manager - Decimal(price)), 1)

    def test_zero_and_missing_amount(self):
        self.assertEqual(split_revenue(None), (Decimal("0"), Decimal("0")))


class BuildReportTests(SimpleTestCase):

    def setUp(self):
        self.villas = [villa(1, "Villa Harau"), villa(2, "Villa Sarasah")]

    def test_date_filter_is_inclusive_on_check_in(self):
        bookings = [
            booking(1, "2025-06-30"),
            booking(1, "2025-07-01"),
            booking(2, "2025-07-31"),
            booking(2, "2025-08-01"),
        ]

        report = build_report(bookings, self.villas, *JULY)

        self.assertEqual([e.date_in for e in report.entries], [date(2025, 7, 1), date(2025, 7, 31)])
        self.assertEqual([e.id for e in report.entries], [1, 2])

    def test_entry_fields(self):
        report = build_report(
            [booking(2, "2025-07-10", amount="1500000", guests=3, extra_bed=1, price_extra_bed=Decimal("100000"))],
            self.villas, *JULY,
        )

        entry = report.entries[0]
        self.assertEqual(entry.villa, "Villa Sarasah")
        self.assertEqual(entry.visitor_name, "Rina Putri")
        self.assertEqual(entry.person_in_charge, "Rina Putri")
        self.assertEqual(entry.deposite, Decimal("1500000"))
        self.assertEqual(entry.villa_price, Decimal("1500000"))
        self.assertEqual(entry.owner_share, Decimal("900000"))
        self.assertEqual(entry.manager_share, Decimal("600000"))
        self.assertEqual(entry.capacity, 3)
        self.assertEqual(entry.guests, 3)
        self.assertEqual(entry.villa_capacity, 4)
        self.assertEqual(entry.extra_bed, 1)
        self.assertEqual(entry.price_extra_bed, Decimal("100000"))
        self.assertEqual(entry.notes, "ORDER-2-0710")

    def test_orphan_booking_is_unknown_villa(self):
        report = build_report([booking(99, "2025-07-10")], self.villas, *JULY)

        entry = report.entries[0]
        self.assertEqual(entry.villa, UNKNOWN_VILLA)
        self.assertIsNone(entry.villa_capacity)
        self.assertEqual(entry.extra_bed, 0)
        self.assertEqual(entry.price_extra_bed, Decimal("0"))

    def test_summary(self):
        bookings = [
            booking(1, "2025-07-01", nights=3, amount="1000000"),
            booking(2, "2025-07-05", nights=2, amount="500000", status="pending"),
        ]

        summary = build_report(bookings, self.villas, *JULY).summary

        self.assertEqual(summary.total_revenue, Decimal("1500000"))
        self.assertEqual(summary.total_bookings, 2)
        self.assertEqual(summary.average_booking_value, Decimal("750000.00"))
        # 5 booked nights over 31 days x 2 villas
        self.assertAlmostEqual(summary.occupancy_rate, 5 / 62 * 100)

    def test_empty_summary(self):
        summary = build_report([], [], *JULY).summary

        self.assertEqual(summary.total_revenue, Decimal("0"))
        self.assertEqual(summary.average_booking_value, Decimal("0"))
        self.assertEqual(summary.occupancy_rate, 0)

    def test_totals_count_paid_entries_only(self):
        bookings = [
            booking(1, "2025-07-01", amount="1000000", extra_bed=1, price_extra_bed=Decimal("100000")),
            booking(1, "2025-07-02", amount="700000", status="pending", extra_bed=2, price_extra_bed=Decimal("200000")),
        ]

        report = build_report(bookings, self.villas, *JULY)
        totals = report.totals

        self.assertEqual(len(report.entries), 2)
        self.assertEqual(totals.deposite, Decimal("1000000"))
        self.assertEqual(totals.villa_price, Decimal("1000000"))
        self.assertEqual(totals.owner_share, Decimal("600000"))
        self.assertEqual(totals.manager_share, Decimal("400000"))
        self.assertEqual(totals.extra_bed, 1)
        self.assertEqual(totals.price_extra_bed, Decimal("100000"))

    def test_no_paid_entries_means_zero_totals(self):
        totals = compute_financial_totals(
            build_report([booking(1, "2025-07-01", status="pending")], self.villas, *JULY).entries
        )

        self.assertEqual(totals.deposite, Decimal("0"))
        self.assertEqual(totals.extra_bed, 0)

    def test_default_range_is_month_to_date(self):
        self.assertEqual(default_date_range(date(2025, 7, 19)), (date(2025, 7, 1), date(2025, 7, 19)))

    def test_search(self):
        report = build_report(
            [
                booking(1, "2025-07-01", name="Rina Putri", order_id="ORDER-1-11"),
                booking(2, "2025-07-02", name="Budi", order_id="ORDER-2-22"),
            ],
            self.villas, *JULY,
        )

        self.assertEqual([e.id for e in search_entries(report.entries, "rina")], [1])
        self.assertEqual([e.id for e in search_entries(report.entries, "SARASAH")], [2])
        self.assertEqual([e.id for e in search_entries(report.entries, "order-2")], [2])
        self.assertEqual(len(search_entries(report.entries, "  ")), 2)


class GroupByVillaTests(SimpleTestCase):

    def setUp(self):
        self.villas = [villa(1, "Villa Harau", owner_id=10), villa(2, "Villa Sarasah", owner_id=20)]
        self.bookings = [
            booking(1, "2025-07-01", amount="1000000"),
            booking(2, "2025-07-02", amount="600000"),
            booking(1, "2025-07-03", amount="500000"),
            booking(99, "2025-07-04", amount="100000"),
        ]

    def test_admin_sees_every_villa(self):
        groups = group_by_villa(self.bookings, self.villas, Identity(id=1, username="admin", role="admin"))

        self.assertEqual([g.villa_name for g in groups], ["Villa Harau", "Villa Sarasah", UNKNOWN_VILLA])
        harau = groups[0]
        self.assertEqual(harau.total_bookings, 2)
        self.assertEqual(harau.total_revenue, Decimal("1500000"))
        self.assertEqual(harau.average_booking_value, Decimal("750000.00"))

    def test_owner_sees_own_villas_by_user_id(self):
        owner = Identity(id=20, username="Villa Harau", role="owner")

        groups = group_by_villa(self.bookings, self.villas, owner)

        self.assertEqual([g.villa_id for g in groups], [2])

    def test_other_roles_see_nothing(self):
        for identity in [Identity(id=10, username="staff", role="staff"), Identity(id=10, username="x"), None]:
            with self.subTest(identity=identity):
                self.assertEqual(group_by_villa(self.bookings, self.villas, identity), [])


class FormatRupiahTests(SimpleTestCase):

    def test_format(self):
        self.assertEqual(format_rupiah(Decimal("1000000")), "Rp 1.000.000")
        self.assertEqual(format_rupiah(Decimal("1500.50")), "Rp 1.501")
        self.assertEqual(format_rupiah(0), "Rp 0")
        self.assertEqual(format_rupiah(None), "Rp 0")
        self.assertEqual(format_rupiah(Decimal("-25000")), "-Rp 25.000")


class ReportServiceTests(TestCase):

    def setUp(self):
        self.owner = create_user("owner", role=UserProfile.Role.OWNER)
        self.villa = create_villa(self.owner)
        self.first = create_booking(self.villa, check_in=date(2025, 7, 10), check_out=date(2025, 7, 12))
        self.second = create_booking(self.villa, check_in=date(2025, 7, 15), check_out=date(2025, 7, 16))

    def test_edit_extra_bed_updates_booking_and_ledger(self):
        ledger = load_report(*JULY)

        entry = edit_entry_extra_bed(ledger, 2, 2, Decimal("150000"))

        self.second.refresh_from_db()
        self.assertEqual(self.second.extra_bed, 2)
        self.assertEqual(self.second.price_extra_bed, Decimal("150000"))
        self.assertEqual(entry.extra_bed, 2)
        self.assertEqual(ledger.get_entry(2), entry)
        self.assertEqual(ledger.totals.price_extra_bed, Decimal("150000"))

    def test_edit_is_idempotent(self):
        ledger = load_report(*JULY)

        once = edit_entry_extra_bed(ledger, 1, 1, Decimal("50000"))
        twice = edit_entry_extra_bed(ledger, 1, 1, Decimal("50000"))

        self.assertEqual(once, twice)
        self.assertEqual(ledger.entries, load_report(*JULY).entries)

    def test_edit_missing_booking_changes_nothing(self):
        ledger = load_report(*JULY)
        snapshot = list(Booking.objects.values())
        Booking.objects.filter(pk=self.first.pk).update(order_id="ORDER-renamed-1")
        snapshot[0]["order_id"] = "ORDER-renamed-1"

        with self.assertRaises(NotFound):
            edit_entry_extra_bed(ledger, 1, 3, Decimal("10"))

        self.assertEqual(list(Booking.objects.values()), snapshot)
        self.assertEqual(ledger.get_entry(1).extra_bed, 0)

    def test_edit_unknown_entry(self):
        with self.assertRaises(NotFound):
            edit_entry_extra_bed(load_report(*JULY), 42, 1, Decimal("1"))

    def test_delete_entry(self):
        ledger = load_report(*JULY)

        removed = delete_entry(ledger, 1)

        self.assertEqual(removed.notes, self.first.order_id)
        self.assertFalse(Booking.objects.filter(pk=self.first.pk).exists())
        self.assertEqual([e.notes for e in ledger.entries], [self.second.order_id])
        self.assertEqual(ledger.summary.total_bookings, 1)
        self.assertEqual(ledger.summary.total_revenue, Decimal("1000000"))

    def test_shifted_entry_is_rejected(self):
        ledger = load_report(*JULY)

        with self.assertRaises(StaleEntryError):
            delete_entry(ledger, 1, order_id=self.second.order_id)
        with self.assertRaises(StaleEntryError):
            edit_entry_extra_bed(ledger, 1, 1, Decimal("10"), order_id=self.second.order_id)

        self.assertEqual(Booking.objects.count(), 2)
        self.assertIsNone(Booking.objects.get(pk=self.first.pk).extra_bed)

    def test_delete_missing_booking(self):
        ledger = load_report(*JULY)
        self.first.delete()

        with self.assertRaises(NotFound):
            delete_entry(ledger, 1)
        self.assertEqual(len(ledger.entries), 2)
        self.assertTrue(Booking.objects.filter(pk=self.second.pk).exists())


class ReportAPITests(SessionMixin, APITestCase):

    def setUp(self):
        self.admin = create_user("admin", role=UserProfile.Role.ADMIN)
        self.owner = create_user("owner", role=UserProfile.Role.OWNER)
        self.other_owner = create_user("other", role=UserProfile.Role.OWNER)
        self.staff = create_user("staff", role=UserProfile.Role.STAFF)
        self.villa = create_villa(self.owner, name="Villa Harau")
        self.other_villa = create_villa(self.other_owner, name="Villa Sarasah")
        self.paid = create_booking(self.villa, check_in=date(2025, 7, 10), check_out=date(2025, 7, 12))
        self.pending = create_booking(
            self.other_villa, check_in=date(2025, 7, 11), check_out=date(2025, 7, 13),
            payment_status="pending", name="Budi", amount=Decimal("700000"),
        )
        self.period = "?date_from=2025-07-01&date_to=2025-07-31"
        self.login(self.admin)

    def entry_url(self, entry_id, booking):
        return f"/report/entries/{entry_id}/{self.period}&order_id={booking.order_id}"

    def test_report_data(self):
        response = self.client.get("/report/data/" + self.period)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data["data"]
        self.assertEqual([e["notes"] for e in data["entries"]], [self.paid.order_id, self.pending.order_id])
        self.assertEqual(data["summary"]["total_bookings"], 2)
        self.assertEqual(data["totals"]["villa_price"], "1000000.00")
        self.assertEqual(data["entries"][0]["owner_share"], "600000.00")

    def test_report_search(self):
        response = self.client.get("/report/data/" + self.period + "&search=budi")

        self.assertEqual([e["visitor_name"] for e in response.data["data"]["entries"]], ["Budi"])

    def test_invalid_range(self):
        response = self.client.get("/report/data/?date_from=2025-07-31&date_to=2025-07-01")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "End date must not be before start date")

    def test_villa_groups_are_scoped_to_owner(self):
        admin_view = self.client.get("/report/villas/" + self.period)
        self.login(self.owner)
        owner_view = self.client.get("/report/villas/" + self.period)

        self.assertEqual([g["villa_name"] for g in admin_view.data["data"]], ["Villa Harau", "Villa Sarasah"])
        self.assertEqual([g["villa_name"] for g in owner_view.data["data"]], ["Villa Harau"])

    def test_staff_is_sent_home(self):
        self.login(self.staff)

        response = self.client.get("/report/data/" + self.period)

        self.assertEqual(response.status_code, status.HTTP_302_FOUND)
        self.assertEqual(response["Location"], "/")

    def test_patch_entry(self):
        response = self.client.patch(
            self.entry_url(1, self.paid), {"extra_bed": 1, "price_extra_bed": "100000"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["extra_bed"], 1)
        self.paid.refresh_from_db()
        self.assertEqual(self.paid.price_extra_bed, Decimal("100000"))

    def test_patch_validation_and_missing_entry(self):
        negative = self.client.patch(
            self.entry_url(1, self.paid), {"extra_bed": -1, "price_extra_bed": "0"}, format="json"
        )
        missing = self.client.patch(
            self.entry_url(9, self.paid), {"extra_bed": 1, "price_extra_bed": "0"}, format="json"
        )

        self.assertEqual(negative.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(missing.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(missing.data, {"statusCode": 404, "error": "Entry 9 not found"})

    def test_delete_entry(self):
        response = self.client.delete(self.entry_url(2, self.pending))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["order_id"], self.pending.order_id)
        self.assertFalse(Booking.objects.filter(pk=self.pending.pk).exists())

    def test_entry_actions_require_order_id(self):
        response = self.client.delete("/report/entries/1/" + self.period)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "Order id is required")
        self.assertEqual(Booking.objects.count(), 2)

    def test_delete_after_earlier_booking_removed(self):
        later = create_booking(self.villa, check_in=date(2025, 7, 20), check_out=date(2025, 7, 22))
        url = self.entry_url(2, self.pending)
        self.paid.delete()

        response = self.client.delete(url)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"], "Report has changed, reload it and try again")
        self.assertTrue(Booking.objects.filter(pk=self.pending.pk).exists())
        self.assertTrue(Booking.objects.filter(pk=later.pk).exists())

    def test_export_pdf(self):
        response = self.client.get("/report/export/" + self.period)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response["Content-Type"], "application/pdf")
        self.assertIn("financial-report-20250701-20250731.pdf", response["Content-Disposition"])
        self.assertTrue(response.content.startswith(b"%PDF"))

    def test_invoice_pdf(self):
        response = self.client.get("/report/invoice/1/" + self.period)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn(f"invoice-villa-harau-{self.paid.order_id}.pdf", response["Content-Disposition"])
        self.assertTrue(response.content.startswith(b"%PDF"))

    def test_export_failure_is_500(self):
        with mock.patch("reports.exporters.pisa.CreatePDF", side_effect=RuntimeError("boom")), \
                self.assertLogs("reports.exporters", level="ERROR"):
            response = self.client.get("/report/export/" + self.period)

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {"statusCode": 500, "error": "Failed to generate PDF"})

    def test_report_page_titles(self):
        admin_page = self.client.get("/report/" + self.period)
        self.login(self.owner)
        owner_page = self.client.get("/report/" + self.period)

        self.assertContains(admin_page, "<h1>Villa Financial Report</h1>", html=False)
        self.assertContains(owner_page, "<h1>Your Villa Financial Report</h1>", html=False)
        self.assertContains(owner_page, self.pending.order_id)


class ExporterTests(SimpleTestCase):

    def setUp(self):
        self.report = build_report(
            [booking(1, "2025-07-10", extra_bed=1, price_extra_bed=Decimal("100000"))],
            [villa(1, "Villa Harau")],
            *JULY,
        )

    def test_report_pdf(self):
        self.assertTrue(export_report_pdf(self.report).startswith(b"%PDF"))

    def test_invoice_pdf(self):
        entry = self.report.entries[0]

        self.assertTrue(export_invoice_pdf(entry).startswith(b"%PDF"))
        self.assertEqual(invoice_filename(entry), "invoice-villa-harau-ORDER-1-0710.pdf")

    def test_renderer_errors_raise(self):
        failed = SimpleNamespace(err=1)
        with mock.patch("reports.exporters.pisa.CreatePDF", return_value=failed), \
                self.assertLogs("reports.exporters", level="ERROR"), \
                self.assertRaises(ReportExportError):
            export_report_pdf(self.report)
