import support

import asyncio
import gc
import unittest
from datetime import date, timedelta
from decimal import Decimal

from db import crud
from db import models
from db.models import InvoiceStatus
from services import billing
from utils.errors import ConcurrentModification, NotFound, ValidationFailed


class BillingTestCase(support.DatabaseTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.pen = models.Product("P1", "Pen", "9.99", stock_quantity=100)
        self.cap = models.Product("P2", "Cap", "5.00", stock_quantity=100)
        await crud.save(self.pen)
        await crud.save(self.cap)
        self.order = models.Order(order_number="ORD-1")
        await crud.save(self.order)
        self.today = date.today()

    async def _issued_invoice(self, amount="100.00", issue_date=None) -> models.Invoice:
        invoice = await billing.create_invoice(
            self.order.id, "INV-1", amount, issue_date or self.today
        )
        return await billing.issue_invoice(invoice.id, self.today)

    # ---------- Orders ----------

    async def test_add_and_remove_items(self):
        order = await billing.add_order_item(
            self.order.id, models.OrderItem.for_product(self.pen, 2)
        )
        order = await billing.add_order_item(
            self.order.id, models.OrderItem.for_product(self.cap, 1)
        )
        self.assertEqual(order.total_amount, Decimal("24.98"))

        first = order.items[0]
        order = await billing.remove_order_item(self.order.id, first.id)
        self.assertEqual(order.total_amount, Decimal("5.00"))

        stored = await crud.find_order_with_items(self.order.id)
        self.assertEqual(stored.total_amount, Decimal("5.00"))
        self.assertEqual(stored.version, 3)

    async def test_invalid_item_is_returned_not_saved(self):
        bad = models.OrderItem(self.pen.id, 0, "9.99")
        errors = await billing.add_order_item(self.order.id, bad)
        self.assertEqual(errors, [ValidationFailed("quantity", "Quantity must be at least 1.")])
        self.assertEqual((await crud.find_order_with_items(self.order.id)).items, [])

    async def test_change_item_quantity(self):
        order = await billing.add_order_item(
            self.order.id, models.OrderItem.for_product(self.pen, 1)
        )
        order = await billing.change_item_quantity(self.order.id, order.items[0].id, 4)
        self.assertEqual(order.total_amount, Decimal("39.96"))
        self.assertEqual((await crud.find_product(self.pen.id)).stock_quantity, 96)

    async def test_missing_aggregates(self):
        with self.assertRaises(NotFound):
            await billing.remove_order_item(self.order.id, 999)
        with self.assertRaises(NotFound):
            await billing.add_order_item(9999, models.OrderItem.for_product(self.pen))
        with self.assertRaises(NotFound):
            await billing.issue_invoice(9999)
        with self.assertRaises(NotFound):
            await billing.create_invoice(9999, "INV-X", "1")

    async def test_fully_invoiced(self):
        await billing.add_order_item(
            self.order.id, models.OrderItem.for_product(self.pen, 10)
        )
        order = await billing.load_order_with_invoices(self.order.id)
        self.assertFalse(order.is_fully_invoiced())

        await billing.create_invoice(self.order.id, "INV-1", "50.00")
        await billing.create_invoice(self.order.id, "INV-2", "49.90")
        order = await billing.load_order_with_invoices(self.order.id)
        self.assertTrue(order.is_fully_invoiced())
        self.assertEqual(len(order.invoices), 2)

    # ---------- Invoices ----------

    async def test_invoice_lifecycle(self):
        invoice = await billing.create_invoice(self.order.id, "INV-1", "100.00")
        self.assertIs(invoice.status, InvoiceStatus.DRAFT)
        self.assertEqual(invoice.order_id, self.order.id)

        invoice = await billing.issue_invoice(invoice.id, self.today)
        self.assertIs(invoice.status, InvoiceStatus.ISSUED)

        invoice = await billing.record_payment(
            invoice.id, models.Payment("PAY-1", "60.00"), self.today
        )
        self.assertIs(invoice.status, InvoiceStatus.ISSUED)
        self.assertEqual(invoice.remaining_balance, Decimal("40.00"))

        invoice = await billing.record_payment(
            invoice.id, models.Payment("PAY-2", "40.00"), self.today
        )
        self.assertIs(invoice.status, InvoiceStatus.PAID)

        stored = await crud.find_invoice_by_number("INV-1")
        self.assertIs(stored.status, InvoiceStatus.PAID)
        self.assertEqual(stored.version, 3)

        with self.assertRaises(ValueError):
            await billing.cancel_invoice(invoice.id)

    async def test_cancel_invoice(self):
        invoice = await self._issued_invoice()
        invoice = await billing.cancel_invoice(invoice.id)
        self.assertIs(invoice.status, InvoiceStatus.CANCELLED)
        with self.assertRaises(ValueError):
            await billing.issue_invoice(invoice.id)

    async def test_invalid_payment_is_returned(self):
        invoice = await self._issued_invoice()
        errors = await billing.record_payment(invoice.id, models.Payment("PAY-1", "-1"))
        self.assertEqual([e.field for e in errors], ["amount"])
        self.assertEqual((await crud.find_invoice_with_payments(invoice.id)).payments, [])

    async def test_concurrent_payments_are_all_kept(self):
        invoice = await self._issued_invoice(amount="100.00")
        payments = [models.Payment(f"PAY-{n}", "10.00") for n in range(10)]
        await asyncio.gather(
            *(billing.record_payment(invoice.id, p, self.today) for p in payments)
        )
        stored = await crud.find_invoice_with_payments(invoice.id)
        self.assertEqual(len(stored.payments), 10)
        self.assertEqual(stored.paid_amount, Decimal("100.00"))
        self.assertIs(stored.status, InvoiceStatus.PAID)

    async def test_writer_outside_the_lock_is_detected(self):
        invoice = await self._issued_invoice()
        stale = await crud.find_invoice_with_payments(invoice.id)
        await billing.record_payment(invoice.id, models.Payment("PAY-1", "1.00"), self.today)

        stale.add_payment(models.Payment("PAY-2", "2.00"), self.today)
        with self.assertRaises(ConcurrentModification):
            await crud.save(stale)
        stored = await crud.find_invoice_with_payments(invoice.id)
        self.assertEqual([p.payment_id for p in stored.payments], ["PAY-1"])

    async def test_refresh_invoice_statuses(self):
        long_ago = self.today - timedelta(days=45)
        late = await billing.create_invoice(self.order.id, "INV-LATE", "10", long_ago)
        # issued while still in terms, then time passes
        await billing.issue_invoice(late.id, long_ago)
        draft = await billing.create_invoice(self.order.id, "INV-DRAFT", "10", long_ago)
        fresh = await billing.create_invoice(self.order.id, "INV-NEW", "10")
        await billing.issue_invoice(fresh.id, self.today)

        changed = await billing.refresh_invoice_statuses(self.today)
        self.assertEqual([i.invoice_number for i in changed], ["INV-LATE"])

        self.assertIs(
            (await crud.find_invoice_with_payments(late.id)).status, InvoiceStatus.OVERDUE
        )
        self.assertIs(
            (await crud.find_invoice_with_payments(draft.id)).status, InvoiceStatus.DRAFT
        )
        self.assertIs(
            (await crud.find_invoice_with_payments(fresh.id)).status, InvoiceStatus.ISSUED
        )

        # nothing left to change
        self.assertEqual(await billing.refresh_invoice_statuses(self.today), [])

    async def test_refresh_moves_paid_up_overdue_back(self):
        long_ago = self.today - timedelta(days=45)
        invoice = await billing.create_invoice(self.order.id, "INV-1", "10", long_ago)
        await billing.issue_invoice(invoice.id, self.today)

        # a payment written without re-deriving the status
        stored = await crud.find_invoice_with_payments(invoice.id)
        self.assertIs(stored.status, InvoiceStatus.OVERDUE)
        stored.payments.append(models.Payment("PAY-1", "10"))
        await crud.save(stored)

        changed = await billing.refresh_invoice_statuses(self.today)
        self.assertEqual([i.status for i in changed], [InvoiceStatus.PAID])

    async def test_collected_in_month(self):
        invoice = await self._issued_invoice(amount="100.00")
        for number, amount, paid_on in [
            ("PAY-1", "10.00", date(2024, 1, 31)),
            ("PAY-2", "20.25", date(2024, 2, 1)),
            ("PAY-3", "5.50", date(2024, 2, 29)),
            ("PAY-4", "1.00", date(2024, 3, 1)),
        ]:
            await billing.record_payment(
                invoice.id, models.Payment(number, amount, "Cash", paid_on), self.today
            )

        self.assertEqual(
            await billing.collected_in_month(date(2024, 2, 14)), Decimal("25.75")
        )
        self.assertEqual(
            await billing.collected_in_month(date(2023, 12, 1)), Decimal("0.00")
        )

    async def test_released_locks_are_dropped(self):
        for key in range(500):
            async with billing.aggregate_lock("invoice", key):
                pass
        gc.collect()
        registry = billing._locks_by_loop[asyncio.get_running_loop()]
        self.assertEqual(len(registry), 0)

    async def test_held_lock_is_shared(self):
        async with billing.aggregate_lock("order", 1):
            registry = billing._locks_by_loop[asyncio.get_running_loop()]
            self.assertIs(billing._lock_for("order", 1), registry[("order", 1)])
            self.assertTrue(registry[("order", 1)].locked())
        gc.collect()
        self.assertNotIn(("order", 1), registry)

    # ---------- Plain records ----------

    async def test_save_record(self):
        customer = models.Customer("C1", "Ada", "Lovelace", "ada@example.com")
        self.assertEqual(await billing.save_record(customer), [])
        self.assertIsNotNone(customer.id)

        bad = models.Customer("C2", "", "X", "bad")
        errors = await billing.save_record(bad)
        self.assertEqual([e.field for e in errors], ["first_name", "email"])
        self.assertIsNone(bad.id)


if __name__ == "__main__":
    unittest.main()
