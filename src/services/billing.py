"""
Order and invoice changes that go through the store.

Every flow loads the aggregate, changes it through the model methods (which
keep totals and statuses derived) and saves it back while holding the
aggregate's lock. The version check in the store catches writers from
other processes.
"""

from __future__ import annotations

import asyncio
import weakref
from contextlib import asynccontextmanager
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple, Union

import db.crud as crud
from db import models
from db.repository import Repository
from utils.errors import NotFound, ValidationFailed
from utils.logger import get_logger
from utils.money import ZERO, MoneyLike, round_currency
from utils.pure import first_day_of_month, last_day_of_month
from utils.validation import check_order_item, check_payment, check_record

_logger = get_logger(__name__)

# asyncio locks belong to one event loop, so keep one registry per loop.
# A lock stays registered only while some task holds or waits for it.
_locks_by_loop = weakref.WeakKeyDictionary()


def _lock_for(kind: str, key: int) -> asyncio.Lock:
    locks: weakref.WeakValueDictionary[Tuple[str, int], asyncio.Lock] = (
        _locks_by_loop.setdefault(asyncio.get_running_loop(), weakref.WeakValueDictionary())
    )
    lock = locks.get((kind, key))
    if lock is None:
        lock = locks[(kind, key)] = asyncio.Lock()
    return lock


@asynccontextmanager
async def aggregate_lock(kind: str, key: int):
    lock = _lock_for(kind, key)
    async with lock:
        yield


async def _load_order(repo: Repository, order_id: int) -> models.Order:
    order = await repo.find_order_with_items(order_id)
    if order is None:
        raise NotFound("Order", order_id)
    return order


async def _load_invoice(repo: Repository, invoice_id: int) -> models.Invoice:
    invoice = await repo.find_invoice_with_payments(invoice_id)
    if invoice is None:
        raise NotFound("Invoice", invoice_id)
    return invoice


# ---------------------------
# Orders
# ---------------------------


async def add_order_item(
    order_id: int, item: models.OrderItem, repo: Repository = crud
) -> Union[models.Order, List[ValidationFailed]]:
    errors = check_order_item(item)
    if errors:
        return errors
    async with aggregate_lock("order", order_id):
        order = await _load_order(repo, order_id)
        order.add_order_item(item)
        await repo.save(order)
    _logger.info(f"Order {order.order_number}: item added, total {order.total_amount}")
    return order


async def remove_order_item(
    order_id: int, item_id: int, repo: Repository = crud
) -> models.Order:
    async with aggregate_lock("order", order_id):
        order = await _load_order(repo, order_id)
        item = order.find_item(item_id)
        if item is None:
            raise NotFound("OrderItem", item_id)
        order.remove_order_item(item)
        await repo.save(order)
    _logger.info(f"Order {order.order_number}: item removed, total {order.total_amount}")
    return order


async def change_item_quantity(
    order_id: int, item_id: int, quantity: int, repo: Repository = crud
) -> models.Order:
    async with aggregate_lock("order", order_id):
        order = await _load_order(repo, order_id)
        item = order.find_item(item_id)
        if item is None:
            raise NotFound("OrderItem", item_id)
        order.set_item_quantity(item, quantity)
        await repo.save(order)
    return order


async def load_order_with_invoices(
    order_id: int, repo: Repository = crud
) -> models.Order:
    """Order plus its invoices, ready for is_fully_invoiced()."""
    order = await _load_order(repo, order_id)
    for invoice in await repo.find_invoices_by_order(order_id):
        order.add_invoice(invoice)
    return order


# ---------------------------
# Invoices
# ---------------------------


async def create_invoice(
    order_id: int,
    invoice_number: str,
    amount: MoneyLike,
    issue_date: Optional[date] = None,
    repo: Repository = crud,
) -> models.Invoice:
    """New Draft invoice for an existing order. The amount is not reconciled
    against the order total; over-invoicing is allowed."""
    order = await _load_order(repo, order_id)
    invoice = models.Invoice(
        invoice_number=invoice_number,
        amount=amount,
        issue_date=issue_date or date.today(),
    )
    order.add_invoice(invoice)
    await repo.save(invoice)
    _logger.info(f"Invoice {invoice_number} drafted for order {order.order_number}")
    return invoice


async def issue_invoice(
    invoice_id: int, today: Optional[date] = None, repo: Repository = crud
) -> models.Invoice:
    async with aggregate_lock("invoice", invoice_id):
        invoice = await _load_invoice(repo, invoice_id)
        invoice.issue(today)
        await repo.save(invoice)
    _logger.info(f"Invoice {invoice.invoice_number} issued ({invoice.status})")
    return invoice


async def cancel_invoice(invoice_id: int, repo: Repository = crud) -> models.Invoice:
    async with aggregate_lock("invoice", invoice_id):
        invoice = await _load_invoice(repo, invoice_id)
        invoice.cancel()
        await repo.save(invoice)
    _logger.info(f"Invoice {invoice.invoice_number} cancelled")
    return invoice


async def record_payment(
    invoice_id: int,
    payment: models.Payment,
    today: Optional[date] = None,
    repo: Repository = crud,
) -> Union[models.Invoice, List[ValidationFailed]]:
    errors = check_payment(payment)
    if errors:
        return errors
    async with aggregate_lock("invoice", invoice_id):
        invoice = await _load_invoice(repo, invoice_id)
        invoice.add_payment(payment, today)
        await repo.save(invoice)
    _logger.info(
        f"Payment {payment.payment_id} of {payment.amount} on invoice "
        f"{invoice.invoice_number}, balance {invoice.remaining_balance} ({invoice.status})"
    )
    return invoice


async def refresh_invoice_statuses(
    today: Optional[date] = None, repo: Repository = crud
) -> List[models.Invoice]:
    """
    Re-derive the status of every Issued or Overdue invoice as of `today`
    and save the ones that changed. Returns the changed invoices.
    """
    today = today or date.today()
    open_invoices = await repo.list_invoices(
        [models.InvoiceStatus.ISSUED, models.InvoiceStatus.OVERDUE]
    )
    changed = []
    for stale in open_invoices:
        async with aggregate_lock("invoice", stale.id):
            invoice = await _load_invoice(repo, stale.id)
            before = invoice.status
            if invoice.update_status(today) != before:
                await repo.save(invoice)
                changed.append(invoice)
                _logger.info(
                    f"Invoice {invoice.invoice_number}: {before} -> {invoice.status}"
                )
    return changed


async def collected_in_month(
    day: Optional[date] = None, repo: Repository = crud
) -> Decimal:
    """Sum of payments received in the calendar month containing `day`."""
    day = day or date.today()
    payments = await repo.find_payments_by_date_range(
        first_day_of_month(day), last_day_of_month(day)
    )
    return round_currency(sum((p.amount for p in payments), ZERO))


# ---------------------------
# Plain records
# ---------------------------


async def save_record(
    record: Union[models.Customer, models.Supplier, models.Product, models.User],
    repo: Repository = crud,
) -> List[ValidationFailed]:
    """Validate and save; returns the field errors, empty when saved."""
    errors = check_record(record)
    if errors:
        return errors
    await repo.save(record)
    return []
