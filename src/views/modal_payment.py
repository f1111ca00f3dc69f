from decimal import InvalidOperation
from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Select

import db.crud
from db import models
from services import billing
from utils.errors import PersistenceError
from utils.money import format_currency, to_money
from utils.security import generate_token

PAYMENT_METHODS = ["Cash", "Card", "Bank Transfer", "Cheque"]


class RecordPaymentModal(ModalScreen[Optional[models.Invoice]]):
    """
    Record one payment against an invoice looked up by its number.
    Dismisses with the updated invoice, or None when cancelled.
    """

    def __init__(self, invoice_number: str = ""):
        super().__init__()
        self.invoice_number = invoice_number

    def compose(self) -> ComposeResult:
        with Vertical(id="div-dialog"):
            yield Label("Record payment", id="caption")
            yield Label("Invoice number")
            yield Input(self.invoice_number, placeholder="INV-0001", id="input-pay-invoice")
            yield Label("Amount")
            yield Input(placeholder="0.00", type="number", id="input-pay-amount")
            yield Label("Method")
            yield Select(
                [(m, m) for m in PAYMENT_METHODS],
                value=PAYMENT_METHODS[0],
                allow_blank=False,
                id="select-pay-method",
            )
            with Horizontal(id="dialog-buttons"):
                yield Button("Cancel", id="btn-cancel")
                yield Button("Record", id="btn-confirm", variant="success")

    def on_mount(self):
        if self.invoice_number:
            self.query_one("#input-pay-amount").focus()
        else:
            self.query_one("#input-pay-invoice").focus()

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self):
        self.dismiss(None)

    @on(Button.Pressed, "#btn-confirm")
    @work(exclusive=True)
    async def handle_submit(self):
        number = self.query_one("#input-pay-invoice", Input).value.strip()
        amount_text = self.query_one("#input-pay-amount", Input).value.strip()
        method = self.query_one("#select-pay-method", Select).value

        try:
            amount = to_money(amount_text)
        except InvalidOperation:
            self.notify("Amount must be a number.", severity="error")
            return

        invoice = await db.crud.find_invoice_by_number(number)
        if invoice is None:
            self.notify(f"No invoice numbered '{number}'.", severity="error")
            return

        payment = models.Payment(
            payment_id="PAY-" + generate_token(8),
            amount=amount,
            payment_method=method,
        )
        try:
            result = await billing.record_payment(invoice.id, payment)
        except PersistenceError as exc:
            self.notify(str(exc), severity="error")
            return
        if isinstance(result, list):
            self.notify(result[0].message, severity="error")
            return

        self.notify(
            f"Payment recorded, balance {format_currency(result.remaining_balance)} "
            f"({result.status})."
        )
        self.dismiss(result)
