from datetime import date
from typing import Dict, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, MarkdownViewer

import db.crud
from db import models
from services import billing
from utils.errors import PersistenceError
from utils.money import ZERO, format_currency
from utils.pure import format_date, generate_markdown_table
from views.base_screen import BaseScreen
from views.modal_dialog import ConfirmModal
from views.modal_payment import RecordPaymentModal


class InvoicesScreen(BaseScreen):
    """
    Invoices by due date. Statuses can be re-derived for today, payments
    recorded and drafts issued from here.
    """

    BINDINGS = [
        Binding("r", "reload", "Reload", show=True),
        Binding("p", "record_payment", "Record Payment", show=True),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._invoices: Dict[int, models.Invoice] = {}
        self._selected: Optional[int] = None
        self._collected = ZERO

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-invoice-detail", show_table_of_contents=False)
            yield DataTable(id="table-invoices")
        with Horizontal(id="hort-table-control"):
            yield Button("Refresh Statuses", id="btn-refresh-status", variant="primary")
            yield Button("Issue", id="btn-issue")
            yield Button("Cancel Invoice", id="btn-cancel-invoice", variant="error")
            yield Button("Record Payment", id="btn-payment", variant="success")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns(
            "Invoice", "Issued", "Due", "Status", "Amount", "Paid", "Balance", "Days Late"
        )

    @on(ScreenResume)
    def action_reload(self) -> None:
        self._load_invoices()

    @on(DataTable.RowHighlighted, "#table-invoices")
    def handle_row_highlight(self, event: DataTable.RowHighlighted) -> None:
        if event.row_key is None or event.row_key.value is None:
            return
        self._selected = int(event.row_key.value)
        self._render_detail(self._invoices.get(self._selected))

    @on(Button.Pressed, "#btn-refresh-status")
    @work(exclusive=True, group="invoices")
    async def handle_refresh_statuses(self) -> None:
        try:
            changed = await billing.refresh_invoice_statuses()
        except PersistenceError as exc:
            self.notify(str(exc), severity="error")
            self._load_invoices()
            return
        self.notify(f"{len(changed)} invoice status(es) updated.")
        self._load_invoices()

    @on(Button.Pressed, "#btn-payment")
    def action_record_payment(self) -> None:
        selected = self._invoices.get(self._selected)
        number = selected.invoice_number if selected else ""
        self.app.push_screen(RecordPaymentModal(number))

    @on(Button.Pressed, "#btn-issue")
    @work(exclusive=True, group="invoices")
    async def handle_issue(self) -> None:
        if self._selected is None:
            return
        try:
            invoice = await billing.issue_invoice(self._selected)
        except (ValueError, PersistenceError) as exc:
            self.notify(str(exc), severity="error")
            return
        self.notify(f"Invoice {invoice.invoice_number} is now {invoice.status}.")
        self._load_invoices()

    @on(Button.Pressed, "#btn-cancel-invoice")
    @work(exclusive=True, group="invoices")
    async def handle_cancel_invoice(self) -> None:
        selected = self._invoices.get(self._selected)
        if selected is None:
            return
        if not await self.app.push_screen_wait(
            ConfirmModal(
                f"Cancel invoice {selected.invoice_number}?",
                confirm_text="Yes",
                cancel_text="No",
                tone="error",
            )
        ):
            return
        try:
            await billing.cancel_invoice(selected.id)
        except (ValueError, PersistenceError) as exc:
            self.notify(str(exc), severity="error")
            return
        self._load_invoices()

    @work(exclusive=True, group="invoice-list")
    async def _load_invoices(self) -> None:
        today = date.today()
        invoices = await db.crud.list_invoices()
        self._collected = await billing.collected_in_month(today)

        table = self.query_one(DataTable)
        table.clear()
        self._invoices = {}
        for inv in invoices:
            self._invoices[inv.id] = inv
            days_late = inv.days_overdue(today)
            table.add_row(
                inv.invoice_number,
                format_date(inv.issue_date),
                format_date(inv.due_date),
                inv.status.value,
                format_currency(inv.amount),
                format_currency(inv.paid_amount),
                format_currency(inv.remaining_balance),
                str(days_late) if days_late else "",
                key=str(inv.id),
            )

        if self._selected in self._invoices:
            table.move_cursor(row=table.get_row_index(str(self._selected)))
            self._render_detail(self._invoices[self._selected])
        elif invoices:
            table.cursor_coordinate = (0, 0)
            self._selected = invoices[0].id
            self._render_detail(invoices[0])
        else:
            self._selected = None
            self._render_detail(None)

    def _render_detail(self, invoice: Optional[models.Invoice]) -> None:
        viewer = self.query_one("#md-invoice-detail", MarkdownViewer)
        if invoice is None:
            viewer.document.update("### No invoices yet.")
            return

        header = (
            f"### Invoice {invoice.invoice_number}\n"
            f"Status: {invoice.status}  \n"
            f"Issued {format_date(invoice.issue_date)}, "
            f"due {format_date(invoice.due_date)}\n\n"
        )
        payments_md = generate_markdown_table(
            ["Payment", "Date", "Method", "Amount"],
            [
                [
                    p.payment_id,
                    format_date(p.payment_date),
                    p.payment_method or "-",
                    format_currency(p.amount),
                ]
                for p in invoice.payments
            ],
            ["l", "l", "l", "r"],
        )
        footer = (
            f"\n\n**Amount:** {format_currency(invoice.amount)}  \n"
            f"**Balance:** {format_currency(invoice.remaining_balance)}  \n"
            f"Collected this month: {format_currency(self._collected)}"
        )
        viewer.document.update(header + payments_md + footer)
