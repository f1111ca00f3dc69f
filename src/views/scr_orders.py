from typing import Dict, List, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, MarkdownViewer

import db.crud
from db import models
from services import billing
from utils.money import format_currency
from utils.pure import format_date, generate_markdown_table
from views.base_screen import BaseScreen


class OrdersScreen(BaseScreen):
    """
    All orders, newest first, with the selected order's items and invoices
    shown above the table.
    """

    BINDINGS = [
        Binding("r", "reload", "Reload", show=True),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._orders: Dict[int, models.Order] = {}

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-order-detail", show_table_of_contents=False)
            yield DataTable(id="table-orders")
        with Horizontal(id="hort-table-control"):
            yield Button("Refresh", id="btn-refresh")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Order No", "Date", "Status", "Items", "Total", "Invoiced")

    @on(Button.Pressed, "#btn-refresh")
    @on(ScreenResume)
    def action_reload(self) -> None:
        self._load_orders()

    @on(DataTable.RowHighlighted, "#table-orders")
    def handle_row_highlight(self, event: DataTable.RowHighlighted) -> None:
        if event.row_key is None or event.row_key.value is None:
            return
        self._render_detail(self._orders.get(int(event.row_key.value)))

    @work(exclusive=True, group="orders")
    async def _load_orders(self) -> None:
        orders: List[models.Order] = [
            await billing.load_order_with_invoices(order.id)
            for order in await db.crud.list_orders()
        ]

        table = self.query_one(DataTable)
        table.clear()
        self._orders = {}
        for order in orders:
            self._orders[order.id] = order
            table.add_row(
                order.order_number,
                format_date(order.order_date),
                order.status.value,
                str(len(order.items)),
                format_currency(order.total_amount),
                "yes" if order.is_fully_invoiced() else "no",
                key=str(order.id),
            )

        if orders:
            table.cursor_coordinate = (0, 0)
            self._render_detail(orders[0])
        else:
            self._render_detail(None)

    def _render_detail(self, order: Optional[models.Order]) -> None:
        viewer = self.query_one("#md-order-detail", MarkdownViewer)
        if order is None:
            viewer.document.update("### Select an order to view its details.")
            return

        header = (
            f"### Order {order.order_number}\n"
            f"Date: {format_date(order.order_date)}  \n"
            f"Status: {order.status}  \n"
            f"Payment method: {order.payment_method or '-'}\n\n"
        )
        item_rows = [
            [
                str(item.product_id),
                str(item.quantity),
                format_currency(item.unit_price),
                format_currency(item.subtotal),
            ]
            for item in order.items
        ]
        items_md = generate_markdown_table(
            ["Product", "Qty", "Unit Price", "Subtotal"],
            item_rows,
            ["l", "r", "r", "r"],
        )
        invoice_rows = [
            [
                inv.invoice_number,
                inv.status.value,
                format_currency(inv.amount),
                format_currency(inv.remaining_balance),
            ]
            for inv in order.invoices
        ]
        invoices_md = generate_markdown_table(
            ["Invoice", "Status", "Amount", "Balance"],
            invoice_rows,
            ["l", "l", "r", "r"],
        )
        footer = (
            f"\n\n**Total:** {format_currency(order.total_amount)}  \n"
            f"**Invoiced:** {format_currency(order.invoiced_amount)}"
        )
        viewer.document.update(
            header + items_md + "\n\n#### Invoices\n\n" + invoices_md + footer
        )
