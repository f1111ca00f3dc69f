from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.events import ScreenResume
from textual.widgets import DataTable, Label

import db.crud
from utils import config
from utils.money import format_currency
from views.base_screen import BaseScreen


class LowStockScreen(BaseScreen):
    """Products whose stock fell under the restock threshold, emptiest first."""

    BINDINGS = [
        Binding("r", "reload", "Reload", show=True),
    ]

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield Label(
            f"Products with fewer than {config.LOW_STOCK_THRESHOLD} units in stock",
            id="label-low-stock",
        )
        yield DataTable(id="table-low-stock")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Code", "Name", "Category", "Price", "In Stock")

    @on(ScreenResume)
    @work(exclusive=True)
    async def action_reload(self) -> None:
        products = await db.crud.find_low_stock_products(config.LOW_STOCK_THRESHOLD)
        table = self.query_one(DataTable)
        table.clear()
        for product in products:
            table.add_row(
                product.product_code,
                product.name,
                product.category or "-",
                format_currency(product.price),
                str(product.stock_quantity),
            )
