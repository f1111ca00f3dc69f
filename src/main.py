from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from services.auth import ensure_default_admin
from utils import config
from utils.logger import get_logger
from utils.messages import QuitRequestedMessage, UserLogoutMessage
from utils.state import Session
from views.scr_invoices import InvoicesScreen
from views.scr_login import LoginScreen
from views.scr_low_stock import LowStockScreen
from views.scr_orders import OrdersScreen

_logger = get_logger(__name__)


class BizMgrApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "orders": OrdersScreen,
        "invoices": InvoicesScreen,
        "low_stock": LowStockScreen,
    }

    MODE_TITLES = {
        "orders": "Orders",
        "invoices": "Invoices",
        "low_stock": "Low Stock",
    }

    CSS_PATH = "styles/bizmgr.tcss"

    state: Session

    def __init__(self):
        super().__init__()
        self.state = Session()

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        if await ensure_default_admin():
            self.notify(
                f"Created user '{config.DEFAULT_ADMIN_USERNAME}' with the default "
                "password, change it after logging in.",
                severity="warning",
                timeout=10,
            )
        self.main_flow()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @on(UserLogoutMessage)
    def handle_user_logout(self):
        _logger.info(f"User '{self.state.user.username}' logged out.")
        self.state.logout()
        self.notify("Logout successful.")
        self.main_flow()

    @on(QuitRequestedMessage)
    def handle_quit(self):
        if self.state.is_logged_in:
            self.state.logout()
        self.exit()

    @work
    async def main_flow(self):
        await self.push_screen_wait(LoginScreen())
        await self.switch_mode("invoices")


def run():
    BizMgrApp().run()


if __name__ == "__main__":
    run()
