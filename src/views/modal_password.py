from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label

from services.auth import change_password
from utils.errors import AuthenticationFailed


class ChangePasswordModal(ModalScreen[bool]):
    """
    Asks for the current password and a new one (twice).
    Dismisses with True once the new password is stored.
    """

    def compose(self) -> ComposeResult:
        with Vertical(id="div-dialog"):
            yield Label("Change password", id="caption")
            yield Label("Current password")
            yield Input(password=True, id="input-pwd-current")
            yield Label("New password")
            yield Input(password=True, id="input-pwd-new")
            yield Label("Confirm new password")
            yield Input(password=True, id="input-pwd-confirm")
            with Horizontal(id="dialog-buttons"):
                yield Button("Cancel", id="btn-cancel")
                yield Button("Change", id="btn-confirm", variant="primary")

    def on_mount(self):
        self.query_one("#input-pwd-current").focus()

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self):
        self.dismiss(False)

    @on(Input.Submitted, "#input-pwd-confirm")
    @on(Button.Pressed, "#btn-confirm")
    @work(exclusive=True)
    async def handle_submit(self):
        current = self.query_one("#input-pwd-current", Input).value
        new = self.query_one("#input-pwd-new", Input).value
        confirm = self.query_one("#input-pwd-confirm", Input).value

        if new != confirm:
            self.notify("New passwords do not match.", severity="error")
            return

        result = await change_password(self.app.state.user, current, new)
        if isinstance(result, list):
            self.notify(result[0].message, severity="error")
            self.query_one("#input-pwd-new", Input).focus()
            return
        if isinstance(result, AuthenticationFailed):
            self.notify("Current password is incorrect.", severity="error")
            input_current = self.query_one("#input-pwd-current", Input)
            input_current.value = ""
            input_current.focus()
            return

        self.notify("Password changed.")
        self.dismiss(True)
