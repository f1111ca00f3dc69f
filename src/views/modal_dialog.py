from typing import Literal, override

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Label

from utils.messages import QuitRequestedMessage

Tone = Literal["default", "positive", "warning", "error"]


class ConfirmModal(ModalScreen[bool]):
    """
    Question with a confirm button and an optional cancel button.
    Dismisses with True on confirm.
    """

    # (confirm variant, cancel variant)
    TONES = {
        "default": ("primary", "default"),
        "positive": ("success", "default"),
        "warning": ("warning", "default"),
        "error": ("error", "primary"),
    }

    def __init__(
        self,
        caption: str,
        confirm_text: str = "OK",
        cancel_text: str = "",
        tone: Tone = "default",
    ):
        super().__init__()
        self.caption = caption
        self.confirm_text = confirm_text
        self.cancel_text = cancel_text
        self.tone = tone

    def compose(self) -> ComposeResult:
        confirm_variant, cancel_variant = self.TONES[self.tone]
        with Container(id="div-dialog"):
            yield Label(self.caption, id="caption")
            with Horizontal(id="dialog-buttons"):
                if self.cancel_text:
                    yield Button(self.cancel_text, variant=cancel_variant, id="btn-cancel")
                yield Button(self.confirm_text, variant=confirm_variant, id="btn-confirm")

    def on_mount(self):
        # destructive questions start on the safe answer
        if self.cancel_text and self.tone == "error":
            self.query_one("#btn-cancel").focus()
        else:
            self.query_one("#btn-confirm").focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-confirm":
            self.handle_confirm()
        elif event.button.id == "btn-cancel":
            self.dismiss(False)

    def handle_confirm(self) -> None:
        self.dismiss(True)


class QuitDialogModal(ConfirmModal):
    def __init__(self):
        super().__init__("Are you sure you want to quit?", "Yes", "No", "error")

    @override
    def handle_confirm(self) -> None:
        self.app.post_message(QuitRequestedMessage())
        self.dismiss(True)
