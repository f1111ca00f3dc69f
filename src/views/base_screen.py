from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, Markdown

from utils.messages import UserLogoutMessage
from utils.pure import format_date, generate_markdown_table
from views.modal_dialog import ConfirmModal, QuitDialogModal
from views.modal_password import ChangePasswordModal


class Sidebar(Container):
    def compose(self) -> ComposeResult:
        yield Label("User Info", id="label-info-1")
        yield Markdown("", id="md-userinfo")
        yield Button("Change password", id="btn-change-pwd")
        yield Button("Log out", id="btn-logout", variant="error")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")

    def on_mount(self):
        self.show_user()

    @work(exclusive=True)
    async def show_user(self):
        session = self.app.state
        if not session.is_logged_in:
            return

        user = session.user
        table_rows = [
            ["User", user.username],
            ["Name", user.full_name or "-"],
            ["Role", user.role.value],
            ["Since", format_date(session.started_at.date())],
        ]
        md_table_str = generate_markdown_table(None, table_rows, ["l", "l"])
        await self.query_one(Markdown).update(md_table_str)

        list_menu: ListView = self.query_one("#list-menu")
        await list_menu.clear()
        await list_menu.extend(
            [
                ListItem(Label(title), id="list-menu-item-" + mode)
                for mode, title in self.app.MODE_TITLES.items()
            ]
        )
        self.highlight_item(self.app.current_mode)

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_mode = event.item.id.removeprefix("list-menu-item-")
        if self.app.current_mode != selected_mode:
            await self.app.switch_mode(selected_mode)
        self.highlight_item(selected_mode)

    @on(Button.Pressed, "#btn-logout")
    @work
    async def handle_logout(self):
        if not await self.app.push_screen_wait(
            ConfirmModal(
                "Are you sure you want to log out?",
                confirm_text="Yes",
                cancel_text="No",
                tone="warning",
            )
        ):
            return

        self.post_message(UserLogoutMessage())

    @on(Button.Pressed, "#btn-change-pwd")
    def handle_change_password(self):
        self.app.push_screen(ChangePasswordModal())

    def highlight_item(self, mode: str):
        list_menu = self.query_one("#list-menu")
        for item in list_menu.children:
            item.highlighted = item.id == "list-menu-item-" + mode


class BaseScreen(Screen):
    """
    Inherited by all screens, holds the header, footer, sidebar and the
    app-wide key bindings.
    """

    BINDINGS = [
        Binding("ctrl+z", "quit", "Quit App", show=True),
    ]

    def __init__(self):
        super().__init__()

        self.configure()

    def configure(
        self,
        header_sub_title: str = "",
        show_sidebar: bool = True,
    ) -> None:
        self.app.title = "Business Manager"
        self.sub_title = header_sub_title
        for mode, screen_cls in self.app.MODES.items():
            if isinstance(self, screen_cls):
                self.sub_title = self.app.MODE_TITLES.get(mode, header_sub_title)

        self._show_sidebar = show_sidebar

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    def on_screen_resume(self) -> None:
        # a different user may have logged in since this screen was built
        for sidebar in self.query(Sidebar):
            sidebar.show_user()

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
