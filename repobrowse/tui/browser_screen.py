"""
Repository browser screen.

Left column: repositories, file filter and the (filtered) file list.
Right column: the active file's content and its recent commits.
"""

from textual.app import ComposeResult
from textual.screen import Screen
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.widgets import Static, Header, Footer, Input, OptionList, DataTable
from textual.widgets.option_list import Option, OptionDoesNotExist
from textual.binding import Binding
from rich.syntax import Syntax
from rich.text import Text
from typing import Optional, Sequence

from ..domain import Repository, TreeEntry, CommitSummary
from ..infra import FILE_CONTENT_ERROR
from ..render import format_date
from ..services import BrowserView, TreeBrowserController, NO_COMMITS_MESSAGE


class ScreenView(BrowserView):
    """Forwards controller updates to the widgets of a BrowserScreen."""

    def __init__(self, screen: 'BrowserScreen'):
        self.screen = screen

    def show_message(self, message: str) -> None:
        self.screen.query_one("#message", Static).update(message)

    def show_repositories(self, repositories: Sequence[Repository], current: Optional[Repository]) -> None:
        repo_list = self.screen.query_one("#repo-list", OptionList)
        repo_list.clear_options()
        repo_list.add_options([Option(repo.slug, id=str(i)) for i, repo in enumerate(repositories)])
        if current in repositories:
            repo_list.highlighted = list(repositories).index(current)
        self.screen.app.sub_title = current.slug if current else ""
        self.screen.query_one("#message", Static).update("")

    def show_entries(self, entries: Sequence[TreeEntry]) -> None:
        file_list = self.screen.query_one("#file-list", OptionList)
        file_list.clear_options()
        file_list.add_options([Option(entry.path, id=entry.path) for entry in entries])
        self._highlight(self.screen.controller.session.active_path)

    def show_active_file(self, path: Optional[str]) -> None:
        self._highlight(path)
        self.screen.query_one("#content", Static).update(Text(f"Loading {path}..." if path else ""))
        self.screen.query_one("#commits", DataTable).clear()

    def show_content(self, path: str, content: str) -> None:
        widget = self.screen.query_one("#content", Static)
        if content == FILE_CONTENT_ERROR:
            widget.update(Text(content, style="red"))
            return
        widget.update(Syntax(content, Syntax.guess_lexer(path, content), line_numbers=True))

    def show_commits(self, path: str, commits: Sequence[CommitSummary]) -> None:
        table = self.screen.query_one("#commits", DataTable)
        table.clear()
        if not commits:
            table.add_row("", "", NO_COMMITS_MESSAGE)
            return
        for commit in commits:
            table.add_row(format_date(commit), commit.author_name, commit.subject)

    def _highlight(self, path: Optional[str]) -> None:
        file_list = self.screen.query_one("#file-list", OptionList)
        if path is None:
            file_list.highlighted = None
            return
        try:
            file_list.highlighted = file_list.get_option_index(path)
        except OptionDoesNotExist:
            # Active file is hidden by the filter
            file_list.highlighted = None


class BrowserScreen(Screen):
    """Main browsing screen."""

    CSS = """
    #sidebar {
        width: 40%;
        min-width: 30;
    }

    #repo-list {
        height: 10;
        border: round $primary;
    }

    #file-list {
        height: 1fr;
        border: round $primary;
    }

    #content-scroll {
        height: 2fr;
        border: round $secondary;
    }

    #commits {
        height: 1fr;
        border: round $secondary;
    }

    #message {
        dock: bottom;
        height: 1;
        padding: 0 1;
        color: $warning;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", show=True),
        Binding("/", "focus_filter", "Filter", show=True),
        Binding("escape", "clear_filter", "Clear filter", show=True),
        Binding("ctrl+l", "logout", "Logout", show=True),
    ]

    def __init__(self, controller: TreeBrowserController):
        super().__init__()
        self.controller = controller
        controller.view = ScreenView(self)

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal():
            with Vertical(id="sidebar"):
                yield OptionList(id="repo-list")
                yield Input(placeholder="Filter files", id="filter")
                yield OptionList(id="file-list")
            with Vertical():
                with VerticalScroll(id="content-scroll"):
                    yield Static("", id="content")
                yield DataTable(id="commits", cursor_type="row", zebra_stripes=True)
        yield Static("", id="message")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#commits", DataTable).add_columns("Date", "Author", "Message")
        self.query_one("#message", Static).update("Loading repositories...")
        self.run_worker(self.controller.start(), group="session")

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        session = self.controller.session
        if event.option_list.id == "repo-list":
            repository = session.repositories[int(event.option.id)]
            if repository != session.current_repository:
                self.run_worker(self.controller.select_repository(repository), group="session")
        elif event.option_list.id == "file-list":
            self.run_worker(self.controller.select_file(event.option.id), group="file")

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "filter":
            self.controller.set_filter(event.value)

    def action_focus_filter(self) -> None:
        self.query_one("#filter", Input).focus()

    def action_clear_filter(self) -> None:
        self.query_one("#filter", Input).value = ""

    def action_quit(self) -> None:
        self.app.exit()

    def action_logout(self) -> None:
        self.run_worker(self.app.logout(), group="session")
