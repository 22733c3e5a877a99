"""
Full-screen repository browser application.
"""

from textual.app import App
from typing import Optional

from ..services import TreeBrowserController, LOGIN_REQUIRED_MESSAGE
from ..storage import clear_username
from .browser_screen import BrowserScreen


class RepoBrowseApp(App):
    """Repository browser driven by a TreeBrowserController."""

    TITLE = "repobrowse"

    def __init__(self, context):
        """Initialize app.

        Args:
            context: CommandContext with the configuration, secret store and client
        """
        super().__init__()
        self.context = context
        self.controller = TreeBrowserController(
            context.store,
            context.client,
            on_login_required=self._on_login_required,
        )

    def on_mount(self) -> None:
        self.push_screen(BrowserScreen(self.controller))

    def _on_login_required(self) -> None:
        """Leave the browser; the caller tells the user to log in."""
        self.context.login_required = True
        self.exit(LOGIN_REQUIRED_MESSAGE)

    async def logout(self) -> None:
        clear_username(self.context.config)
        await self.controller.logout()


def run_tui(context) -> Optional[str]:
    """Run the browser until the user quits or has to log in.

    Returns:
        The message the app exited with, if any
    """
    app = RepoBrowseApp(context)
    return app.run()
