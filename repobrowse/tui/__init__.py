"""
TUI (Text User Interface) for repobrowse - the full-screen repository browser.
"""

from .app import RepoBrowseApp, run_tui
from .browser_screen import BrowserScreen, ScreenView

__all__ = [
    'RepoBrowseApp',
    'run_tui',
    'BrowserScreen',
    'ScreenView',
]
