"""
Service layer for repobrowse.

Contains the logic that sequences the secret store and the GitHub
client into a browsing session:
- TreeBrowserController: session state, selection and filtering

Commands and the TUI use this layer rather than calling the
infrastructure directly.
"""

from .browser import (
    BrowserSession,
    BrowserView,
    Phase,
    TreeBrowserController,
    filter_entries,
    pick_default_file,
    LOGIN_REQUIRED_MESSAGE,
    NO_REPOSITORIES_MESSAGE,
    NO_FILES_MESSAGE,
    NO_COMMITS_MESSAGE,
    FAILURE_MESSAGE,
)

__all__ = [
    'BrowserSession',
    'BrowserView',
    'Phase',
    'TreeBrowserController',
    'filter_entries',
    'pick_default_file',
    'LOGIN_REQUIRED_MESSAGE',
    'NO_REPOSITORIES_MESSAGE',
    'NO_FILES_MESSAGE',
    'NO_COMMITS_MESSAGE',
    'FAILURE_MESSAGE',
]
