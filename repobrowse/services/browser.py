"""
Tree browser service for repobrowse.

TreeBrowserController sequences a browsing session:

    credential lookup -> repository list -> file tree -> default file
    -> content + history of the selected file

All state lives in an explicit BrowserSession owned by the controller.
The controller runs on a single asyncio event loop; blocking storage and
HTTP calls are awaited through `run_io` and every state change happens
back on the loop, so no locking is needed.

Each file selection takes a new selection token. Content and history
fetches for a selection update the view as soon as each one resolves,
and a response whose token is no longer current is dropped instead of
overwriting the view of a newer selection. Repository selections use a
separate token the same way.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, Optional, Sequence, Tuple

from ..domain import Repository, TreeEntry, CommitSummary, FileView

logger = logging.getLogger(__name__)

DEFAULT_FILE_NAME = "readme.md"

LOGIN_REQUIRED_MESSAGE = "Not logged in. Run 'repobrowse login' to store a GitHub token."
NO_REPOSITORIES_MESSAGE = "No repositories found."
NO_FILES_MESSAGE = "No files in this repository."
NO_COMMITS_MESSAGE = "No commits found for this file."
FAILURE_MESSAGE = "Something went wrong. Please try again."


class Phase(Enum):
    """Where a browsing session is in its lifecycle."""
    UNAUTHENTICATED = "unauthenticated"
    LOADING_REPOSITORIES = "loading_repositories"
    BROWSING = "browsing"
    LOGIN_REQUIRED = "login_required"
    NO_REPOSITORIES = "no_repositories"
    FAILED = "failed"


@dataclass
class BrowserSession:
    """Mutable state of one browsing session."""
    phase: Phase = Phase.UNAUTHENTICATED
    repositories: Tuple[Repository, ...] = ()
    current_repository: Optional[Repository] = None
    entries: Tuple[TreeEntry, ...] = ()
    filter_query: str = ""
    active_path: Optional[str] = None
    file_view: Optional[FileView] = None
    message: Optional[str] = None
    selection_token: int = 0
    repository_token: int = 0

    @property
    def visible_entries(self) -> Tuple[TreeEntry, ...]:
        """Tree entries matching the current filter, in snapshot order."""
        return filter_entries(self.entries, self.filter_query)

    def has_path(self, path: str) -> bool:
        return any(entry.path == path for entry in self.entries)


def filter_entries(entries: Sequence[TreeEntry], query: str) -> Tuple[TreeEntry, ...]:
    """
    Case-insensitive substring filter on entry paths.

    Keeps the input order. An empty query returns every entry.
    """
    if not query:
        return tuple(entries)
    needle = query.lower()
    return tuple(entry for entry in entries if needle in entry.path.lower())


def pick_default_file(entries: Iterable[TreeEntry]) -> Optional[str]:
    """
    Choose the file to open when a repository is first shown.

    readme.md (any case) wins wherever it appears; otherwise the
    lexicographically first path; None for an empty tree.
    """
    paths = [entry.path for entry in entries]
    for path in paths:
        if path.lower() == DEFAULT_FILE_NAME:
            return path
    return min(paths) if paths else None


class BrowserView:
    """
    Rendering hooks called by the controller.

    The base implementation ignores every update; the TUI and the CLI
    override the ones they display.
    """

    def show_message(self, message: str) -> None:
        pass

    def show_repositories(self, repositories: Sequence[Repository], current: Optional[Repository]) -> None:
        pass

    def show_entries(self, entries: Sequence[TreeEntry]) -> None:
        pass

    def show_active_file(self, path: Optional[str]) -> None:
        pass

    def show_content(self, path: str, content: str) -> None:
        pass

    def show_commits(self, path: str, commits: Sequence[CommitSummary]) -> None:
        pass


class TreeBrowserController:
    """
    Drives one browsing session.

    Example:
        controller = TreeBrowserController(store, client, view)
        await controller.start()
        controller.set_filter("src/")
        await controller.select_file("src/main.py")
    """

    def __init__(
        self,
        secret_store: Any,
        client: Any,
        view: Optional[BrowserView] = None,
        on_login_required: Optional[Callable[[], None]] = None,
        run_io: Optional[Callable[..., Awaitable[Any]]] = None,
    ):
        """
        Initialize TreeBrowserController.

        Args:
            secret_store: Object with get()/delete() for the access token
            client: GitHubClient (or compatible) used for every fetch
            view: Receives rendering updates
            on_login_required: Called when the session has no usable token
            run_io: Awaits a blocking call; defaults to asyncio.to_thread
        """
        self.secret_store = secret_store
        self.client = client
        self.view = view or BrowserView()
        self.on_login_required = on_login_required
        self.run_io = run_io or asyncio.to_thread
        self.session = BrowserSession()

    async def start(self) -> BrowserSession:
        """
        Load the repository list and open the first repository.

        Ends in BROWSING, LOGIN_REQUIRED, NO_REPOSITORIES or FAILED.
        Never raises.
        """
        try:
            token = await self.run_io(self.secret_store.get)
            if not token:
                self._require_login()
                return self.session

            self.session.phase = Phase.LOADING_REPOSITORIES
            repositories = await self.run_io(self.client.list_repositories)
            self.session.repositories = tuple(repositories)

            if not repositories:
                self.session.phase = Phase.NO_REPOSITORIES
                self._show_message(NO_REPOSITORIES_MESSAGE)
                return self.session

            await self._open_repository(repositories[0])
        except Exception:
            logger.exception("Failed to load repositories")
            self._fail()

        return self.session

    async def select_repository(self, repository: Repository, open_default_file: bool = True) -> None:
        """Replace the tree snapshot with `repository`'s and open its default file."""
        try:
            await self._open_repository(repository, open_default_file)
        except Exception:
            logger.exception(f"Failed to load tree for {repository}")
            self._fail()

    async def select_file(self, path: str) -> bool:
        """
        Make `path` the active file and load its content and history.

        Returns:
            False if the path is not in the current tree snapshot
        """
        session = self.session
        repository = session.current_repository
        if repository is None or not session.has_path(path):
            logger.warning(f"Ignoring selection of {path!r}: not in the current tree")
            return False

        session.selection_token += 1
        token = session.selection_token
        session.active_path = path
        session.file_view = FileView(path=path)
        self.view.show_active_file(path)

        await asyncio.gather(
            self._load_content(token, repository, path),
            self._load_history(token, repository, path),
        )
        return True

    def set_filter(self, query: str) -> Tuple[TreeEntry, ...]:
        """Apply a live filter; the snapshot and active file are unchanged."""
        self.session.filter_query = query
        visible = self.session.visible_entries
        self.view.show_entries(visible)
        return visible

    async def logout(self) -> None:
        """Forget the stored token and send the user back to login."""
        await self.run_io(self.secret_store.delete)
        self.session = BrowserSession()
        self._require_login()

    async def _open_repository(self, repository: Repository, open_default_file: bool = True) -> None:
        session = self.session
        session.phase = Phase.BROWSING
        session.repository_token += 1
        token = session.repository_token

        session.current_repository = repository
        session.entries = ()
        session.message = None
        session.active_path = None
        session.file_view = None
        # Invalidate any in-flight file fetch for the previous tree
        session.selection_token += 1
        self.view.show_repositories(session.repositories, repository)
        self.view.show_entries(())
        self.view.show_active_file(None)

        entries = await self.run_io(
            self.client.fetch_file_tree,
            repository.owner,
            repository.name,
            repository.default_branch,
        )
        if token != session.repository_token:
            logger.debug(f"Discarding stale tree for {repository}")
            return

        session.entries = tuple(entries)
        self.view.show_entries(session.visible_entries)

        if not session.entries:
            self._show_message(NO_FILES_MESSAGE)
            return

        if open_default_file:
            await self.select_file(pick_default_file(session.entries))

    async def _load_content(self, token: int, repository: Repository, path: str) -> None:
        content = await self.run_io(self.client.fetch_file_content, repository.owner, repository.name, path)
        if token != self.session.selection_token:
            logger.debug(f"Discarding stale content for {path}")
            return

        self.session.file_view = replace(self.session.file_view or FileView(path=path), content=content)
        self.view.show_content(path, content)

    async def _load_history(self, token: int, repository: Repository, path: str) -> None:
        commits = await self.run_io(self.client.fetch_commit_history, repository.owner, repository.name, path)
        if token != self.session.selection_token:
            logger.debug(f"Discarding stale history for {path}")
            return

        self.session.file_view = replace(self.session.file_view or FileView(path=path), commits=tuple(commits))
        self.view.show_commits(path, commits)

    def _show_message(self, message: str) -> None:
        self.session.message = message
        self.view.show_message(message)

    def _require_login(self) -> None:
        self.session.phase = Phase.LOGIN_REQUIRED
        self._show_message(LOGIN_REQUIRED_MESSAGE)
        if self.on_login_required:
            self.on_login_required()

    def _fail(self) -> None:
        self.session.phase = Phase.FAILED
        self._show_message(FAILURE_MESSAGE)
