"""
GitHub API client infrastructure for repobrowse.

Translates the four read endpoints repobrowse needs into domain objects:
- Repositories of the authenticated user, most recently updated first
- Recursive file tree of a branch (blobs only, sorted by path)
- Raw content of a file at the default ref
- Recent commits touching a file

Nothing raises past this module. Any transport error, non-2xx status or
malformed body is logged and turned into an empty result (or, for file
content, a placeholder string) so callers can render it directly.
"""

import logging
from typing import Callable, Optional, List, Dict, Any, Tuple
from urllib.parse import quote

import requests

from ..domain import Repository, TreeEntry, CommitSummary

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"

JSON_MEDIA_TYPE = "application/vnd.github.v3+json"
RAW_MEDIA_TYPE = "application/vnd.github.v3.raw"

DEFAULT_REPO_PAGE_SIZE = 10
DEFAULT_COMMIT_LIMIT = 5

FILE_CONTENT_ERROR = "Error loading file content."


def sort_tree_entries(items: List[Dict[str, Any]]) -> Tuple[TreeEntry, ...]:
    """
    Keep blob items of a git tree response and sort them by path.

    The sort is by code point, so "README.md" comes before "docs/".
    """
    blobs = [
        TreeEntry(path=item['path'])
        for item in items
        if isinstance(item, dict) and item.get('type') == 'blob' and item.get('path')
    ]
    return tuple(sorted(blobs, key=lambda entry: entry.path))


class GitHubClient:
    """
    Read-only GitHub API client authenticated with a personal access token.

    The token is looked up through `token_provider` on every call, so a
    login or logout elsewhere takes effect on the next request. When no
    token is available, listing repositories calls `on_login_required`.

    Example:
        client = GitHubClient(token_provider=store.get)
        for repo in client.list_repositories():
            tree = client.fetch_file_tree(repo.owner, repo.name, repo.default_branch)
    """

    def __init__(
        self,
        token_provider: Callable[[], Optional[str]],
        on_login_required: Optional[Callable[[], None]] = None,
        api_base: str = GITHUB_API_BASE,
        repo_page_size: int = DEFAULT_REPO_PAGE_SIZE,
        commit_limit: int = DEFAULT_COMMIT_LIMIT,
        timeout: Optional[float] = None,
    ):
        """
        Initialize GitHubClient.

        Args:
            token_provider: Returns the access token, or None when logged out
            on_login_required: Called when a request needs a token and there is none
            api_base: API root, override for GitHub Enterprise
            repo_page_size: Number of repositories requested
            commit_limit: Number of commits requested per file
            timeout: Request timeout in seconds (None waits indefinitely)
        """
        self.token_provider = token_provider
        self.on_login_required = on_login_required
        self.api_base = api_base.rstrip('/')
        self.repo_page_size = repo_page_size
        self.commit_limit = commit_limit
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({'User-Agent': 'repobrowse'})

    @classmethod
    def from_config(
        cls,
        config: Dict[str, Any],
        token_provider: Callable[[], Optional[str]],
        on_login_required: Optional[Callable[[], None]] = None,
    ) -> 'GitHubClient':
        """Create a client using the `github` section of the configuration."""
        github = config.get('github', {})
        return cls(
            token_provider=token_provider,
            on_login_required=on_login_required,
            api_base=github.get('api_base') or GITHUB_API_BASE,
            repo_page_size=github.get('repo_page_size', DEFAULT_REPO_PAGE_SIZE),
            commit_limit=github.get('commit_history_limit', DEFAULT_COMMIT_LIMIT),
            timeout=github.get('timeout_seconds'),
        )

    def _headers(self, token: str, raw: bool = False) -> Dict[str, str]:
        return {
            'Authorization': f'token {token}',
            'Accept': RAW_MEDIA_TYPE if raw else JSON_MEDIA_TYPE,
        }

    def _request(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        raw: bool = False,
        token: Optional[str] = None,
    ) -> Optional[requests.Response]:
        """
        Perform a GET and return the response if it succeeded.

        Returns None when there is no token, on transport errors and
        on any non-2xx status.
        """
        token = token or self.token_provider()
        if not token:
            logger.debug(f"No GitHub token available for {endpoint}")
            return None

        url = f"{self.api_base}/{endpoint}"
        try:
            response = self.session.get(
                url,
                headers=self._headers(token, raw=raw),
                params=params,
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response
        except requests.RequestException as e:
            logger.warning(f"GitHub API request failed for {endpoint}: {e}")
            return None

    def _request_json(self, endpoint: str, params: Optional[Dict[str, Any]] = None, token: Optional[str] = None) -> Any:
        response = self._request(endpoint, params=params, token=token)
        if response is None:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"GitHub API returned invalid JSON for {endpoint}: {e}")
            return None

    def list_repositories(self) -> List[Repository]:
        """
        List the authenticated user's most recently updated repositories.

        Server order is kept. With no token this triggers the login
        redirect and returns an empty list.
        """
        token = self.token_provider()
        if not token:
            logger.info("No GitHub token stored, login required")
            if self.on_login_required:
                self.on_login_required()
            return []

        data = self._request_json(
            "user/repos",
            params={'sort': 'updated', 'per_page': self.repo_page_size},
            token=token,
        )
        if not isinstance(data, list):
            return []

        return [Repository.from_api_response(item) for item in data if isinstance(item, dict)]

    def fetch_file_tree(self, owner: str, repo: str, branch: str) -> Tuple[TreeEntry, ...]:
        """
        Get every file of a branch, recursively.

        Returns:
            Blob entries sorted by path, empty on failure
        """
        endpoint = f"repos/{_quote(owner)}/{_quote(repo)}/git/trees/{quote(branch, safe='')}"
        data = self._request_json(endpoint, params={'recursive': '1'})
        if not isinstance(data, dict):
            return ()

        if data.get('truncated'):
            logger.warning(f"Tree for {owner}/{repo}@{branch} was truncated by the API")

        tree = data.get('tree')
        if not isinstance(tree, list):
            return ()

        return sort_tree_entries(tree)

    def fetch_file_content(self, owner: str, repo: str, path: str) -> str:
        """
        Get the raw content of a file at the default ref.

        Returns:
            File text, or FILE_CONTENT_ERROR on failure
        """
        endpoint = f"repos/{_quote(owner)}/{_quote(repo)}/contents/{quote(path, safe='/')}"
        response = self._request(endpoint, raw=True)
        if response is None:
            return FILE_CONTENT_ERROR

        response.encoding = response.encoding or 'utf-8'
        return response.text

    def fetch_commit_history(self, owner: str, repo: str, path: str) -> List[CommitSummary]:
        """
        Get the most recent commits touching a file, newest first.

        An empty list means "no history"; failures are not distinguished.
        """
        endpoint = f"repos/{_quote(owner)}/{_quote(repo)}/commits"
        data = self._request_json(endpoint, params={'path': path, 'per_page': self.commit_limit})
        if not isinstance(data, list):
            return []

        return [CommitSummary.from_api_response(item) for item in data[:self.commit_limit] if isinstance(item, dict)]

    def get_authenticated_user(self, token: Optional[str] = None) -> Optional[str]:
        """Login name of the token's owner, or None if the token is not accepted."""
        data = self._request_json("user", token=token)
        if isinstance(data, dict):
            return data.get('login')
        return None


def _quote(segment: str) -> str:
    return quote(segment, safe='')
