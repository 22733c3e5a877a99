"""
Tests for repobrowse.infra.github_client.

Tests cover:
- Request construction (auth header, media types, params)
- Translation of API responses into domain objects
- Degrading to empty/placeholder results on every kind of failure
- Login redirect when no token is stored
"""

from unittest.mock import patch, Mock

import pytest
import requests

from repobrowse.domain import Repository, TreeEntry
from repobrowse.infra.github_client import (
    GitHubClient,
    FILE_CONTENT_ERROR,
    JSON_MEDIA_TYPE,
    RAW_MEDIA_TYPE,
    sort_tree_entries,
)


# ──────────────────────────────────────────────
# Fixtures: sample API responses
# ──────────────────────────────────────────────

SAMPLE_REPOS = [
    {
        "name": "newest",
        "full_name": "octocat/newest",
        "owner": {"login": "octocat"},
        "default_branch": "main",
        "updated_at": "2024-03-02T00:00:00Z",
    },
    {
        "name": "older",
        "full_name": "octocat/older",
        "owner": {"login": "octocat"},
        "default_branch": "master",
        "updated_at": "2024-01-01T00:00:00Z",
    },
]

SAMPLE_TREE = {
    "sha": "deadbeef",
    "truncated": False,
    "tree": [
        {"path": "src", "type": "tree"},
        {"path": "src/a.go", "type": "blob"},
        {"path": "readme.md", "type": "blob"},
        {"path": "LICENSE", "type": "blob"},
        {"path": "vendor/lib", "type": "commit"},
        {"path": "Makefile", "type": "blob"},
    ],
}

SAMPLE_COMMITS = [
    {"commit": {"author": {"name": f"Author {i}", "date": f"2024-01-0{i + 1}T00:00:00Z"},
                "message": f"Commit {i}"}}
    for i in range(5)
]


def make_response(json_data=None, text=None, status_error=None):
    response = Mock()
    response.json.return_value = json_data
    response.text = text
    response.encoding = None
    if status_error:
        response.raise_for_status = Mock(side_effect=status_error)
    else:
        response.raise_for_status = Mock()
    return response


@pytest.fixture
def client():
    return GitHubClient(token_provider=lambda: "ghp_test")


class TestSortTreeEntries:
    """Tests for blob filtering and ordering."""

    def test_keeps_only_blobs_sorted(self):
        entries = sort_tree_entries(SAMPLE_TREE["tree"])
        assert [e.path for e in entries] == ["LICENSE", "Makefile", "readme.md", "src/a.go"]
        assert all(e.kind == "blob" for e in entries)

    def test_case_sensitive_order(self):
        items = [{"path": p, "type": "blob"} for p in ["b.txt", "B.txt", "a.txt", "A.txt"]]
        assert [e.path for e in sort_tree_entries(items)] == ["A.txt", "B.txt", "a.txt", "b.txt"]

    def test_stable_across_input_orders(self):
        items = SAMPLE_TREE["tree"]
        assert sort_tree_entries(items) == sort_tree_entries(list(reversed(items)))

    def test_skips_non_dict_items(self):
        items = [None, "a.txt", 3, {"path": "b.txt", "type": "blob"}]
        assert sort_tree_entries(items) == (TreeEntry("b.txt"),)


class TestListRepositories:

    def test_returns_repositories_in_server_order(self, client):
        with patch.object(client.session, 'get', return_value=make_response(SAMPLE_REPOS)) as mock_get:
            repos = client.list_repositories()

        assert [r.name for r in repos] == ["newest", "older"]
        assert repos[1] == Repository.from_api_response(SAMPLE_REPOS[1])

        url = mock_get.call_args.args[0]
        kwargs = mock_get.call_args.kwargs
        assert url == "https://api.github.com/user/repos"
        assert kwargs['params'] == {'sort': 'updated', 'per_page': 10}
        assert kwargs['headers']['Authorization'] == "token ghp_test"
        assert kwargs['headers']['Accept'] == JSON_MEDIA_TYPE
        assert kwargs['timeout'] is None

    def test_no_token_triggers_login_redirect(self):
        redirect = Mock()
        client = GitHubClient(token_provider=lambda: None, on_login_required=redirect)

        with patch.object(client.session, 'get') as mock_get:
            assert client.list_repositories() == []

        redirect.assert_called_once()
        mock_get.assert_not_called()

    def test_http_error_returns_empty(self, client):
        response = make_response(status_error=requests.HTTPError("401 Unauthorized"))
        with patch.object(client.session, 'get', return_value=response):
            assert client.list_repositories() == []

    def test_connection_error_returns_empty(self, client):
        with patch.object(client.session, 'get', side_effect=requests.ConnectionError("offline")):
            assert client.list_repositories() == []

    def test_invalid_json_returns_empty(self, client):
        response = make_response()
        response.json.side_effect = ValueError("not json")
        with patch.object(client.session, 'get', return_value=response):
            assert client.list_repositories() == []

    def test_unexpected_shape_returns_empty(self, client):
        with patch.object(client.session, 'get', return_value=make_response({"message": "?"})):
            assert client.list_repositories() == []

    def test_does_not_retry(self, client):
        with patch.object(client.session, 'get', side_effect=requests.Timeout("slow")) as mock_get:
            client.list_repositories()
        assert mock_get.call_count == 1


class TestFetchFileTree:

    def test_fetches_recursive_tree(self, client):
        with patch.object(client.session, 'get', return_value=make_response(SAMPLE_TREE)) as mock_get:
            entries = client.fetch_file_tree("octocat", "hello", "main")

        assert entries == (
            TreeEntry("LICENSE"), TreeEntry("Makefile"), TreeEntry("readme.md"), TreeEntry("src/a.go"),
        )
        assert mock_get.call_args.args[0] == "https://api.github.com/repos/octocat/hello/git/trees/main"
        assert mock_get.call_args.kwargs['params'] == {'recursive': '1'}

    def test_branch_with_slash_is_encoded(self, client):
        with patch.object(client.session, 'get', return_value=make_response(SAMPLE_TREE)) as mock_get:
            client.fetch_file_tree("o", "r", "feature/x")
        assert mock_get.call_args.args[0].endswith("/git/trees/feature%2Fx")

    def test_repeated_calls_are_identical(self, client):
        with patch.object(client.session, 'get', return_value=make_response(SAMPLE_TREE)):
            assert client.fetch_file_tree("o", "r", "main") == client.fetch_file_tree("o", "r", "main")

    def test_failure_returns_empty(self, client):
        response = make_response(status_error=requests.HTTPError("404"))
        with patch.object(client.session, 'get', return_value=response):
            assert client.fetch_file_tree("o", "r", "main") == ()

    def test_malformed_items_are_skipped(self, client):
        body = {"tree": [None, {"path": "a", "type": "blob"}]}
        with patch.object(client.session, 'get', return_value=make_response(body)):
            assert client.fetch_file_tree("o", "r", "main") == (TreeEntry("a"),)

    def test_non_list_tree_returns_empty(self, client):
        with patch.object(client.session, 'get', return_value=make_response({"tree": "oops"})):
            assert client.fetch_file_tree("o", "r", "main") == ()


class TestFetchFileContent:

    def test_requests_raw_content(self, client):
        response = make_response(text="# Hello\n")
        with patch.object(client.session, 'get', return_value=response) as mock_get:
            content = client.fetch_file_content("octocat", "hello", "docs/read me.md")

        assert content == "# Hello\n"
        assert mock_get.call_args.args[0] == "https://api.github.com/repos/octocat/hello/contents/docs/read%20me.md"
        assert mock_get.call_args.kwargs['headers']['Accept'] == RAW_MEDIA_TYPE
        assert response.encoding == 'utf-8'

    def test_failure_returns_placeholder(self, client):
        response = make_response(status_error=requests.HTTPError("500"))
        with patch.object(client.session, 'get', return_value=response):
            assert client.fetch_file_content("o", "r", "a.txt") == FILE_CONTENT_ERROR

    def test_no_token_returns_placeholder(self):
        client = GitHubClient(token_provider=lambda: None)
        with patch.object(client.session, 'get') as mock_get:
            assert client.fetch_file_content("o", "r", "a.txt") == FILE_CONTENT_ERROR
        mock_get.assert_not_called()


class TestFetchCommitHistory:

    def test_returns_five_commits_in_server_order(self, client):
        with patch.object(client.session, 'get', return_value=make_response(SAMPLE_COMMITS)) as mock_get:
            commits = client.fetch_commit_history("octocat", "hello", "readme.md")

        assert [c.author_name for c in commits] == [f"Author {i}" for i in range(5)]
        assert mock_get.call_args.args[0] == "https://api.github.com/repos/octocat/hello/commits"
        assert mock_get.call_args.kwargs['params'] == {'path': 'readme.md', 'per_page': 5}

    def test_truncates_to_limit(self):
        client = GitHubClient(token_provider=lambda: "t", commit_limit=2)
        with patch.object(client.session, 'get', return_value=make_response(SAMPLE_COMMITS)):
            assert len(client.fetch_commit_history("o", "r", "f")) == 2

    def test_failure_returns_empty(self, client):
        with patch.object(client.session, 'get', side_effect=requests.ConnectionError()):
            assert client.fetch_commit_history("o", "r", "f") == []

    def test_malformed_commits(self, client):
        body = [None, {"commit": None}, {"commit": {"author": "mona", "message": "m"}}]
        with patch.object(client.session, 'get', return_value=make_response(body)):
            commits = client.fetch_commit_history("o", "r", "f")
        assert [c.author_name for c in commits] == ["unknown", "unknown"]
        assert commits[1].message == "m"


class TestAuthenticatedUser:

    def test_uses_explicit_token(self):
        client = GitHubClient(token_provider=lambda: None)
        with patch.object(client.session, 'get', return_value=make_response({"login": "octocat"})) as mock_get:
            assert client.get_authenticated_user(token="ghp_new") == "octocat"
        assert mock_get.call_args.kwargs['headers']['Authorization'] == "token ghp_new"

    def test_rejected_token(self, client):
        response = make_response(status_error=requests.HTTPError("401"))
        with patch.object(client.session, 'get', return_value=response):
            assert client.get_authenticated_user() is None


class TestFromConfig:

    def test_reads_github_section(self):
        config = {'github': {'api_base': 'https://ghe.example.com/api/v3/', 'repo_page_size': 30,
                             'commit_history_limit': 3, 'timeout_seconds': 15}}
        client = GitHubClient.from_config(config, token_provider=lambda: "t")
        assert client.api_base == 'https://ghe.example.com/api/v3'
        assert client.repo_page_size == 30
        assert client.commit_limit == 3
        assert client.timeout == 15
