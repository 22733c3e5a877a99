"""
Infrastructure layer for repobrowse.

Contains abstractions for external systems:
- GitHubClient: GitHub REST API access

Secret persistence lives in repobrowse.storage.
"""

from .github_client import (
    GitHubClient,
    FILE_CONTENT_ERROR,
    GITHUB_API_BASE,
    sort_tree_entries,
)

__all__ = [
    'GitHubClient',
    'FILE_CONTENT_ERROR',
    'GITHUB_API_BASE',
    'sort_tree_entries',
]
