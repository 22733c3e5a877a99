"""
Domain layer for repobrowse.

Contains pure domain objects with no I/O or side effects:
- Repository: A remote repository from the user's listing
- TreeEntry: One file path in a repository snapshot
- CommitSummary: One commit touching a file
- FileView: Content and history of the active file

These objects are immutable and provide serialization
methods for JSONL output.
"""

from .repository import Repository, TreeEntry, CommitSummary, FileView, parse_timestamp

__all__ = [
    'Repository',
    'TreeEntry',
    'CommitSummary',
    'FileView',
    'parse_timestamp',
]
