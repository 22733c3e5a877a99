"""
Repository domain objects for repobrowse.

Repository, TreeEntry and CommitSummary mirror what the GitHub API returns
for the handful of endpoints repobrowse consumes. They are immutable and
serializable for JSONL output.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, Any, Tuple


@dataclass(frozen=True)
class Repository:
    """
    Immutable representation of a remote repository.

    The browser may point its "current repository" at a different instance,
    but an instance is never changed once fetched.
    """
    owner: str
    name: str
    default_branch: str = "main"

    # Display-only fields carried verbatim from the listing response
    full_name: Optional[str] = None
    description: Optional[str] = None
    is_private: bool = False
    updated_at: Optional[str] = None

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> 'Repository':
        """Create from a GitHub `/user/repos` item."""
        owner = data.get('owner', {})
        owner_login = owner.get('login', '') if isinstance(owner, dict) else str(owner)
        name = data.get('name', '')

        return cls(
            owner=owner_login,
            name=name,
            default_branch=data.get('default_branch') or 'main',
            full_name=data.get('full_name') or f"{owner_login}/{name}",
            description=data.get('description'),
            is_private=bool(data.get('private', False)),
            updated_at=data.get('updated_at'),
        )

    @property
    def slug(self) -> str:
        """owner/name form used on the command line."""
        return f"{self.owner}/{self.name}"

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'owner': self.owner,
            'name': self.name,
            'default_branch': self.default_branch,
            'full_name': self.full_name,
            'description': self.description,
            'is_private': self.is_private,
            'updated_at': self.updated_at,
        }
        return {k: v for k, v in result.items() if v is not None}

    def __str__(self) -> str:
        return self.slug


@dataclass(frozen=True, order=True)
class TreeEntry:
    """One file (blob) path within a repository+branch snapshot."""
    path: str
    kind: str = "blob"

    def to_dict(self) -> Dict[str, Any]:
        return {'path': self.path, 'kind': self.kind}


@dataclass(frozen=True)
class CommitSummary:
    """Author, message and date of a single commit touching a file."""
    author_name: str
    message: str
    authored_date: Optional[datetime] = None

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> 'CommitSummary':
        """Create from a GitHub `/repos/{owner}/{repo}/commits` item."""
        commit = data.get('commit')
        if not isinstance(commit, dict):
            commit = {}
        author = commit.get('author')
        if not isinstance(author, dict):
            author = {}

        return cls(
            author_name=author.get('name') or 'unknown',
            message=commit.get('message') or '',
            authored_date=parse_timestamp(author.get('date')),
        )

    @property
    def subject(self) -> str:
        """First line of the commit message."""
        return self.message.splitlines()[0] if self.message else ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'author_name': self.author_name,
            'message': self.message,
            'authored_date': self.authored_date.isoformat() if self.authored_date else None,
        }


@dataclass(frozen=True)
class FileView:
    """
    Content and recent history of the active file.

    Recomputed on every file selection and never cached across selections.
    """
    path: str
    content: Optional[str] = None
    commits: Tuple[CommitSummary, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': self.path,
            'content': self.content,
            'commits': [c.to_dict() for c in self.commits],
        }


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a GitHub ISO-8601 timestamp ("2024-01-02T03:04:05Z")."""
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return None
