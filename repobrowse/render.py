"""
Rendering functions for repobrowse output.

This module handles all pretty-printing and table formatting.
Commands fetch data, this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich import box
from typing import Optional, Sequence

from .domain import Repository, TreeEntry, CommitSummary
from .services import NO_REPOSITORIES_MESSAGE, NO_FILES_MESSAGE, NO_COMMITS_MESSAGE

console = Console()


def render_repositories(repositories: Sequence[Repository]) -> None:
    """Render the repository listing as a table, most recently updated first."""
    if not repositories:
        console.print(f"[yellow]{NO_REPOSITORIES_MESSAGE}[/yellow]")
        return

    table = Table(
        title="Repositories",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Repository", style="cyan")
    table.add_column("Branch", style="green")
    table.add_column("Visibility", style="yellow")
    table.add_column("Updated", style="dim")
    table.add_column("Description")

    for repo in repositories:
        table.add_row(
            repo.slug,
            repo.default_branch,
            "private" if repo.is_private else "public",
            (repo.updated_at or "")[:10],
            repo.description or "",
        )

    console.print(table)


def render_tree(repository: Repository, entries: Sequence[TreeEntry], query: str = "") -> None:
    """Print one path per line, or an explicit message when there is nothing to show."""
    if not entries:
        if query:
            console.print(f"[yellow]No files matching '{query}'.[/yellow]")
        else:
            console.print(f"[yellow]{NO_FILES_MESSAGE}[/yellow]")
        return

    console.print(f"[bold]{repository.slug}[/bold] [dim]({repository.default_branch}, {len(entries)} files)[/dim]")
    for entry in entries:
        console.print(entry.path, highlight=False)


def render_content(path: str, content: str) -> None:
    lexer = Syntax.guess_lexer(path, content)
    console.print(Panel(Syntax(content, lexer, line_numbers=True), title=path, box=box.ROUNDED))


def render_commits(commits: Sequence[CommitSummary], title: Optional[str] = "Recent commits") -> None:
    if not commits:
        console.print(f"[yellow]{NO_COMMITS_MESSAGE}[/yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Date", style="dim")
    table.add_column("Author", style="cyan")
    table.add_column("Message")

    for commit in commits:
        table.add_row(format_date(commit), commit.author_name, commit.subject)

    console.print(table)


def format_date(commit: CommitSummary) -> str:
    if commit.authored_date is None:
        return ""
    return commit.authored_date.strftime("%Y-%m-%d %H:%M")
