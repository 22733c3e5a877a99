"""
repobrowse - Browse your GitHub repositories from the terminal.

repobrowse keeps a personal access token between sessions and uses it to
list your repositories, walk a repository's file tree and read files with
their recent commit history.

Quick Start:
    import asyncio
    import repobrowse

    store = repobrowse.create_secret_store()
    store.save("ghp_...")

    client = repobrowse.GitHubClient(token_provider=store.get)
    controller = repobrowse.TreeBrowserController(store, client)
    session = asyncio.run(controller.start())

    print(session.current_repository, session.active_path)

Domain Objects:
    Repository - A repository from the user's listing
    TreeEntry - One file path in a repository snapshot
    CommitSummary - One commit touching a file
    FileView - Content and history of the active file

Storage:
    FallbackSecretStore - SQLite store with a JSON file fallback
"""

__version__ = "0.3.0"

from .domain import Repository, TreeEntry, CommitSummary, FileView
from .infra import GitHubClient
from .storage import FallbackSecretStore, SecretStoreError, create_secret_store
from .services import TreeBrowserController, BrowserSession, BrowserView, Phase
from .config import load_config, save_config

__all__ = [
    # Version
    "__version__",
    # Domain objects
    "Repository",
    "TreeEntry",
    "CommitSummary",
    "FileView",
    # Infrastructure
    "GitHubClient",
    "FallbackSecretStore",
    "SecretStoreError",
    "create_secret_store",
    # Services
    "TreeBrowserController",
    "BrowserSession",
    "BrowserView",
    "Phase",
    # Configuration
    "load_config",
    "save_config",
]
