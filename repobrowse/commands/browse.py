"""
Handles the browsing commands: 'repos', 'tree', 'show' and 'browse'.

`tree` and `show` drive the same TreeBrowserController as the
full-screen browser, one repository selection per invocation.
"""

import asyncio
import json
from typing import Optional

import click

from ..cli_utils import CommandContext, build_context, standard_command, add_common_options, output_jsonl
from ..domain import Repository
from ..exit_codes import (
    CommandError, NoReposFoundError, APIError, AuthenticationRequiredError, USAGE_ERROR,
)
from ..render import render_repositories, render_tree, render_content, render_commits
from ..services import TreeBrowserController, Phase, NO_FILES_MESSAGE


def resolve_repository(context: CommandContext, slug: str, branch: Optional[str] = None) -> Repository:
    """
    Turn OWNER/REPO into a Repository.

    The listing supplies the default branch when the repository is on
    its first page; otherwise the tree is read at HEAD.
    """
    owner, sep, name = slug.strip('/').partition('/')
    if not sep or not owner or not name or '/' in name:
        raise CommandError(f"Expected OWNER/REPO, got '{slug}'.", USAGE_ERROR)

    if branch:
        return Repository(owner=owner, name=name, default_branch=branch)

    for repo in context.client.list_repositories():
        if repo.slug.lower() == f"{owner}/{name}".lower():
            return repo

    return Repository(owner=owner, name=name, default_branch='HEAD')


async def _open(controller: TreeBrowserController, repository: Repository, path: Optional[str]) -> bool:
    await controller.select_repository(repository, open_default_file=path is None)
    if path is None:
        return controller.session.active_path is not None
    return await controller.select_file(path)


@click.command(name='repos')
@add_common_options('verbose', 'json')
@standard_command
def repos_handler(verbose, as_json):
    """List your most recently updated repositories."""
    context = build_context(verbose=verbose)
    context.require_token()

    repositories = context.client.list_repositories()
    if not repositories:
        raise NoReposFoundError()

    if as_json:
        output_jsonl(repositories)
    else:
        render_repositories(repositories)


@click.command(name='tree')
@click.argument('repository')
@click.option('--filter', 'query', default='', help='Only show paths containing this text (case-insensitive)')
@click.option('-b', '--branch', help='Branch to read (default: the repository default branch)')
@add_common_options('verbose', 'json')
@standard_command
def tree_handler(repository, query, branch, verbose, as_json):
    """List the files of a repository.

    REPOSITORY: OWNER/REPO

    Examples:

    \b
        repobrowse tree octocat/hello-world
        repobrowse tree octocat/hello-world --filter src/
    """
    context = build_context(verbose=verbose)
    context.require_token()
    repo = resolve_repository(context, repository, branch)

    controller = TreeBrowserController(context.store, context.client)
    asyncio.run(controller.select_repository(repo, open_default_file=False))
    if controller.session.phase == Phase.FAILED:
        raise APIError(controller.session.message or "Could not load the file tree.")

    visible = controller.set_filter(query)
    if as_json:
        output_jsonl(visible)
    else:
        render_tree(repo, visible, query)


@click.command(name='show')
@click.argument('repository')
@click.argument('path', required=False)
@click.option('-b', '--branch', help='Branch whose tree is checked for PATH')
@add_common_options('verbose', 'json')
@standard_command
def show_handler(repository, path, branch, verbose, as_json):
    """Show a file and its recent commits.

    REPOSITORY: OWNER/REPO
    PATH: File to show (default: README.md, else the first file)

    Examples:

    \b
        repobrowse show octocat/hello-world
        repobrowse show octocat/hello-world src/main.py
    """
    context = build_context(verbose=verbose)
    context.require_token()
    repo = resolve_repository(context, repository, branch)

    controller = TreeBrowserController(context.store, context.client)
    opened = asyncio.run(_open(controller, repo, path))
    session = controller.session

    if session.phase == Phase.FAILED:
        raise APIError(session.message or "Could not load the repository.")
    if not session.entries:
        raise CommandError(NO_FILES_MESSAGE)
    if not opened or session.file_view is None:
        raise CommandError(f"'{path}' is not a file in {repo.slug}.")

    file_view = session.file_view
    if as_json:
        print(json.dumps(file_view.to_dict(), ensure_ascii=False))
        return

    render_content(file_view.path, file_view.content or "")
    render_commits(file_view.commits)


@click.command(name='browse')
@add_common_options('verbose')
@standard_command
def browse_handler(verbose):
    """Open the full-screen repository browser."""
    from ..tui import run_tui

    context = build_context(verbose=verbose)
    message = run_tui(context)
    if context.login_required:
        raise AuthenticationRequiredError(message or "Not logged in. Run 'repobrowse login' first.")
    if message:
        click.echo(message)
