#!/usr/bin/env python3

import click

from repobrowse.commands.auth import login_handler, logout_handler, whoami_handler
from repobrowse.commands.browse import repos_handler, tree_handler, show_handler, browse_handler
from repobrowse.commands.config import config_cmd


@click.group()
@click.version_option(package_name='repobrowse')
def cli():
    """repobrowse - Browse your GitHub repositories from the terminal.

    Log in once with a personal access token, then list repositories,
    walk a repository's files and read any file with its recent commits.
    """
    pass


# Authentication
cli.add_command(login_handler, name='login')
cli.add_command(logout_handler, name='logout')
cli.add_command(whoami_handler, name='whoami')

# Browsing
cli.add_command(repos_handler, name='repos')
cli.add_command(tree_handler, name='tree')
cli.add_command(show_handler, name='show')
cli.add_command(browse_handler, name='browse')

# Command groups
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
