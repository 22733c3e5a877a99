"""
Handles the 'login', 'logout' and 'whoami' commands.

`login` is the entry point every other command sends the user to when
no token is stored. It refuses to finish if the token cannot be
persisted in either store.
"""

import click

from ..cli_utils import build_context, standard_command, add_common_options
from ..exit_codes import CommandError, AuthenticationRequiredError, StorageError, USAGE_ERROR
from ..storage import SecretStoreError, get_username, save_username, clear_username


@click.command(name='login')
@click.option('--token', help='Personal access token (prompted for if omitted)')
@click.option('--username', help='Record this username instead of asking GitHub')
@click.option('--no-verify', is_flag=True, help='Store the token without checking it against the API')
@add_common_options('verbose')
@standard_command
def login_handler(token, username, no_verify, verbose):
    """Store a GitHub personal access token.

    \b
    The token is kept in ~/.repobrowse/repobrowse.db, or in
    ~/.repobrowse/store.json when the database cannot be written.

    Examples:

    \b
        repobrowse login
        repobrowse login --token ghp_xxx --username octocat
    """
    if token is None:
        token = click.prompt("GitHub personal access token", hide_input=True)
    token = token.strip()
    if not token:
        raise CommandError("The token must not be empty.", USAGE_ERROR)

    context = build_context(verbose=verbose)

    if not no_verify and not username:
        username = context.client.get_authenticated_user(token=token)
        if username is None:
            raise AuthenticationRequiredError("GitHub did not accept this token.")

    try:
        context.store.save(token)
    except SecretStoreError as e:
        raise StorageError(str(e)) from e

    if username:
        try:
            save_username(username, context.config)
        except (OSError, ValueError) as e:
            click.secho(f"Token saved, but the username could not be recorded: {e}", fg='yellow', err=True)

    click.echo(f"Logged in as {username}." if username else "Token saved.")


@click.command(name='logout')
@add_common_options('verbose')
@standard_command
def logout_handler(verbose):
    """Forget the stored GitHub token."""
    context = build_context(verbose=verbose)
    context.store.delete()
    clear_username(context.config)
    click.echo("Logged out.")


@click.command(name='whoami')
@add_common_options('verbose')
@standard_command
def whoami_handler(verbose):
    """Show who is logged in."""
    context = build_context(verbose=verbose)
    context.require_token()
    click.echo(get_username(context.config) or "(token stored, username unknown)")
