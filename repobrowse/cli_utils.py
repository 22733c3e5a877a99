"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import sys
import click
from dataclasses import dataclass
from functools import wraps
from typing import Any, Dict, Iterable, Optional

from .config import load_config, configure_logging
from .exit_codes import SUCCESS, INTERRUPTED, GENERAL_ERROR, CommandError, AuthenticationRequiredError
from .infra import GitHubClient
from .storage import FallbackSecretStore, create_secret_store


@dataclass
class CommandContext:
    """Configuration, secret store and API client shared by one command run."""
    config: Dict[str, Any]
    store: FallbackSecretStore
    client: Optional[GitHubClient] = None
    login_required: bool = False

    def require_token(self) -> str:
        token = self.store.get()
        if not token:
            raise AuthenticationRequiredError()
        return token


def build_context(verbose: bool = False) -> CommandContext:
    """Load configuration and wire the secret store to a GitHub client."""
    config = load_config()
    configure_logging(config, verbose=verbose)
    store = create_secret_store(config)

    context = CommandContext(config=config, store=store)

    def on_login_required() -> None:
        context.login_required = True

    context.client = GitHubClient.from_config(config, token_provider=store.get, on_login_required=on_login_required)
    return context


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Automatic --verbose/-v flag handling (debug logging on stderr)
    - CommandError mapped to its exit code with the message on stderr
    - Ctrl+C mapped to the INTERRUPTED exit code
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            func(*args, **kwargs)
            sys.exit(SUCCESS)
        except KeyboardInterrupt:
            click.echo("Interrupted by user", err=True)
            sys.exit(INTERRUPTED)
        except click.ClickException:
            raise
        except CommandError as e:
            click.secho(str(e), fg='red', err=True)
            sys.exit(e.exit_code)
        except Exception as e:
            click.secho(f"Command failed: {e}", fg='red', err=True)
            sys.exit(GENERAL_ERROR)

    return wrapper


def output_jsonl(items: Iterable[Any]) -> None:
    """Print one JSON object per line (objects with to_dict() are converted)."""
    for item in items:
        data = item.to_dict() if hasattr(item, 'to_dict') else item
        print(json.dumps(data, ensure_ascii=False), flush=True)


# Standard options that many commands share
common_options = {
    'verbose': click.option('-v', '--verbose', is_flag=True,
                            help='Show debug logging on stderr'),
    'json': click.option('--json', 'as_json', is_flag=True,
                         help='Output JSONL instead of a table'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('verbose', 'json')
        def my_command(verbose, as_json):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator
