"""
Standard exit codes for repobrowse commands.

Following Unix/POSIX conventions for command-line tools.
"""

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
NO_REPOS_FOUND = 64      # No repositories found
API_ERROR = 65           # GitHub API call failed
STORAGE_ERROR = 67       # Token could not be persisted
AUTH_ERROR = 69          # Not logged in, or token rejected
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class NoReposFoundError(CommandError):
    """Raised when the account has no repositories to show."""
    def __init__(self, message: str = "No repositories found."):
        super().__init__(message, NO_REPOS_FOUND)


class APIError(CommandError):
    """Raised when an API call a command depends on fails."""
    def __init__(self, message: str):
        super().__init__(message, API_ERROR)


class AuthenticationRequiredError(CommandError):
    """Raised when a command needs a stored token and there is none."""
    def __init__(self, message: str = "Not logged in. Run 'repobrowse login' first."):
        super().__init__(message, AUTH_ERROR)


class StorageError(CommandError):
    """Raised when the token could not be written to any store."""
    def __init__(self, message: str):
        super().__init__(message, STORAGE_ERROR)
