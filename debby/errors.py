"""Exceptions raised while checking dependencies."""


class DebbyError(Exception):
    """Base exception for all check errors."""


class ConfigNotFoundError(DebbyError):
    """Raised when a manifest file is missing from the project root."""


class ConfigMalformedError(DebbyError):
    """Raised when a manifest file can not be read as expected."""


class NoRequirementsError(ConfigMalformedError):
    """Raised when a manifest declares no installable dependencies."""


class LockNotFoundError(DebbyError):
    """Raised when a lock file is missing from the project root."""


class LockMalformedError(DebbyError):
    """Raised when a lock file is not valid or misses its package list."""


class ToolInvocationError(DebbyError):
    """Raised when an external inspection command fails or times out."""

    def __init__(self, command: list[str], reason: str):
        self.command = command
        self.reason = reason
        super().__init__(f"command '{' '.join(command)}' failed: {reason}")


class VersionNotFoundError(DebbyError):
    """Raised when the latest version can not be extracted for a package."""

    def __init__(self, manager: str, package: str, detail: str | None = None):
        self.manager = manager
        self.package = package
        message = f"{manager}: can not find out latest release for {package}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class IncompletePackageError(DebbyError):
    """Raised when a package is compared before its installed state is known."""


class UnknownManagerError(DebbyError):
    """Raised when a manager name has no registered backend."""


class NotificationError(DebbyError):
    """Raised when a report can not be delivered."""
