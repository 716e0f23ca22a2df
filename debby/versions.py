"""Comparison of installed and candidate versions."""

from packaging.version import InvalidVersion, Version


class InvalidVersionError(ValueError):
    """A version string could not be parsed."""


def parse_version(value: str) -> Version:
    """Parse a version string as reported by an ecosystem tool.

    Accepts a leading ``v`` and any number of dotted numeric components;
    missing trailing components compare as zero (``1.2 == 1.2.0``).

    Raises:
        InvalidVersionError: if the string is not a version
    """
    if not value or not value.strip():
        raise InvalidVersionError("empty version")

    try:
        return Version(value.strip())
    except InvalidVersion:
        raise InvalidVersionError(f"invalid version '{value}'")


def is_newer(installed: str, candidate: str) -> bool:
    """Check whether candidate is strictly newer than installed.

    Args:
        installed: The installed version, e.g. "1.0.0"
        candidate: The version reported by the ecosystem tool, e.g. "v1.2"

    Returns:
        True if candidate > installed
    """
    return parse_version(candidate) > parse_version(installed)


def is_newer_reference(installed: str, candidate: str) -> bool:
    """Check whether a commit reference differs from the installed one.

    Commits have no ordering, so any different reference is considered newer.
    """
    if not candidate or not candidate.strip():
        raise InvalidVersionError("empty reference")

    return candidate.strip().lower() != (installed or "").strip().lower()
