"""Ecosystem detection for a project root."""

from pathlib import Path

from .errors import ConfigNotFoundError, UnknownManagerError
from .managers.base import Manager
from .managers.composer import ComposerManager
from .managers.npm import NpmManager
from .options import Options

MANAGERS: dict[str, type[Manager]] = {
    ComposerManager.name: ComposerManager,
    NpmManager.name: NpmManager,
}


def identify(root: Path | str) -> list[str]:
    """Detect which ecosystems a project uses.

    Args:
        root: The project root directory

    Returns:
        Names of the managers whose manifest file exists in root
    """
    root = Path(root)
    return [
        name
        for name, manager in MANAGERS.items()
        if (root / manager.manifest_file).is_file()
    ]


def create_managers(options: Options, log=None) -> list[Manager]:
    """Build a fresh manager for every configured or detected ecosystem."""
    names = options.managers or identify(options.root_dir)
    if not names:
        manifests = ", ".join(manager.manifest_file for manager in MANAGERS.values())
        raise ConfigNotFoundError(f"can not find any of {manifests} in {options.root_dir}")

    managers = []
    for name in names:
        if name not in MANAGERS:
            raise UnknownManagerError(
                f"unknown manager '{name}', choose from: {', '.join(MANAGERS)}"
            )
        managers.append(MANAGERS[name](
            options.root_dir,
            executable=options.executables.get(name),
            timeout=options.timeout,
            max_concurrency=options.max_concurrency,
            log=log,
        ))

    return managers
