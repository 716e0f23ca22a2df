"""Composer (PHP) backend."""

import re

from ..errors import LockMalformedError
from ..models import Package
from .base import LockedPackage, Manager

# First stable release on the "versions : ..." line, e.g. "versions : dev-main, * v1.2.0, 1.1.0"
VERSIONS_PATTERN = re.compile(
    r"\bversions\s*:.*?(?<![\w.-])v?(\d+\.\d+(?:\.\d+)?)(?=,|\s*$)",
    re.MULTILINE,
)

# Commit on the "source : [git] <url> <sha>" line
SOURCE_PATTERN = re.compile(r"\bsource\s*:.+ ([a-f0-9]{40})\s*$", re.MULTILINE)


def extract_composer_version(output: str) -> str | None:
    """Extract the latest release from `composer show -a` output."""
    match = VERSIONS_PATTERN.search(output)
    return match.group(1) if match else None


def extract_composer_reference(output: str) -> str | None:
    """Extract the latest source commit from `composer show -a` output."""
    match = SOURCE_PATTERN.search(output)
    return match.group(1) if match else None


class ComposerManager(Manager):
    """Checks composer.json / composer.lock against `composer show`."""

    name = "composer"
    manifest_file = "composer.json"
    lock_file = "composer.lock"
    default_executable = ("composer",)

    def _find_executable(self, executable: str | None) -> list[str]:
        # A composer.phar shipped with the project wins over a global install
        if not executable and (self.root / "composer.phar").is_file():
            return ["php", "composer.phar"]
        return super()._find_executable(executable)

    def read_required(self, manifest: dict) -> dict[str, str]:
        require = manifest.get("require") or {}
        if not isinstance(require, dict):
            return {}

        # Platform packages like 'php' and 'ext-curl' have no vendor
        return {
            name: constraint
            for name, constraint in require.items()
            if "/" in name
        }

    def read_installed(self, lock: dict) -> list[LockedPackage]:
        packages = lock.get("packages")
        if not packages or not isinstance(packages, list):
            raise LockMalformedError(f"{self.name}: lock file is missing its packages")

        locked = []
        for info in packages:
            if not isinstance(info, dict) or "name" not in info or "version" not in info:
                raise LockMalformedError(f"{self.name}: lock file has a package without name or version")

            version = info["version"]
            if not isinstance(version, str):
                raise LockMalformedError(f"{self.name}: lock file has an invalid version for {info['name']}")

            source = info.get("source") or {}
            reference = None
            if version.startswith("dev-"):
                reference = source.get("reference") or (info.get("dist") or {}).get("reference")
                if not reference:
                    raise LockMalformedError(
                        f"{self.name}: lock file has no reference for {info['name']} at {version}"
                    )

            locked.append(LockedPackage(
                name=info["name"],
                version=version,
                reference=reference,
                source_url=source.get("url"),
            ))

        return locked

    def inspect_command(self, package: Package) -> list[str]:
        return [*self.executable, "show", "-a", "--no-ansi", package.name]

    def extract_latest(self, package: Package, output: str) -> str | None:
        if package.is_installed_by_reference():
            return extract_composer_reference(output)
        return extract_composer_version(output)
