"""npm (Node.js) backend."""

import re

from ..errors import LockMalformedError
from ..models import Package
from .base import LockedPackage, Manager

VERSION_PATTERN = re.compile(r"^\s*v?(\d+\.\d+(?:\.\d+)?(?:[-+][0-9A-Za-z.-]+)?)\s*$", re.MULTILINE)

# Committishes that do not follow a branch: commit shas, semver ranges and version tags
FIXED_COMMITTISH = re.compile(r"^(?:[0-9a-f]{7,40}|semver:.*|v?\d+(?:\.\d+)+(?:[-+][0-9A-Za-z.-]+)?)$")

HOSTED_GIT = {
    "github": "https://github.com/{}.git",
    "gitlab": "https://gitlab.com/{}.git",
    "bitbucket": "https://bitbucket.org/{}.git",
}

MODULES_PREFIX = "node_modules/"


def extract_npm_version(output: str) -> str | None:
    """Extract the version printed by `npm view <name> version`."""
    match = VERSION_PATTERN.search(output)
    return match.group(1) if match else None


def extract_git_ref(output: str, ref: str = "HEAD") -> str | None:
    """Extract the commit of ref printed by `git ls-remote <url> <ref>`."""
    match = re.search(rf"^([a-f0-9]{{40}})\s+{re.escape(ref)}\s*$", output, re.MULTILINE)
    return match.group(1) if match else None


def split_git_resolved(resolved: str | None) -> tuple[str, str] | None:
    """Split "git+ssh://host/repo.git#<sha>" or "github:owner/repo#<sha>" into (url, sha)."""
    if not resolved or "#" not in resolved:
        return None

    location, _, reference = resolved.partition("#")
    host, _, path = location.partition(":")
    if location.startswith("git+"):
        url = location[len("git+"):]
    elif host in HOSTED_GIT and path and "/" in path:
        url = HOSTED_GIT[host].format(path.removesuffix(".git"))
    else:
        return None

    if not url or not reference:
        return None
    return url, reference


def branch_ref(spec: str | None) -> str | None:
    """The ls-remote ref a git dependency spec follows, or None for fixed pins.

    "github:acme/widget" follows HEAD, "github:acme/widget#develop" follows
    refs/heads/develop, "#v1.2.0" and "#<sha>" never move.
    """
    if not spec or "#" not in spec:
        return "HEAD"

    committish = spec.partition("#")[2]
    if not committish or FIXED_COMMITTISH.match(committish):
        return None
    return f"refs/heads/{committish}"


class NpmManager(Manager):
    """Checks package.json / package-lock.json against `npm view`."""

    name = "npm"
    manifest_file = "package.json"
    lock_file = "package-lock.json"
    default_executable = ("npm",)

    def read_required(self, manifest: dict) -> dict[str, str]:
        dependencies = manifest.get("dependencies") or {}
        if not isinstance(dependencies, dict):
            return {}
        return dict(dependencies)

    def read_installed(self, lock: dict) -> list[LockedPackage]:
        # lockfileVersion 2 and 3 list packages by install path, version 1 by name
        if isinstance(lock.get("packages"), dict):
            packages = lock["packages"]
            root_specs = (packages.get("") or {}).get("dependencies") or {}
            entries = {
                path[len(MODULES_PREFIX):]: info
                for path, info in packages.items()
                if path.startswith(MODULES_PREFIX) and MODULES_PREFIX not in path[len(MODULES_PREFIX):]
            }
        elif isinstance(lock.get("dependencies"), dict):
            root_specs = {}
            entries = lock["dependencies"]
        else:
            raise LockMalformedError(f"{self.name}: lock file is missing its packages")

        locked = []
        for name, info in entries.items():
            if isinstance(info, dict) and info.get("link"):
                # workspace member, installed from the project itself
                continue
            if not isinstance(info, dict) or not isinstance(info.get("version"), str):
                raise LockMalformedError(f"{self.name}: lock file has no version for {name}")

            version = info["version"]
            git = split_git_resolved(info.get("resolved")) or split_git_resolved(version)
            if not git:
                locked.append(LockedPackage(name=name, version=version))
                continue

            url, reference = git
            spec = self.get_package_by_name(name).required_version or root_specs.get(name) or info.get("from")
            ref = branch_ref(spec)
            locked.append(LockedPackage(
                name=name,
                version=version,
                reference=reference if ref else None,
                source_url=url,
                source_ref=ref,
            ))

        return locked

    def is_checkable(self, package: Package) -> bool:
        # git dependencies pinned to a tag or commit can not move
        return package.source_url is None or package.is_installed_by_reference()

    def inspect_command(self, package: Package) -> list[str]:
        if package.is_installed_by_reference():
            return ["git", "ls-remote", package.source_url, package.source_ref or "HEAD"]
        return [*self.executable, "view", package.name, "version"]

    def extract_latest(self, package: Package, output: str) -> str | None:
        if package.is_installed_by_reference():
            return extract_git_ref(output, package.source_ref or "HEAD")
        return extract_npm_version(output)
