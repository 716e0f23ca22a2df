"""Shared behaviour of package manager backends."""

import asyncio
import json
import shlex
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from ..errors import (
    ConfigMalformedError,
    ConfigNotFoundError,
    LockMalformedError,
    LockNotFoundError,
    NoRequirementsError,
    VersionNotFoundError,
)
from ..models import Package
from ..process import run_tool
from ..versions import InvalidVersionError


@dataclass
class Discovery:
    """A set of packages computed at most once per manager instance."""

    packages: dict[str, Package] = field(default_factory=dict)
    done: bool = False

    def store(self, packages: dict[str, Package]) -> None:
        if self.done:
            raise RuntimeError("discovery already computed")
        self.packages = packages
        self.done = True

    def values(self) -> list[Package]:
        return list(self.packages.values())


@dataclass
class LockedPackage:
    """A package entry read from a lock file."""

    name: str
    version: str
    reference: str | None = None
    source_url: str | None = None
    source_ref: str | None = None


class Manager(ABC):
    """A package ecosystem backend.

    Subclasses describe where the manifest and lock file live, how to read
    them, which command reports the latest release of a package and how to
    extract it from the command output. Discovery results are memoized:
    construct a new manager for every check.
    """

    name: str = ""
    manifest_file: str = ""
    lock_file: str = ""
    default_executable: tuple[str, ...] = ()

    def __init__(
        self,
        root: Path | str,
        executable: str | None = None,
        timeout: float = 30.0,
        max_concurrency: int = 6,
        log=None,
    ):
        """Initialize manager.

        Args:
            root: Project root holding the manifest and lock file
            executable: Command overriding the ecosystem tool, e.g. "php composer.phar"
            timeout: Seconds allowed per tool invocation
            max_concurrency: Maximum concurrent tool invocations
            log: structlog logger, defaults to the "debby.manager" logger
        """
        self.root = Path(root)
        self.executable = self._find_executable(executable)
        self.timeout = timeout
        self.max_concurrency = max_concurrency
        self.log = (log or structlog.get_logger("debby.manager")).bind(manager=self.name)

        self._packages: dict[str, Package] = {}
        self.required = Discovery()
        self.installed = Discovery()
        self.updatable = Discovery()
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._updatable_lock = asyncio.Lock()

    def _find_executable(self, executable: str | None) -> list[str]:
        if executable:
            return shlex.split(executable)
        return list(self.default_executable)

    def get_name(self) -> str:
        return self.name

    def get_package_by_name(self, name: str) -> Package:
        """Get the package with the given name, creating it on first use."""
        if name not in self._packages:
            self._packages[name] = Package(manager=self.name, name=name)
        return self._packages[name]

    @abstractmethod
    def read_required(self, manifest: dict) -> dict[str, str]:
        """Return package name -> version constraint from the manifest."""

    @abstractmethod
    def read_installed(self, lock: dict) -> list[LockedPackage]:
        """Return the packages pinned by the lock file."""

    @abstractmethod
    def inspect_command(self, package: Package) -> list[str]:
        """Return the command reporting the latest release of a package."""

    @abstractmethod
    def extract_latest(self, package: Package, output: str) -> str | None:
        """Extract the latest version (or reference) from command output."""

    def is_checkable(self, package: Package) -> bool:
        """Whether an installed package can have a newer release at all."""
        return True

    def find_required_packages(self) -> list[Package]:
        """Give a list of all packages required by the manifest.

        Raises:
            ConfigNotFoundError: if the manifest is missing
            ConfigMalformedError: if the manifest is not a JSON object
            NoRequirementsError: if the manifest requires no packages
        """
        if not self.required.done:
            path = self.root / self.manifest_file
            self.log.info("manager.required", file=str(path))

            manifest = self._load_json(path, ConfigNotFoundError, ConfigMalformedError)
            requirements = self.read_required(manifest)
            if not requirements:
                raise NoRequirementsError(f"{self.name}: there are no required packages to check in {path}")

            packages = {}
            for name, constraint in requirements.items():
                package = self.get_package_by_name(name)
                package.mark_required(constraint)
                packages[name] = package

            self.required.store(packages)

        return self.required.values()

    def find_installed_packages(self) -> list[Package]:
        """Give a list of all packages pinned by the lock file.

        Raises:
            LockNotFoundError: if the lock file is missing
            LockMalformedError: if the lock file is invalid or lacks its packages
        """
        if not self.installed.done:
            path = self.root / self.lock_file
            self.log.info("manager.installed", file=str(path))

            lock = self._load_json(path, LockNotFoundError, LockMalformedError)
            locked = self.read_installed(lock)

            packages = {}
            for entry in locked:
                package = self.get_package_by_name(entry.name)
                package.mark_installed(entry.version)
                if entry.reference:
                    package.mark_installed_by_reference(entry.reference)
                if entry.source_url:
                    package.source_url = entry.source_url
                if entry.source_ref:
                    package.source_ref = entry.source_ref
                packages[entry.name] = package

            self.installed.store(packages)

        return self.installed.values()

    async def find_updatable_packages(self) -> list[Package]:
        """Give a list of required packages with a newer release available.

        Raises:
            ToolInvocationError: if the ecosystem tool fails for a package
            VersionNotFoundError: if no usable version is found in its output
        """
        async with self._updatable_lock:
            if not self.updatable.done:
                required = self.find_required_packages()
                self.find_installed_packages()

                candidates = []
                for package in required:
                    if not package.is_installed():
                        self.log.warning("manager.not_installed", package=package.name)
                        continue
                    if not self.is_checkable(package):
                        self.log.info("manager.pinned", package=package.name, version=package.installed_version)
                        continue
                    candidates.append(package)

                self.log.info("manager.updatable", count=len(candidates))

                total = len(candidates)
                tasks = [
                    asyncio.ensure_future(self._check_package(package, index, total))
                    for index, package in enumerate(candidates, start=1)
                ]
                try:
                    found = await asyncio.gather(*tasks)
                except BaseException:
                    for task in tasks:
                        task.cancel()
                    await asyncio.gather(*tasks, return_exceptions=True)
                    raise

                self.updatable.store({
                    package.name: package
                    for package, updatable in zip(candidates, found)
                    if updatable
                })

        return self.updatable.values()

    async def _check_package(self, package: Package, index: int, total: int) -> bool:
        async with self._semaphore:
            self.log.debug("manager.inspect", index=index, total=total, package=package.name)
            output = await run_tool(self.inspect_command(package), cwd=self.root, timeout=self.timeout)

        latest = self.extract_latest(package, output)
        if not latest:
            raise VersionNotFoundError(self.name, package.name)

        try:
            newer = package.is_later_version(latest)
        except InvalidVersionError as e:
            raise VersionNotFoundError(self.name, package.name, str(e)) from e

        if not newer:
            return False

        package.mark_updatable(latest)
        self.log.info(
            "manager.update_found",
            package=package.name,
            installed=package.installed_value,
            latest=latest,
        )
        return True

    def _load_json(self, path: Path, missing_error: type, malformed_error: type) -> dict:
        if not path.is_file():
            raise missing_error(f"{self.name}: can not find {path.name} in {self.root}")

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise malformed_error(f"{self.name}: can not read {path}: {e}") from e

        if not isinstance(data, dict):
            raise malformed_error(f"{self.name}: {path} does not contain a JSON object")

        return data
