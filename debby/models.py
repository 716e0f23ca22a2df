"""Core data models for debby."""

from dataclasses import dataclass, field

from .errors import IncompletePackageError
from .versions import is_newer, is_newer_reference


@dataclass(eq=False)
class Package:
    """A single dependency within one manager's namespace.

    State is filled in as the manager learns more about the package:
    required (manifest), installed (lock file) and updatable (tool output).
    """

    manager: str
    name: str
    required_version: str | None = None
    installed_version: str | None = None
    installed_reference: str | None = None
    source_url: str | None = None
    source_ref: str | None = None
    updatable_version: str | None = None

    def mark_required(self, version: str) -> None:
        self.required_version = version

    def mark_installed(self, version: str) -> None:
        self.installed_version = version

    def mark_installed_by_reference(self, reference: str) -> None:
        self.installed_reference = reference

    def mark_updatable(self, version: str) -> None:
        """Record a newer version or reference for this package.

        Raises:
            IncompletePackageError: if the package is not required and installed
            ValueError: if version is not newer than what is installed
        """
        if self.required_version is None:
            raise IncompletePackageError(f"{self.manager}: {self.name} is not required")
        if not self.is_later_version(version):
            raise ValueError(
                f"{self.manager}: {version} is not newer than the installed "
                f"{self.installed_value} of {self.name}"
            )
        self.updatable_version = version

    def is_installed(self) -> bool:
        return self.installed_version is not None

    @property
    def installed_by_reference(self) -> bool:
        return self.installed_reference is not None

    def is_installed_by_reference(self) -> bool:
        return self.installed_by_reference

    def is_updatable(self) -> bool:
        return self.updatable_version is not None

    @property
    def installed_value(self) -> str | None:
        """Installed version, or the commit reference for branch pins."""
        if self.is_installed_by_reference():
            return self.installed_reference
        return self.installed_version

    def is_later_version(self, candidate: str) -> bool:
        """Check whether candidate is newer than the installed version."""
        if not self.is_installed():
            raise IncompletePackageError(f"{self.manager}: {self.name} is not installed")

        if self.is_installed_by_reference():
            return is_newer_reference(self.installed_reference, candidate)

        return is_newer(self.installed_version, candidate)


@dataclass
class UpdateResult:
    """One updatable package in a check report."""

    manager: str
    name: str
    required_version: str | None
    installed_version: str | None
    updatable_version: str
    by_reference: bool = False

    @classmethod
    def from_package(cls, package: Package) -> "UpdateResult":
        return cls(
            manager=package.manager,
            name=package.name,
            required_version=package.required_version,
            installed_version=package.installed_value,
            updatable_version=package.updatable_version,
            by_reference=package.is_installed_by_reference(),
        )


@dataclass
class ManagerFailure:
    """A manager that could not be checked."""

    manager: str
    kind: str
    message: str


@dataclass
class CheckReport:
    """Result of checking all managers of a project."""

    root: str
    results: list[UpdateResult] = field(default_factory=list)
    failures: list[ManagerFailure] = field(default_factory=list)

    @property
    def has_updates(self) -> bool:
        return bool(self.results)

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    def to_dict(self) -> dict:
        return {
            "root": self.root,
            "updates": [
                {
                    "manager": result.manager,
                    "name": result.name,
                    "required_version": result.required_version,
                    "installed_version": result.installed_version,
                    "updatable_version": result.updatable_version,
                    "by_reference": result.by_reference,
                }
                for result in self.results
            ],
            "failures": [
                {"manager": failure.manager, "kind": failure.kind, "message": failure.message}
                for failure in self.failures
            ],
        }
