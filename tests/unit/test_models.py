"""Tests for the package lifecycle and report models."""

import pytest

from debby.errors import IncompletePackageError
from debby.models import CheckReport, ManagerFailure, Package, UpdateResult


class TestPackage:
    """Test required -> installed -> updatable state."""

    def test_new_package_has_no_state(self):
        package = Package(manager="composer", name="vendor/a")

        assert package.required_version is None
        assert package.installed_version is None
        assert package.installed_by_reference is False
        assert package.is_updatable() is False

    def test_marks_are_idempotent(self):
        """Should end in the same state when marks are repeated."""
        package = Package(manager="composer", name="vendor/a")

        for _ in range(2):
            package.mark_required("^1.0")
            package.mark_installed("1.0.0")
            package.mark_updatable("1.2.0")

        assert package.required_version == "^1.0"
        assert package.installed_version == "1.0.0"
        assert package.updatable_version == "1.2.0"

    def test_is_later_version_semantic(self):
        package = Package(manager="composer", name="vendor/a")
        package.mark_installed("1.0.0")

        assert package.is_later_version("1.0.1") is True
        assert package.is_later_version("1.0.0") is False
        assert package.is_later_version("0.9") is False

    def test_is_later_version_by_reference(self):
        package = Package(manager="composer", name="vendor/a")
        package.mark_installed("dev-main")
        package.mark_installed_by_reference("a" * 40)

        assert package.is_installed_by_reference() is True
        assert package.installed_value == "a" * 40
        assert package.is_later_version("a" * 40) is False
        assert package.is_later_version("b" * 40) is True

    def test_compare_before_installed_raises(self):
        package = Package(manager="composer", name="vendor/a")

        with pytest.raises(IncompletePackageError):
            package.is_later_version("1.0.0")

    def test_mark_updatable_requires_requirement(self):
        package = Package(manager="composer", name="vendor/a")
        package.mark_installed("1.0.0")

        with pytest.raises(IncompletePackageError):
            package.mark_updatable("1.2.0")

    def test_mark_updatable_rejects_older_version(self):
        package = Package(manager="composer", name="vendor/a")
        package.mark_required("^1.0")
        package.mark_installed("1.2.0")

        with pytest.raises(ValueError):
            package.mark_updatable("1.1.0")
        assert package.updatable_version is None


class TestCheckReport:
    """Test report serialization."""

    def test_to_dict(self):
        package = Package(manager="composer", name="vendor/a")
        package.mark_required("^1.0")
        package.mark_installed("1.0.0")
        package.mark_updatable("1.2.0")

        report = CheckReport(
            root="/srv/app",
            results=[UpdateResult.from_package(package)],
            failures=[ManagerFailure(manager="npm", kind="LockNotFoundError", message="missing")],
        )

        data = report.to_dict()
        assert report.has_updates and report.has_failures
        assert data["root"] == "/srv/app"
        assert data["updates"] == [{
            "manager": "composer",
            "name": "vendor/a",
            "required_version": "^1.0",
            "installed_version": "1.0.0",
            "updatable_version": "1.2.0",
            "by_reference": False,
        }]
        assert data["failures"][0]["kind"] == "LockNotFoundError"

    def test_empty_report(self):
        report = CheckReport(root="/srv/app")

        assert report.has_updates is False
        assert report.to_dict() == {"root": "/srv/app", "updates": [], "failures": []}
