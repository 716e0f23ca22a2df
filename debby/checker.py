"""Run all managers of a project and collect their updates."""

import structlog

from .errors import DebbyError
from .managers.base import Manager
from .models import CheckReport, ManagerFailure, UpdateResult


class Checker:
    """Checks a project's managers for updatable packages."""

    def __init__(self, root: str, managers: list[Manager], fail_fast: bool = True, log=None):
        """Initialize checker.

        Args:
            root: Project root, used for reporting
            managers: Fresh managers to run, in order
            fail_fast: Abort on the first failing manager instead of
                reporting failures next to the updates found
            log: structlog logger, defaults to the "debby.check" logger
        """
        self.root = str(root)
        self.managers = managers
        self.fail_fast = fail_fast
        self.log = log or structlog.get_logger("debby.check")

    async def check(self) -> CheckReport:
        """Run every manager and merge the updatable packages.

        Raises:
            DebbyError: the first failure, when fail_fast is set
        """
        report = CheckReport(root=self.root)
        seen: set[tuple[str, str]] = set()

        self.log.info("check.start", root=self.root, managers=[m.get_name() for m in self.managers])

        for manager in self.managers:
            try:
                packages = await manager.find_updatable_packages()
            except DebbyError as e:
                if self.fail_fast:
                    raise
                self.log.error("check.manager_failed", manager=manager.get_name(), error=str(e))
                report.failures.append(ManagerFailure(
                    manager=manager.get_name(),
                    kind=type(e).__name__,
                    message=str(e),
                ))
                continue

            for package in packages:
                key = (manager.get_name(), package.name)
                if key in seen:
                    continue
                seen.add(key)
                report.results.append(UpdateResult.from_package(package))

        self.log.info("check.done", updates=len(report.results), failures=len(report.failures))
        return report
