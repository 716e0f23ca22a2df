"""Options for a dependency check."""

from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigNotFoundError


@dataclass
class Options:
    """Configuration of one check run."""

    root_dir: str
    managers: list[str] = field(default_factory=list)  # empty: detect from root_dir
    executables: dict[str, str] = field(default_factory=dict)
    timeout: float = 30.0
    max_concurrency: int = 6
    notify_address: str | None = None
    webhook_url: str | None = None
    keep_going: bool = False

    def __post_init__(self):
        if not self.root_dir:
            raise ConfigNotFoundError("can not check for updates without a root directory")
        if not Path(self.root_dir).is_dir():
            raise ConfigNotFoundError(f"root directory {self.root_dir} does not exist")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
