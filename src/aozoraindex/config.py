"""Application configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_SITE_ROOT = "https://www.aozora.gr.jp"
DEFAULT_DB_PATH = Path("data/aozora.db")
DEFAULT_USER_AGENT = "aozoraindex/0.1 (+https://www.aozora.gr.jp)"


@dataclass(slots=True)
class AppConfig:
    db_path: Path | None = None
    site_root: str = DEFAULT_SITE_ROOT
    timeout: float = 30.0
    retries: int = 2
    workers: int = 1
    source_encoding: str = "cp932"
    link_policy: str = "last"
    max_store_errors: int = 3
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if self.db_path is None:
            self.db_path = DEFAULT_DB_PATH
        if self.timeout is None or self.timeout <= 0:
            raise ValueError("timeout must be a positive number of seconds")
        if self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.link_policy not in ("first", "last"):
            raise ValueError(f"Unknown link policy: {self.link_policy!r}")

    def resolve_db_path(self, base_dir: Path | None = None) -> Path:
        if self.db_path is None:
            self.db_path = DEFAULT_DB_PATH
        if Path(self.db_path).is_absolute() or base_dir is None:
            return Path(self.db_path)
        return base_dir / self.db_path
