"""
Settings for the console, read once at start-up.

Configuration via environment variables:
- TERMTASK_DATA_DIR: directory holding store.json (default ~/.termtask)
- TERMTASK_EXPORT_DIR: default directory for save/open (default: cwd)
- TERMTASK_NOTIFY: allow desktop notifications (1/true/yes/on)
- TERMTASK_POMO_WORK / TERMTASK_POMO_BREAK: Pomodoro minutes (25 / 5)
- TERMTASK_LOG_LEVEL: logging level (WARNING)
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

STORE_FILE = "store.json"
TRUTHY = {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logging.getLogger(__name__).warning("Ignoring %s=%r (not a number)", name, raw)
        return default


@dataclass
class Settings:
    data_dir: Path
    export_dir: Path
    notifications: bool = False
    pomo_work: float = 25
    pomo_break: float = 5
    log_level: str = "WARNING"

    @property
    def store_path(self) -> Path:
        return self.data_dir / STORE_FILE

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            data_dir=Path(os.getenv("TERMTASK_DATA_DIR", Path.home() / ".termtask")),
            export_dir=Path(os.getenv("TERMTASK_EXPORT_DIR", Path.cwd())),
            notifications=os.getenv("TERMTASK_NOTIFY", "0").strip().lower() in TRUTHY,
            pomo_work=_env_float("TERMTASK_POMO_WORK", 25),
            pomo_break=_env_float("TERMTASK_POMO_BREAK", 5),
            log_level=os.getenv("TERMTASK_LOG_LEVEL", "WARNING").upper(),
        )


def setup_logging(level: str = "WARNING"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True),
                              rich_tracebacks=True, show_path=False)],
        force=True,
    )
