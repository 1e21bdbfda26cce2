"""Runtime settings read from ``ORDERDESK_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"

ENV_PREFIX = "ORDERDESK_"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    data_dir: Path = _DEFAULT_DATA_DIR
    return_window_days: int = 30
    low_stock_threshold: int = 10
    debug: bool = False
    log_level: str = "WARNING"

    @property
    def store_path(self) -> Path:
        return self.data_dir / "store.json"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        """Build settings from the environment, falling back to defaults."""
        env = os.environ if environ is None else environ
        values = {
            key[len(ENV_PREFIX):].lower(): value
            for key, value in env.items()
            if key.startswith(ENV_PREFIX) and value != ""
        }
        defaults = cls()
        return cls(
            data_dir=Path(values["data_dir"]) if "data_dir" in values else defaults.data_dir,
            return_window_days=_as_int(values, "return_window_days", defaults.return_window_days),
            low_stock_threshold=_as_int(values, "low_stock_threshold", defaults.low_stock_threshold),
            debug=values.get("debug", str(defaults.debug)).strip().lower() in _TRUTHY,
            log_level=values.get("log_level", defaults.log_level).strip().upper(),
        )


def _as_int(values: dict[str, str], name: str, default: int) -> int:
    raw = values.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{ENV_PREFIX}{name.upper()} must be an integer, got {raw!r}") from exc
