"""Runtime configuration for ridingrails."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from ridingrails._constants import DEFAULT_STATE_KEY
from ridingrails.exceptions import RailsConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_path(value: str | None) -> Path | None:
    if value is None or not value.strip():
        return None
    return Path(value.strip()).expanduser()


@dataclasses.dataclass(frozen=True)
class RailsConfig:
    """Store configuration.

    Parameters
    ----------
    dataset_path : Path or None
        JSON city dataset to load. ``None`` uses the dataset bundled with
        the package.
    state_path : Path or None
        JSON file holding the key-value slots for visited state. ``None``
        keeps visited state in memory only.
    state_key : str
        Name of the key-value slot holding the visited mapping.
    persist : bool
        Save visited state after every toggle and restore it on startup.
    sample_fallback : bool
        When the dataset cannot be loaded, fall back to the built-in
        two-city sample instead of an empty list.
    """

    dataset_path: Path | None = None
    state_path: Path | None = None
    state_key: str = DEFAULT_STATE_KEY
    persist: bool = True
    sample_fallback: bool = False

    def __post_init__(self) -> None:
        if not self.state_key or not self.state_key.strip():
            raise RailsConfigError("state_key must be non-empty")

    @classmethod
    def from_env(cls, **overrides: Any) -> RailsConfig:
        """Create configuration from ``RAILS_*`` environment variables.

        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        RailsConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        if "dataset_path" not in overrides:
            config_kwargs["dataset_path"] = _env_path(env.get("RAILS_DATASET_PATH"))
        if "state_path" not in overrides:
            config_kwargs["state_path"] = _env_path(env.get("RAILS_STATE_PATH"))

        state_key = env.get("RAILS_STATE_KEY")
        if state_key is not None and "state_key" not in overrides:
            config_kwargs["state_key"] = state_key.strip()

        if "persist" not in overrides:
            config_kwargs["persist"] = _env_bool(env.get("RAILS_PERSIST"), True)
        if "sample_fallback" not in overrides:
            config_kwargs["sample_fallback"] = _env_bool(env.get("RAILS_SAMPLE_FALLBACK"), False)

        config_kwargs.update(overrides)
        return cls(**config_kwargs)
