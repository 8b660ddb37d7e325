"""Runtime configuration read from the environment (and ``.env`` via python-dotenv)."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

_ENV_PREFIX = "RDE_COACH_"


@dataclass
class CoachConfig:
    """Settings shared by the scripts and the web app.

    Entry points call ``load_dotenv()`` before :meth:`from_env` so a local
    ``.env`` file can supply any of the ``RDE_COACH_*`` variables.
    """

    expected_distance_km: float = 83.0
    """Planned test distance; grows automatically while driving."""

    narration_silence_s: float = 5.0
    """Minimum seconds between two spoken prompts."""

    tick_hz: float = 1.0
    queue_maxsize: int = 120
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> CoachConfig:
        """Build a config from ``RDE_COACH_*`` variables; unset ones keep their defaults.

        Raises
        ------
        ValueError
            If a variable cannot be parsed or is out of range.
        """
        env = os.environ if environ is None else environ
        cfg = cls()

        cfg.expected_distance_km = _positive_float(env, "EXPECTED_DISTANCE_KM", cfg.expected_distance_km)
        cfg.narration_silence_s = _float(env, "NARRATION_SILENCE_S", cfg.narration_silence_s)
        if cfg.narration_silence_s < 0:
            raise ValueError(f"{_ENV_PREFIX}NARRATION_SILENCE_S must not be negative")
        cfg.tick_hz = _positive_float(env, "TICK_HZ", cfg.tick_hz)

        raw_size = env.get(_ENV_PREFIX + "QUEUE_MAXSIZE")
        if raw_size is not None:
            try:
                cfg.queue_maxsize = int(raw_size)
            except ValueError as exc:
                raise ValueError(f"{_ENV_PREFIX}QUEUE_MAXSIZE is not an integer: {raw_size!r}") from exc
            if cfg.queue_maxsize <= 0:
                raise ValueError(f"{_ENV_PREFIX}QUEUE_MAXSIZE must be positive")

        level = env.get(_ENV_PREFIX + "LOG_LEVEL")
        if level is not None:
            level = level.upper()
            if not isinstance(logging.getLevelName(level), int):
                raise ValueError(f"{_ENV_PREFIX}LOG_LEVEL is not a logging level: {level!r}")
            cfg.log_level = level
        return cfg


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(_ENV_PREFIX + name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{_ENV_PREFIX}{name} is not a number: {raw!r}") from exc


def _positive_float(env: Mapping[str, str], name: str, default: float) -> float:
    value = _float(env, name, default)
    if not value > 0:
        raise ValueError(f"{_ENV_PREFIX}{name} must be positive, got {value}")
    return value
