# astrokernel/core/config.py
# -----------------------------------------------------------------------------
# Kernel Configuration
#
# Environment overrides:
#   ASTROKERNEL_LEAP_JSON           JSON leap table (default: pyERFA table)
#   ASTROKERNEL_EOP_JSON            JSON EOP table (UT1 needs one)
#   ASTROKERNEL_EOP_JUMP_THRESHOLD  UT1-UTC jump treated as a leap [s]
#   ASTROKERNEL_EAGER_LOAD          1 = load every scale up front
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from astrokernel.core.errors import ConfigurationError

__all__ = [
    "KernelConfig",
    "DEFAULT_EOP_JUMP_THRESHOLD",
]

log = logging.getLogger(__name__)

# UT1-UTC never exceeds 0.9 s in magnitude, so a larger jump between two
# consecutive samples can only be a leap second.
DEFAULT_EOP_JUMP_THRESHOLD = 0.9

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class KernelConfig:
    """Where the kernel gets its leap-second and EOP tables from."""

    leap_seconds_path: Optional[str] = None
    eop_path: Optional[str] = None
    eop_jump_threshold: float = DEFAULT_EOP_JUMP_THRESHOLD
    eager_load: bool = True

    def __post_init__(self) -> None:
        if not (0.0 < self.eop_jump_threshold < 86400.0):
            raise ConfigurationError(
                f"eop_jump_threshold out of range: {self.eop_jump_threshold}",
                field="eop_jump_threshold",
                value=self.eop_jump_threshold,
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "KernelConfig":
        env = os.environ if environ is None else environ

        leap_path = env.get("ASTROKERNEL_LEAP_JSON", "").strip() or None
        eop_path = env.get("ASTROKERNEL_EOP_JSON", "").strip() or None

        raw_threshold = env.get("ASTROKERNEL_EOP_JUMP_THRESHOLD", "").strip()
        if raw_threshold:
            try:
                threshold = float(raw_threshold)
            except ValueError as e:
                raise ConfigurationError(
                    f"ASTROKERNEL_EOP_JUMP_THRESHOLD is not a number: {raw_threshold!r}",
                    field="ASTROKERNEL_EOP_JUMP_THRESHOLD",
                    value=raw_threshold,
                ) from e
        else:
            threshold = DEFAULT_EOP_JUMP_THRESHOLD

        raw_eager = env.get("ASTROKERNEL_EAGER_LOAD", "1").strip().lower()
        if raw_eager in _TRUE_VALUES:
            eager = True
        elif raw_eager in _FALSE_VALUES:
            eager = False
        else:
            raise ConfigurationError(
                f"ASTROKERNEL_EAGER_LOAD must be a boolean flag, got {raw_eager!r}",
                field="ASTROKERNEL_EAGER_LOAD",
                value=raw_eager,
            )

        config = cls(
            leap_seconds_path=leap_path,
            eop_path=eop_path,
            eop_jump_threshold=threshold,
            eager_load=eager,
        )
        log.debug(f"Kernel configuration from environment: {config}")
        return config
