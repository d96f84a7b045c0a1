from __future__ import annotations

import logging
from enum import Enum

from admissionsim.errors import ConfigurationError

logger = logging.getLogger(__name__)


class ProcessKind(Enum):
    UNIFORM = "uniform"              # Fixed interval (perfectly smooth)
    POISSON = "poisson"              # Exponential intervals with the configured mean
    EXP_DELAY = "exp-delay"          # Base interval plus unbounded exponential jitter
    CAPPED_JITTER = "capped-jitter"  # Base interval times U(1, cap)

    @classmethod
    def parse(cls, name: str | ProcessKind) -> ProcessKind:
        """Resolve a configuration name (or an existing kind) to a ProcessKind.

        Raises:
            ConfigurationError: If the name is not a known process kind.
        """
        if isinstance(name, ProcessKind):
            return name
        key = str(name).strip().lower()
        kind = _ALIASES.get(key)
        if kind is None:
            logger.error("Unknown process kind %r", name)
            raise ConfigurationError(f"unknown process {name!r}")
        return kind


_ALIASES: dict[str, ProcessKind] = {kind.value: kind for kind in ProcessKind}
_ALIASES.update({
    "expdelay": ProcessKind.EXP_DELAY,
    "capdelay": ProcessKind.CAPPED_JITTER,
    "constant": ProcessKind.UNIFORM,
})
