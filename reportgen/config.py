from __future__ import annotations

import logging
import os
from dataclasses import dataclass


ENV_LOG_LEVEL = "REPORTGEN_LOG_LEVEL"
ENV_UNKNOWN_SN = "REPORTGEN_UNKNOWN_SN"
ENV_JOIN_DELIMITER = "REPORTGEN_JOIN_DELIMITER"

DEFAULT_UNKNOWN_SN = "UnknownSN"
DEFAULT_JOIN_DELIMITER = "/"


def resolve_log_level() -> int:
    """Resolve the reportgen log level.

    Priority:
    1) REPORTGEN_LOG_LEVEL env var, by name (DEBUG, INFO, ...) or number
    2) INFO
    """
    env = (os.getenv(ENV_LOG_LEVEL) or "").strip()
    if not env:
        return logging.INFO
    if env.isdigit():
        return int(env)
    level = logging.getLevelName(env.upper())
    return level if isinstance(level, int) else logging.INFO


@dataclass(frozen=True)
class ReportSettings:
    """
    Knobs of the assembler. Defaults are the documented behaviour; change
    them only through the environment or an explicit instance.

    unknown_identifier: archive entry stem for records without an SN.
    join_delimiter:     separator between values joined into one cell.
    """
    unknown_identifier: str = DEFAULT_UNKNOWN_SN
    join_delimiter: str = DEFAULT_JOIN_DELIMITER

    @classmethod
    def from_env(cls) -> "ReportSettings":
        return cls(
            unknown_identifier=os.getenv(ENV_UNKNOWN_SN) or DEFAULT_UNKNOWN_SN,
            join_delimiter=os.getenv(ENV_JOIN_DELIMITER) or DEFAULT_JOIN_DELIMITER,
        )
