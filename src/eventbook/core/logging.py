"""
Logging setup.

The packaged `logging.yaml` defines handlers and formatters; the level comes
from `app.log_level` (env: `EVENTBOOK_LOG_LEVEL`) unless the caller passes one,
as the CLI does for `--log-level`.
"""

from __future__ import annotations

import copy
import logging.config
from typing import Any

from eventbook.config.settings import Settings, get_logging_config, get_settings


def build_logging_config(settings: Settings, *, level: str | None = None) -> dict[str, Any]:
    config = copy.deepcopy(get_logging_config())
    level = (level or settings.app.log_level).upper()

    config.setdefault("root", {})["level"] = level
    # Handler levels follow the root level.
    for handler in config.get("handlers", {}).values():
        handler["level"] = level
    return config


def configure_logging(settings: Settings | None = None, *, level: str | None = None) -> None:
    logging.config.dictConfig(build_logging_config(settings or get_settings(), level=level))
