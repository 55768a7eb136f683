from __future__ import annotations

import logging

import watchtower

from ..config import AppConfig

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(config: AppConfig) -> None:
    """Set the root log level and ship logs to CloudWatch when a group is configured."""
    root = logging.getLogger()
    level = logging.getLevelName(config.log_level)
    if not isinstance(level, int):
        level = logging.INFO
    root.setLevel(level)

    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    if config.cloudwatch_log_group and not any(
        isinstance(h, watchtower.CloudWatchLogHandler) for h in root.handlers
    ):
        cw_handler = watchtower.CloudWatchLogHandler(log_group_name=config.cloudwatch_log_group)
        cw_handler.setLevel(level)
        root.addHandler(cw_handler)
        logging.getLogger(__name__).info(
            f"CloudWatch logging enabled for group {config.cloudwatch_log_group}"
        )
