# SPDX-License-Identifier: BUSL-1.1
"""
Logging configuration that keeps secret handles out of log output
"""

import logging
import logging.config
from typing import Any, Dict

from aostack.config.values import MASK, Secret


class SecretMaskFilter(logging.Filter):
    """Replace Secret arguments with the mask before formatting."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.args, tuple):
            record.args = tuple(
                MASK if isinstance(a, Secret) else a for a in record.args
            )
        elif isinstance(record.args, dict):
            record.args = {
                k: MASK if isinstance(v, Secret) else v
                for k, v in record.args.items()
            }
        return True


def get_logging_config(verbose: bool = False) -> Dict[str, Any]:
    """Get logging configuration for the aostack CLI."""
    level = "DEBUG" if verbose else "WARNING"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "secret_mask": {
                "()": SecretMaskFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stderr",
                "filters": ["secret_mask"]
            }
        },
        "loggers": {
            "aostack": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            }
        },
        "root": {
            "level": "WARNING",
            "handlers": ["default"]
        }
    }


def configure_logging(verbose: bool = False):
    logging.config.dictConfig(get_logging_config(verbose))
