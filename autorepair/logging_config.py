"""
Custom logging configuration to clean up relayed terminal output
"""

import logging
import re
from typing import Any, Dict

OUTPUT_LOGGER = "autorepair.output"

# CSI sequences (colours, cursor movement) and OSC sequences (window titles)
_ANSI_ESCAPE = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]|\x1b\][^\x07]*\x07")


class TerminalOutputFilter(logging.Filter):
    """Filter that strips TTY control characters from relayed command output."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Clean relayed lines. Blank lines are kept so the output layout survives."""
        if not record.name.startswith(OUTPUT_LOGGER):
            return True

        message = record.getMessage()
        record.msg = _ANSI_ESCAPE.sub("", message).replace("\r", "")
        record.args = None
        return True


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration with terminal output cleanup."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "terminal_output_filter": {
                "()": TerminalOutputFilter
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
                "stream": "ext://sys.stdout"
            },
            "output": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
                "filters": ["terminal_output_filter"]  # Apply filter to relayed output
            }
        },
        "loggers": {
            "autorepair": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            },
            OUTPUT_LOGGER: {
                "handlers": ["output"],
                "level": level,
                "propagate": False
            },
            "kubernetes": {
                "handlers": ["default"],
                "level": "WARNING",
                "propagate": False
            },
            "urllib3": {
                "handlers": ["default"],
                "level": "WARNING",
                "propagate": False
            }
        },
        "root": {
            "level": level,
            "handlers": ["default"]
        }
    }
