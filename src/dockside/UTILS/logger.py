# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Structured logging setup using structlog.
"""
import logging
import sys

import structlog


def _stderr_logger(*args):
    # Resolved per logger so a swapped sys.stderr is picked up
    return structlog.PrintLogger(file=sys.stderr)


def setup_logging(level: str = "INFO") -> None:
    """
    Configure structlog with console output on stderr.

    Args:
        level: Minimum level name, e.g. 'DEBUG' or 'INFO'.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str):
    """Get a logger bound to a module name."""
    return structlog.get_logger(name)


# Library default: stderr at INFO. The CLI reconfigures with the chosen level.
setup_logging()
