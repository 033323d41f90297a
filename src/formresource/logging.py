"""
    Copyright 2026 Inmanta

    Licensed under the Apache License, Version 2.0 (the "License");
    you may not use this file except in compliance with the License.
    You may obtain a copy of the License at

        http://www.apache.org/licenses/LICENSE-2.0

    Unless required by applicable law or agreed to in writing, software
    distributed under the License is distributed on an "AS IS" BASIS,
    WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
    See the License for the specific language governing permissions and
    limitations under the License.

    Contact: code@inmanta.com
"""

import logging
import os
import sys
from typing import Optional, TextIO

import colorlog
from colorlog.formatter import LogColors

ENVIRON_FORCE_TTY = "FORMRESOURCE_FORCE_TTY"

LOG_FORMAT = "%(log_color)s%(name)-25s%(levelname)-8s%(reset)s%(blue)s%(message)s"

"""
This dictionary maps the verbosity of the command line to the corresponding Python log levels
"""
log_levels = {
    0: logging.ERROR,
    1: logging.WARNING,
    2: logging.INFO,
    3: logging.DEBUG,
}


def _is_on_tty() -> bool:
    return (hasattr(sys.stdout, "isatty") and sys.stdout.isatty()) or ENVIRON_FORCE_TTY in os.environ


def verbosity_to_log_level(verbosity: int) -> int:
    """Convert the number of -v flags to a python log level"""
    return log_levels[min(max(verbosity, 0), max(log_levels))]


def get_default_log_colors() -> LogColors:
    return {
        "DEBUG": "cyan",
        "INFO": "green",
        "WARNING": "yellow",
        "ERROR": "red",
        "CRITICAL": "red",
    }


class MultiLineFormatter(colorlog.ColoredFormatter):
    """
    Formatter for multi-line log records.

    This class extends the `colorlog.ColoredFormatter` class to indent every line after the first one of a log record
    to the length of the header, so multi-line records (e.g. json dumps of a submission) stay readable.
    """

    def __init__(
        self,
        fmt: Optional[str] = None,
        *,
        log_colors: Optional[LogColors] = None,
        reset: bool = True,
        no_color: bool = False,
    ):
        """
        Initialize a new `MultiLineFormatter` instance.

        :param fmt: Optional string specifying the log record format.
        :param log_colors: Optional `LogColors` object mapping log level names to color codes.
        :param reset: Boolean indicating whether to reset terminal colors at the end of each log record.
        :param no_color: Boolean indicating whether to disable colors in the output.
        """
        super().__init__(fmt, log_colors=log_colors, reset=reset, no_color=no_color)
        self.fmt = fmt

    def get_header_length(self, record: logging.LogRecord) -> int:
        """
        Get the header length of a given log record.

        :param record: The `logging.LogRecord` object for which to calculate the header length.
        :return: The length of the header in the log record, without color codes.
        """
        # to get the length of the header we want to get the header without the color codes
        formatter = colorlog.ColoredFormatter(
            fmt=self.fmt,
            log_colors=self.log_colors,
            reset=False,
            no_color=True,
        )
        header = formatter.format(
            logging.LogRecord(
                record.name,
                record.levelno,
                record.pathname,
                record.lineno,
                "",
                (),
                None,
            )
        )
        return len(header)

    def format(self, record: logging.LogRecord) -> str:
        """
        Format a log record with added indentation.

        :param record: The `logging.LogRecord` object to format.
        :return: The formatted log record as a string.
        """
        indent: str = " " * self.get_header_length(record)
        head, *tail = super().format(record).splitlines(True)
        return head + "".join(indent + line for line in tail)


def setup_logging(verbosity: int = 1, stream: TextIO = sys.stdout) -> logging.Handler:
    """
    Attach a colored, multi-line aware handler to the root logger.

    :param verbosity: The number of -v flags given on the command line.
    :param stream: The stream to send log messages to.
    :return: The installed handler.
    """
    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        MultiLineFormatter(LOG_FORMAT, log_colors=get_default_log_colors(), reset=True, no_color=not _is_on_tty())
    )
    level = verbosity_to_log_level(verbosity)
    handler.setLevel(level)
    logging.root.addHandler(handler)
    logging.root.setLevel(level)
    return handler
