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
import warnings
from enum import Enum
from typing import Literal, Optional, TextIO, Type, Union

from formresource import const


class FormResourceWarning(Warning):
    """
    Base class for formresource warnings.
    Those warnings won't contain the python trace and are intended to be shown to end users.
    """

    def __init__(self, *args: object):
        Warning.__init__(self, *args)


class MissingCollaboratorWarning(FormResourceWarning):
    """
    A resource declares parents, but no registry was supplied to look them up in. Parent resolution is skipped.
    """


class UnregisteredParentWarning(FormResourceWarning):
    """
    A declared parent was not registered when the child was constructed. That parent is skipped.
    """


REGEX_FORMRESOURCE_MODULE: str = r"^(formresource|formresource\..*)$"


class WarningBehaviour(Enum):
    WARN: Literal["default"] = "default"
    IGNORE: Literal["ignore"] = "ignore"
    ERROR: Literal["error"] = "error"


class WarningsManager:
    """
    Manages how formresource warnings are shown.
    """

    @classmethod
    def apply(cls, behaviour: Union[WarningBehaviour, str] = WarningBehaviour.WARN) -> None:
        """
        Route warnings through the logging framework and apply the given behaviour to formresource warnings.
        Warnings of other libraries are ignored.
        """
        if isinstance(behaviour, str):
            try:
                behaviour = WarningBehaviour[behaviour.upper()]
            except KeyError:
                raise ValueError("Illegal warning behaviour %s" % behaviour)
        warnings.showwarning = cls._showwarning
        warnings.filterwarnings(WarningBehaviour.IGNORE.value)
        warnings.filterwarnings(behaviour.value, module=REGEX_FORMRESOURCE_MODULE)
        # the category filter matches warnings attributed to caller modules as well
        warnings.filterwarnings(behaviour.value, category=FormResourceWarning)

    @classmethod
    def _showwarning(
        cls,
        message: Union[str, Warning],
        category: Type[Warning],
        filename: str,
        lineno: int,
        file: Optional[TextIO] = None,
        line: Optional[str] = None,
    ) -> None:
        """
        Shows a warning.

        :param message: The warning to show.
        :param category: The type of the warning.
        :param filename: Required for compatibility but will be ignored.
        :param lineno: Required for compatibility but will be ignored.
        :param file: The file to write the warning to. Defaults to the log.
        :param line: Required for compatibility but will be ignored.
        """
        # implementation based on warnings._showwarnmsg_impl and logging._showwarning
        logger: logging.Logger
        if issubclass(category, FormResourceWarning):
            text = "%s: %s" % (category.__name__, message)
            logger = logging.getLogger(const.NAME_WARNINGS_LOGGER)
        else:
            text = warnings.formatwarning(
                # warnings.formatwarning accepts Warning instances but its type definition doesn't
                message,  # type: ignore
                category,
                filename,
                lineno,
                line,
            )
            logger = logging.getLogger("py.warnings")

        if file is not None:
            try:
                file.write(f"{text}\n")
            except OSError:
                pass
        else:
            logger.warning("%s", text)


def warn(*args, **kwargs) -> None:
    """
    A method that proxies call to `warnings.warn()`. Warnings issued through it are attributed to a formresource module,
    which keeps them subject to the filters installed by the WarningsManager.
    """
    warnings.warn(*args, **kwargs)
