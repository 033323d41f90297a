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

import asyncio
import logging
from collections.abc import Generator
from typing import Any, Generic, Optional, TypeVar

from formresource import const
from formresource.const import CellState

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class ResultCell(Generic[T]):
    """
    An asynchronous result cell that settles at most once, either to a value or to an error.

    Any number of coroutines can wait on the cell, they all observe the same outcome. Attempts to settle a cell that
    already settled are ignored, the first outcome is final. Contrary to an asyncio future, a rejected cell that is never
    awaited does not produce a warning and a cell can be created outside of a running event loop.

    :param name: A name for the cell, used in log messages.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._state: CellState = CellState.pending
        self._value: Optional[T] = None
        self._error: Optional[BaseException] = None
        self._settled = asyncio.Event()

    def __repr__(self) -> str:
        return f"ResultCell({self.name}, {self._state.value})"

    @property
    def state(self) -> CellState:
        return self._state

    def done(self) -> bool:
        return self._state in const.SETTLED_CELL_STATES

    def fulfill(self, value: T) -> bool:
        """
        Settle the cell with the given value.

        :return: True iff this call settled the cell.
        """
        if self.done():
            LOGGER.debug("Ignoring value for %s, the cell is already %s", self.name, self._state.value)
            return False
        self._value = value
        self._state = CellState.fulfilled
        self._settled.set()
        return True

    def reject(self, error: BaseException) -> bool:
        """
        Settle the cell with the given error.

        :return: True iff this call settled the cell.
        """
        if self.done():
            LOGGER.debug("Ignoring error for %s, the cell is already %s", self.name, self._state.value)
            return False
        self._error = error
        self._state = CellState.rejected
        self._settled.set()
        return True

    def peek(self) -> Optional[T]:
        """
        Return the value without waiting. None when the cell is pending or rejected.
        """
        return self._value

    def exception(self) -> Optional[BaseException]:
        """
        Return the error without waiting. None when the cell is pending or fulfilled.
        """
        return self._error

    async def wait(self) -> T:
        """
        Wait until the cell settles. Returns the value or raises the error the cell was rejected with.
        """
        await self._settled.wait()
        if self._state is CellState.rejected:
            assert self._error is not None
            raise self._error
        return self._value

    def __await__(self) -> Generator[Any, None, T]:
        return self.wait().__await__()
