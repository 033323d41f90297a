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
from asyncio import CancelledError, Task, ensure_future
from collections.abc import Awaitable
from typing import Generic, TypeVar

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class TaskHandler(Generic[T]):
    """
    This class provides a method to add a background task based on a coroutine. When the coroutine ends, any exceptions
    are reported. A reference to every running task is kept, so tasks are not garbage collected while they run.
    """

    def __init__(self) -> None:
        super().__init__()
        self._background_tasks: set[Task[T]] = set()

    def add_background_task(self, future: Awaitable[T]) -> Task[T]:
        """Add a background task to the event loop.

        :param future: The future or coroutine to run as background task.
        """
        task: Task[T] = ensure_future(future)

        def handle_result(task: Task[T]) -> None:
            try:
                task.result()
            except CancelledError:
                LOGGER.warning("Task %s was cancelled.", task)
            except Exception as e:
                LOGGER.exception("An exception occurred while handling a future: %s", str(e))
            finally:
                self._background_tasks.discard(task)

        task.add_done_callback(handle_result)
        self._background_tasks.add(task)
        return task

    def pending(self) -> int:
        return len(self._background_tasks)

    async def join(self) -> None:
        """
        Wait until all background tasks, including the ones they add while running, are done. Failures are reported by the
        task callback and not raised here.
        """
        while self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
            # give the done callbacks the chance to run
            await asyncio.sleep(0)
