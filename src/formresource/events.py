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

import dataclasses
import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from formresource.const import Property
from formresource.types import FormDefinition, JsonType, Submission
from formresource.util import TaskHandler

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

Subscriber = Callable[[T], object]


class EventChannel(Generic[T]):
    """
    A publish-subscribe channel.

    Events are delivered to the subscribers that are attached at the moment of emission, in subscription order. There is
    no buffering and no replay: a subscriber that attaches after an event was emitted never sees that event. A subscriber
    that returns an awaitable has it scheduled as a background task. A failing subscriber is logged and does not prevent
    delivery to the others.

    :param name: The name of the channel, used in log messages.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._subscribers: list[Subscriber[T]] = []
        self._tasks: TaskHandler[object] = TaskHandler()

    def subscribe(self, subscriber: Subscriber[T]) -> Callable[[], None]:
        """
        Attach a subscriber.

        :return: A function that detaches the subscriber again.
        """
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def emit(self, event: T) -> None:
        # iterate over a copy, subscribers may unsubscribe while handling the event
        for subscriber in list(self._subscribers):
            try:
                result = subscriber(event)
            except Exception:
                LOGGER.exception("Subscriber %s of channel %s failed", subscriber, self.name)
                continue
            if inspect.isawaitable(result):
                self._tasks.add_background_task(result)

    async def join(self) -> None:
        """Wait for the asynchronous subscribers that are still running"""
        await self._tasks.join()


@dataclass(frozen=True)
class ChangeEvent:
    """
    A notification that the form or the submission of a resource changed. The value is the (mutated) object itself, not a
    copy.
    """

    property: Property
    value: Union[FormDefinition, Submission]

    @classmethod
    def form(cls, form: FormDefinition) -> "ChangeEvent":
        return cls(Property.form, form)

    @classmethod
    def submission(cls, submission: Submission) -> "ChangeEvent":
        return cls(Property.submission, submission)


@dataclass(frozen=True)
class ParentResolution:
    """
    A parent resource and the submission it resolved to.
    """

    name: str
    resource: Submission = dataclasses.field(hash=False)


class ChangeNotifier:
    """
    The event channels of a single resource node.

    :ivar on_parents: Emitted once, when all parents that were found in the registry resolved.
    :ivar on_index_select: Emitted when a consumer selects a submission in an index view of the resource.
    :ivar refresh: Emitted every time the form or the submission of the resource changed.
    """

    def __init__(self, name: str) -> None:
        self.on_parents: EventChannel[list[ParentResolution]] = EventChannel(f"{name}.on_parents")
        self.on_index_select: EventChannel[JsonType] = EventChannel(f"{name}.on_index_select")
        self.refresh: EventChannel[ChangeEvent] = EventChannel(f"{name}.refresh")

    async def join(self) -> None:
        for channel in (self.on_parents, self.on_index_select, self.refresh):
            await channel.join()
