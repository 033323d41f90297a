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
from collections.abc import Iterator
from typing import TYPE_CHECKING, Optional

from formresource.events import EventChannel

if TYPE_CHECKING:
    from formresource.node import ResourceNode

LOGGER = logging.getLogger(__name__)


class ResourceRegistry:
    """
    Maps resource names to their live node, so nodes can find their parents.

    Registering a node under a name that is already taken replaces the previous node (last writer wins). There is no
    removal: entries live as long as the registry or until they are replaced.

    :ivar error: The shared error channel. Every node that uses this registry forwards its failures to it.
    """

    def __init__(self) -> None:
        self.resources: dict[str, "ResourceNode"] = {}
        self.error: EventChannel[Exception] = EventChannel("error")

    def register(self, name: str, node: "ResourceNode") -> None:
        previous = self.resources.get(name)
        if previous is not None and previous is not node:
            LOGGER.warning(
                "Resource %s is registered twice, the previous node is replaced",
                name,
                extra={"resource": name},
            )
        self.resources[name] = node

    def lookup(self, name: str) -> Optional["ResourceNode"]:
        return self.resources.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.resources

    def __iter__(self) -> Iterator[str]:
        return iter(self.resources)

    def __len__(self) -> int:
        return len(self.resources)
