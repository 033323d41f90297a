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

from collections.abc import Iterator, Sequence
from typing import Optional

from formresource.types import JsonType


def _children(component: JsonType) -> Optional[list[Sequence[JsonType]]]:
    """
    Return the component lists nested in a layout component, None for a leaf component.
    """
    columns = component.get("columns")
    if isinstance(columns, list):
        return [column.get("components", []) for column in columns]
    rows = component.get("rows")
    if isinstance(rows, list):
        return [cell.get("components", []) for row in rows for cell in row]
    components = component.get("components")
    if isinstance(components, list):
        return [components]
    return None


def each_component(components: Sequence[JsonType], include_all: bool = False) -> Iterator[JsonType]:
    """
    Iterate depth first over the components of a form definition.

    Layout components (columns, tables, panels, ...) are descended into. They are only yielded themselves when
    `include_all` is set or when they hold data of their own (``tree`` components such as data grids).
    """
    for component in components:
        nested = _children(component)
        if nested is None or include_all or component.get("tree", False):
            yield component
        if nested is not None:
            for child_components in nested:
                yield from each_component(child_components, include_all)


def get_component(components: Sequence[JsonType], key: str) -> Optional[JsonType]:
    """
    Return the first component with the given key, None if the form has no such component.
    """
    for component in each_component(components, include_all=True):
        if component.get("key") == key:
            return component
    return None
