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

# This file defines named type definitions for the formresource code base

from collections.abc import Coroutine
from typing import Any

JsonType = dict[str, Any]

FormDefinition = JsonType
"""
A form definition as returned by the remote form service: an opaque tree of components.
"""

Submission = JsonType
"""
A submitted data record: ``{"data": {...}}`` plus the server managed fields such as ``_id``.
"""

type AsyncioCoroutine[R] = Coroutine[object, None, R]
"""
Coroutine for use with asyncio, where we don't care about yield and send types.
"""
