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

from enum import Enum


class Property(str, Enum):
    """The part of a resource a change event is about"""

    form = "form"
    submission = "submission"


class LoadState(str, Enum):
    uninitialized = "uninitialized"
    loading = "loading"
    ready = "ready"
    failed = "failed"  # terminal for this track, no automatic retry


class CellState(str, Enum):
    pending = "pending"
    fulfilled = "fulfilled"
    rejected = "rejected"


# Settled cells never transition again
SETTLED_CELL_STATES = [CellState.fulfilled, CellState.rejected]

ENV_PREFIX = "FORMRESOURCE"

# Path segment between a form url and the id of one of its submissions
SUBMISSION_PATH = "submission"

# Key of the persisted identifier of a submission
SUBMISSION_ID_FIELD = "_id"

# Name of the route parameter that holds the submission id
ROUTE_PARAM_ID = "id"

TOKEN_HEADER = "x-jwt-token"
CONTENT_TYPE = "Content-Type"
JSON_CONTENT = "application/json"
UTF8_ENCODING = "utf-8"

NAME_WARNINGS_LOGGER = "formresource.warnings"
