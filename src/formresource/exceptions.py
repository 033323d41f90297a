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

from typing import Optional

from formresource.types import JsonType


class FormResourceException(Exception):
    """
    Base class for all errors raised by formresource
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(FormResourceException):
    """
    The application configuration is missing or incomplete. This error is logged, not raised.
    """


class RemoteCallError(FormResourceException):
    """
    A call to the remote form service failed.

    :param url: The url that was called.
    :param status_code: The HTTP status code, None when no response was received.
    :param details: The decoded response body, if any.
    """

    def __init__(self, url: str, message: str, status_code: Optional[int] = None, details: Optional[JsonType] = None) -> None:
        msg = f"Call to {url} failed"
        if status_code is not None:
            msg += f" with status {status_code}"
        super().__init__(f"{msg}: {message}")
        self.url = url
        self.status_code = status_code
        self.details = details


class ResourceError(FormResourceException):
    """
    Base class for failures of an operation on a resource node. The error that caused it is available as `__cause__`.

    :param resource: The name of the resource the operation was performed on.
    """

    action: str = "process"

    def __init__(self, resource: str, reason: object) -> None:
        super().__init__(f"Failed to {self.action} resource {resource}: {reason}")
        self.resource = resource


class FormLoadError(ResourceError):
    action = "load the form of"


class SubmissionLoadError(ResourceError):
    action = "load the submission of"


class SaveError(ResourceError):
    action = "save the submission of"


class DeleteError(ResourceError):
    action = "delete the submission of"
