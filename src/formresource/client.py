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

import functools
import json
import logging
import re
from abc import ABC, abstractmethod
from asyncio import CancelledError
from collections.abc import Callable
from typing import Optional

from tornado.httpclient import AsyncHTTPClient, HTTPError, HTTPRequest

from formresource import config, const
from formresource.config import AppConfig
from formresource.exceptions import RemoteCallError
from formresource.types import FormDefinition, JsonType, Submission

LOGGER: logging.Logger = logging.getLogger(__name__)

SUBMISSION_URL_RE = re.compile(r"/%s/(?P<submission_id>[^/]+)$" % const.SUBMISSION_PATH)


def build_form_url(app_url: str, form: str) -> str:
    return app_url + "/" + form


def build_submission_url(form_url: str, submission_id: str) -> str:
    return form_url + "/" + const.SUBMISSION_PATH + "/" + submission_id


class RemoteFormClient(ABC):
    """
    A handle on a single form or a single submission of the remote form service.

    :param url: The url of the form, or of one submission of the form.
    """

    def __init__(self, url: str) -> None:
        self.url = url

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.url})"

    @abstractmethod
    async def load_form(self) -> FormDefinition:
        """Fetch the form definition"""

    @abstractmethod
    async def load_submission(self) -> Submission:
        """Fetch the submission this handle points to"""

    @abstractmethod
    async def save_submission(self, submission: Submission) -> Submission:
        """
        Persist a submission and return it as stored by the server. A submission without an identifier is created,
        one with an identifier is updated.
        """

    @abstractmethod
    async def delete_submission(self) -> None:
        """Delete the submission this handle points to"""


ClientFactory = Callable[[str], RemoteFormClient]
"""
Creates a client for a form or submission url.
"""


class RESTFormClient(RemoteFormClient):
    """
    A json over http client for the form service.

    :param url: The url of a form or of one of its submissions. Relative urls are resolved against the api url.
    :param app_config: The application config, used to resolve relative urls.
    """

    def __init__(self, url: str, app_config: Optional[AppConfig] = None) -> None:
        if app_config is not None and app_config.api_url and "://" not in url:
            url = app_config.api_url.rstrip("/") + "/" + url.lstrip("/")
        super().__init__(url)
        self.app_config = app_config
        match = SUBMISSION_URL_RE.search(url)
        self.submission_id: Optional[str] = match.group("submission_id") if match else None
        self.connect_timeout: int = config.client_connect_timeout.get()
        self.request_timeout: int = config.client_request_timeout.get()

    @property
    def form_url(self) -> str:
        """The url of the form this handle belongs to"""
        return SUBMISSION_URL_RE.sub("", self.url)

    def _decode(self, body: Optional[bytes]) -> Optional[JsonType]:
        if not body:
            return None
        return json.loads(body.decode(const.UTF8_ENCODING))

    async def _call(self, method: str, url: str, body: Optional[JsonType] = None) -> Optional[JsonType]:
        headers: dict[str, str] = {"Accept": const.JSON_CONTENT}
        token = config.client_token.get()
        if token is not None:
            headers[const.TOKEN_HEADER] = token

        encoded: Optional[bytes] = None
        if body is not None:
            headers[const.CONTENT_TYPE] = const.JSON_CONTENT
            encoded = json.dumps(body).encode(const.UTF8_ENCODING)

        LOGGER.debug("Calling form service %s %s", method, url)
        try:
            request = HTTPRequest(
                url=url,
                method=method,
                headers=headers,
                body=encoded,
                connect_timeout=self.connect_timeout,
                request_timeout=self.request_timeout,
                ca_certs=config.client_ssl_ca_cert_file.get(),
                decompress_response=True,
            )
            response = await AsyncHTTPClient().fetch(request)
        except HTTPError as e:
            details: Optional[JsonType] = None
            message = str(e)
            if e.response is not None and e.response.body:
                try:
                    decoded = self._decode(e.response.body)
                except ValueError:
                    decoded = None
                if isinstance(decoded, dict):
                    details = decoded
                    message = decoded.get("message", message)
            raise RemoteCallError(url, message, status_code=e.code, details=details) from e
        except CancelledError:
            raise
        except Exception as e:
            raise RemoteCallError(url, str(e)) from e

        try:
            return self._decode(response.body)
        except ValueError as e:
            raise RemoteCallError(url, "invalid json in response", status_code=response.code) from e

    async def load_form(self) -> FormDefinition:
        return await self._call("GET", self.form_url)

    async def load_submission(self) -> Submission:
        if self.submission_id is None:
            raise RemoteCallError(self.url, "this handle does not point to a submission")
        return await self._call("GET", self.url)

    async def save_submission(self, submission: Submission) -> Submission:
        if self.submission_id is not None and submission.get(const.SUBMISSION_ID_FIELD):
            method, url = "PUT", self.url
        else:
            method, url = "POST", self.form_url + "/" + const.SUBMISSION_PATH
        saved = await self._call(method, url, submission)
        if saved is None:
            raise RemoteCallError(url, "the server did not return the saved submission")
        return saved

    async def delete_submission(self) -> None:
        if self.submission_id is None:
            raise RemoteCallError(self.url, "this handle does not point to a submission")
        await self._call("DELETE", self.url)


def rest_client_factory(app_config: Optional[AppConfig] = None) -> ClientFactory:
    """
    Return a factory that creates REST clients for the given application.
    """
    return functools.partial(RESTFormClient, app_config=app_config)
