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

import json
from io import BytesIO
from typing import Optional

import pytest
from tornado.httpclient import AsyncHTTPClient, HTTPClientError, HTTPRequest, HTTPResponse

from formresource import config
from formresource.client import RESTFormClient, build_form_url, build_submission_url, rest_client_factory
from formresource.config import AppConfig
from formresource.exceptions import RemoteCallError, SaveError
from formresource.node import ResourceConfig, ResourceNode

FORM_URL = "https://example.form.io/city"
SUBMISSION_URL = "https://example.form.io/city/submission/antwerp"


class FakeServer:
    """
    Replaces the fetch of the tornado http client. Answers every request with the next canned response.
    """

    def __init__(self) -> None:
        self.requests: list[HTTPRequest] = []
        self.responses: list[tuple[int, Optional[object]]] = []

    def answer(self, code: int, body: Optional[object] = None) -> None:
        self.responses.append((code, body))

    async def fetch(self, client: AsyncHTTPClient, request: HTTPRequest, raise_error: bool = True) -> HTTPResponse:
        self.requests.append(request)
        code, body = self.responses.pop(0) if self.responses else (200, {})
        raw = body if isinstance(body, bytes) else json.dumps(body).encode()
        response = HTTPResponse(request, code, buffer=BytesIO(raw))
        if code >= 400:
            raise HTTPClientError(code, response=response)
        return response

    def body(self, index: int = -1) -> object:
        return json.loads(self.requests[index].body)


@pytest.fixture
def server(monkeypatch) -> FakeServer:
    fake = FakeServer()

    async def fetch(client, request, raise_error=True):
        return await fake.fetch(client, request, raise_error)

    monkeypatch.setattr(AsyncHTTPClient, "fetch", fetch)
    return fake


def test_urls() -> None:
    assert build_form_url("https://example.form.io", "city") == FORM_URL
    assert build_submission_url(FORM_URL, "antwerp") == SUBMISSION_URL

    form_client = RESTFormClient(FORM_URL)
    assert form_client.submission_id is None
    assert form_client.form_url == FORM_URL

    submission_client = RESTFormClient(SUBMISSION_URL)
    assert submission_client.submission_id == "antwerp"
    assert submission_client.form_url == FORM_URL


def test_relative_urls_use_the_api_url() -> None:
    app_config = AppConfig(api_url="https://api.form.io/", app_url="")
    client = RESTFormClient("/city/submission/1", app_config)
    assert client.url == "https://api.form.io/city/submission/1"
    assert client.submission_id == "1"

    # absolute urls are left alone
    assert RESTFormClient(FORM_URL, app_config).url == FORM_URL
    # without an api url there is nothing to resolve against
    assert RESTFormClient("/city", AppConfig(app_url="")).url == "/city"


def test_client_factory(app_config) -> None:
    factory = rest_client_factory(app_config)
    client = factory(SUBMISSION_URL)
    assert isinstance(client, RESTFormClient)
    assert client.app_config is app_config
    assert client.url == SUBMISSION_URL


async def test_load_form(server: FakeServer) -> None:
    server.answer(200, {"components": [{"key": "name"}]})
    form = await RESTFormClient(SUBMISSION_URL).load_form()

    assert form == {"components": [{"key": "name"}]}
    request = server.requests[0]
    assert request.method == "GET"
    assert request.url == FORM_URL
    assert request.headers["Accept"] == "application/json"
    assert "x-jwt-token" not in request.headers


async def test_load_submission(server: FakeServer) -> None:
    server.answer(200, {"_id": "antwerp", "data": {"name": "Antwerp"}})
    submission = await RESTFormClient(SUBMISSION_URL).load_submission()

    assert submission["data"]["name"] == "Antwerp"
    assert server.requests[0].method == "GET"
    assert server.requests[0].url == SUBMISSION_URL


async def test_load_submission_requires_submission_url(server: FakeServer) -> None:
    with pytest.raises(RemoteCallError, match="does not point to a submission"):
        await RESTFormClient(FORM_URL).load_submission()
    with pytest.raises(RemoteCallError, match="does not point to a submission"):
        await RESTFormClient(FORM_URL).delete_submission()
    assert server.requests == []


async def test_save_new_submission(server: FakeServer) -> None:
    server.answer(201, {"_id": "new", "data": {"name": "Ghent"}})
    saved = await RESTFormClient(FORM_URL).save_submission({"data": {"name": "Ghent"}})

    assert saved["_id"] == "new"
    request = server.requests[0]
    assert request.method == "POST"
    assert request.url == FORM_URL + "/submission"
    assert request.headers["Content-Type"] == "application/json"
    assert server.body() == {"data": {"name": "Ghent"}}


async def test_save_existing_submission(server: FakeServer) -> None:
    submission = {"_id": "antwerp", "data": {"name": "Antwerpen"}}
    server.answer(200, submission)
    await RESTFormClient(SUBMISSION_URL).save_submission(submission)

    assert server.requests[0].method == "PUT"
    assert server.requests[0].url == SUBMISSION_URL
    assert server.body() == submission


async def test_save_without_id_on_submission_handle(server: FakeServer) -> None:
    await RESTFormClient(SUBMISSION_URL).save_submission({"data": {}})
    assert server.requests[0].method == "POST"
    assert server.requests[0].url == FORM_URL + "/submission"


async def test_save_with_empty_response(server: FakeServer) -> None:
    server.answer(201, b"")
    with pytest.raises(RemoteCallError, match="did not return the saved submission"):
        await RESTFormClient(FORM_URL).save_submission({"data": {}})


async def test_node_save_with_empty_response(server: FakeServer, app_config, registry, errors) -> None:
    """
    An empty answer to a save is a failed save of the node, reported on the error channel.
    """
    server.answer(201, b"")
    server.answer(200, b"")
    city = ResourceNode(app_config, ResourceConfig(name="city", form="city"), registry=registry)

    with pytest.raises(SaveError) as exc_info:
        await city.save({"data": {"name": "Ghent"}})
    await city.join()

    assert errors == [exc_info.value]
    assert isinstance(exc_info.value.__cause__, RemoteCallError)
    assert city.submission == {"data": {}}


async def test_delete_submission(server: FakeServer) -> None:
    server.answer(200, b"")
    assert await RESTFormClient(SUBMISSION_URL).delete_submission() is None
    assert server.requests[0].method == "DELETE"
    assert server.requests[0].url == SUBMISSION_URL


async def test_token_and_timeouts(server: FakeServer) -> None:
    config.client_token.set("secret")
    config.client_request_timeout.set("5")
    config.client_connect_timeout.set("2")

    await RESTFormClient(FORM_URL).load_form()

    request = server.requests[0]
    assert request.headers["x-jwt-token"] == "secret"
    assert request.request_timeout == 5
    assert request.connect_timeout == 2


async def test_token_from_environment(server: FakeServer, monkeypatch) -> None:
    monkeypatch.setenv("FORMRESOURCE_CLIENT_TOKEN", "from-env")
    await RESTFormClient(FORM_URL).load_form()
    assert server.requests[0].headers["x-jwt-token"] == "from-env"


async def test_http_error(server: FakeServer) -> None:
    server.answer(404, {"message": "Submission not found"})

    with pytest.raises(RemoteCallError) as exc_info:
        await RESTFormClient(SUBMISSION_URL).load_submission()

    error = exc_info.value
    assert error.status_code == 404
    assert error.url == SUBMISSION_URL
    assert error.details == {"message": "Submission not found"}
    assert "Submission not found" in str(error)
    assert isinstance(error.__cause__, HTTPClientError)


async def test_http_error_without_json_body(server: FakeServer) -> None:
    server.answer(500, b"<html>oops</html>")

    with pytest.raises(RemoteCallError) as exc_info:
        await RESTFormClient(FORM_URL).load_form()

    assert exc_info.value.status_code == 500
    assert exc_info.value.details is None


async def test_invalid_json(server: FakeServer) -> None:
    server.answer(200, b"not json")
    with pytest.raises(RemoteCallError, match="invalid json"):
        await RESTFormClient(FORM_URL).load_form()


async def test_connection_error(monkeypatch) -> None:
    async def fetch(client, request, raise_error=True):
        raise ConnectionRefusedError("refused")

    monkeypatch.setattr(AsyncHTTPClient, "fetch", fetch)
    with pytest.raises(RemoteCallError, match="refused") as exc_info:
        await RESTFormClient(FORM_URL).load_form()
    assert exc_info.value.status_code is None
