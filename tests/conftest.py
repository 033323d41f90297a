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
import copy
import itertools
import logging
import os
import warnings
from typing import Optional

import pytest

from formresource.client import RemoteFormClient, build_form_url, build_submission_url
from formresource.config import AppConfig, Config
from formresource.node import Loader, ResourceConfig, ResourceNode
from formresource.registry import ResourceRegistry
from formresource.types import FormDefinition, Submission

APP_URL = "https://example.form.io"


class FakeFormClient(RemoteFormClient):
    """
    A client that answers from the in-memory state of a FakeFormService and records the calls made on it.
    """

    def __init__(self, service: "FakeFormService", url: str) -> None:
        super().__init__(url)
        self.service = service
        self.calls: list[str] = []

    async def _answer(self, method: str) -> None:
        self.calls.append(method)
        self.service.calls.append((method, self.url))
        # a remote call always yields to the event loop
        await asyncio.sleep(0)
        gate = self.service.gates.get(self.url)
        if gate is not None:
            await gate.wait()
        failure = self.service.failures.get(self.url)
        if failure is not None:
            raise failure

    async def load_form(self) -> FormDefinition:
        await self._answer("load_form")
        return self.service.forms.setdefault(self.url, {"components": []})

    async def load_submission(self) -> Submission:
        await self._answer("load_submission")
        return copy.deepcopy(self.service.submissions[self.url])

    async def save_submission(self, submission: Submission) -> Submission:
        await self._answer("save_submission")
        saved = copy.deepcopy(submission)
        if not saved.get("_id"):
            saved["_id"] = f"generated{next(self.service.ids)}"
        saved["modified"] = True
        return saved

    async def delete_submission(self) -> None:
        await self._answer("delete_submission")
        del self.service.submissions[self.url]


class FakeFormService:
    """
    The remote form service, keyed by url.

    :ivar forms: form url -> form definition. A form that is not defined loads as an empty form.
    :ivar submissions: submission url -> submission.
    :ivar failures: url -> the error every call on that url raises.
    :ivar gates: url -> an event every call on that url waits for before answering.
    """

    def __init__(self) -> None:
        self.forms: dict[str, FormDefinition] = {}
        self.submissions: dict[str, Submission] = {}
        self.failures: dict[str, Exception] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.clients: list[FakeFormClient] = []
        self.calls: list[tuple[str, str]] = []
        self.ids = itertools.count(1)

    def client_factory(self, url: str) -> FakeFormClient:
        client = FakeFormClient(self, url)
        self.clients.append(client)
        return client

    def clients_for(self, url: str) -> list[FakeFormClient]:
        return [client for client in self.clients if client.url == url]

    def add_form(self, form: str, form_definition: FormDefinition) -> None:
        self.forms[build_form_url(APP_URL, form)] = form_definition

    def add_submission(self, form: str, submission_id: str, submission: Submission) -> None:
        self.submissions[build_submission_url(build_form_url(APP_URL, form), submission_id)] = submission

    def fail(self, url: str, error: Exception) -> None:
        self.failures[url] = error

    def hold(self, url: str) -> asyncio.Event:
        """Hold all calls on the given url until the returned event is set"""
        gate = asyncio.Event()
        self.gates[url] = gate
        return gate


@pytest.fixture(autouse=True)
def clean_config(tmp_path, monkeypatch):
    """Make sure no config file or environment variable of the host leaks into a test"""
    for name in list(os.environ):
        if name.startswith("FORMRESOURCE_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    Config.load_config(main_cfg_file=str(tmp_path / "missing.cfg"))
    yield
    Config._reset()


@pytest.fixture
def restore_logging_and_warnings():
    """Undo the global changes the command line makes to the logging and warnings setup"""
    handlers = list(logging.root.handlers)
    level = logging.root.level
    with warnings.catch_warnings():
        yield
    for handler in logging.root.handlers:
        if handler not in handlers:
            logging.root.removeHandler(handler)
    logging.root.setLevel(level)


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(api_url="https://api.form.io", app_url=APP_URL)


@pytest.fixture
def registry() -> ResourceRegistry:
    return ResourceRegistry()


@pytest.fixture
def service() -> FakeFormService:
    return FakeFormService()


@pytest.fixture
def loader() -> Loader:
    return Loader()


@pytest.fixture
def errors(registry: ResourceRegistry) -> list[Exception]:
    """All errors reported on the error channel of the registry"""
    reported: list[Exception] = []
    registry.error.subscribe(reported.append)
    return reported


@pytest.fixture
def make_node(app_config: AppConfig, registry: ResourceRegistry, service: FakeFormService, loader: Loader):
    """Construct nodes that share the registry and the fake form service"""

    def make(name: str, parents: tuple[str, ...] = (), form: Optional[str] = None) -> ResourceNode:
        return ResourceNode(
            app_config,
            ResourceConfig(name=name, form=form or name, parents=parents),
            loader=loader,
            registry=registry,
            client_factory=service.client_factory,
        )

    return make
