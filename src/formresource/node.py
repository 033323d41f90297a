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
from asyncio import Task
from collections.abc import Mapping, Sequence
from typing import Optional

import pydantic

from formresource import const, warnings
from formresource.client import ClientFactory, RemoteFormClient, build_form_url, build_submission_url, rest_client_factory
from formresource.config import AppConfig
from formresource.const import LoadState
from formresource.events import ChangeEvent, ChangeNotifier, EventChannel, ParentResolution
from formresource.exceptions import (
    ConfigurationError,
    DeleteError,
    FormLoadError,
    ResourceError,
    SaveError,
    SubmissionLoadError,
)
from formresource.form import get_component
from formresource.future import ResultCell
from formresource.registry import ResourceRegistry
from formresource.types import AsyncioCoroutine, FormDefinition, JsonType, Submission
from formresource.util import TaskHandler

LOGGER = logging.getLogger(__name__)


class ResourceConfig(pydantic.BaseModel):
    """
    The static description of a resource.

    :param name: The name of the resource, unique within a registry.
    :param form: The path of the form on the form service, relative to the app url.
    :param parents: The names of the resources this resource depends on.
    """

    model_config = pydantic.ConfigDict(frozen=True)

    name: str = pydantic.Field(min_length=1)
    form: str = pydantic.Field(min_length=1)
    parents: tuple[str, ...] = ()


class Loader:
    """
    The loading indicator of a resource view. It is switched on when a remote load starts and off when it succeeds.
    """

    def __init__(self) -> None:
        self.loading: bool = False


class ResourceNode:
    """
    A form definition and, optionally, one submission of that form.

    Constructing a node registers it in the registry, starts loading the form and starts resolving the parents declared
    in its config. This requires a running event loop. Parents are looked up once, at construction: a parent must be
    registered before its children are constructed.

    :param app_config: The application config. When it is missing, a configuration error is logged and the node
        continues with urls relative to the form service root.
    :param config: The description of this resource.
    :param loader: The loading indicator to drive.
    :param registry: The registry to register in and to look up parents in.
    :param client_factory: Creates the remote clients, defaults to REST clients.
    """

    def __init__(
        self,
        app_config: Optional[AppConfig],
        config: ResourceConfig,
        loader: Optional[Loader] = None,
        registry: Optional[ResourceRegistry] = None,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self.app_config = app_config
        self.config = config
        self.loader = loader if loader is not None else Loader()
        self.registry = registry
        self.client_factory: ClientFactory = client_factory if client_factory is not None else rest_client_factory(app_config)

        app_url = ""
        if app_config is None:
            LOGGER.error("%s", ConfigurationError("You must provide an application configuration within your application!"))
        else:
            app_url = app_config.app_url
        self.form_url = build_form_url(app_url, config.form)

        self._tasks: TaskHandler[object] = TaskHandler()
        self.initialize()

    def __repr__(self) -> str:
        return f"ResourceNode({self.name})"

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def on_parents(self) -> EventChannel[list[ParentResolution]]:
        return self.notifier.on_parents

    @property
    def on_index_select(self) -> EventChannel[JsonType]:
        return self.notifier.on_index_select

    @property
    def refresh(self) -> EventChannel[ChangeEvent]:
        return self.notifier.refresh

    def initialize(self) -> None:
        """
        Reset the node to an empty state, register it and start loading the form and resolving the parents.
        """
        self.notifier = ChangeNotifier(self.name)
        self.form: Optional[FormDefinition] = None
        self.submission: Optional[Submission] = {"data": {}}
        self.submission_id: Optional[str] = None
        self.submission_url: Optional[str] = None
        self.submission_client: Optional[RemoteFormClient] = None
        self.form_state = LoadState.uninitialized
        self.submission_state = LoadState.uninitialized

        self.form_loaded: ResultCell[FormDefinition] = ResultCell(f"{self.name}.form")
        self.submission_loaded: ResultCell[Submission] = ResultCell(f"{self.name}.submission")
        self.parents_loaded: ResultCell[list[ParentResolution]] = ResultCell(f"{self.name}.parents")
        self._resolved_parents: dict[str, Submission] = {}

        if self.registry is not None:
            self.registry.register(self.name, self)

        self.form_client: RemoteFormClient = self.client_factory(self.form_url)
        self.form_loading: Task[object] = self._tasks.add_background_task(self.load_form())
        self.set_parents()

    def _fail(self, error_type: type[ResourceError], cause: object) -> ResourceError:
        """
        Build the error for a failed operation and forward it to the shared error channel. The caller raises it.
        """
        error = error_type(self.name, cause)
        if isinstance(cause, BaseException):
            error.__cause__ = cause
        if self.registry is not None:
            self.registry.error.emit(error)
        return error

    async def load_form(self) -> FormDefinition:
        """
        Load the form definition. Settles `form_loaded`.
        """
        self.loader.loading = True
        self.form_state = LoadState.loading
        try:
            form = await self.form_client.load_form()
        except Exception as e:
            self.form_state = LoadState.failed
            error = self._fail(FormLoadError, e)
            self.form_loaded.reject(error)
            raise error from e

        self.form = form
        self.form_state = LoadState.ready
        self.form_loaded.fulfill(form)
        self.loader.loading = False
        return form

    def set_parents(self) -> None:
        """
        Look up the declared parents in the registry and start resolving the ones that are present.
        """
        if not self.config.parents:
            return

        if self.registry is None:
            message = (
                f"Resource {self.name} declares parents {list(self.config.parents)}, you must provide a registry to use"
                " nested resources. Parent resolution is skipped."
            )
            LOGGER.warning(message, extra={"resource": self.name, "outcome": "missing_collaborator"})
            warnings.warn(warnings.MissingCollaboratorWarning(message))
            return

        resolutions: list[AsyncioCoroutine[ParentResolution]] = []
        for parent_name in self.config.parents:
            parent = self.registry.lookup(parent_name)
            if parent is None or parent is self:
                LOGGER.warning(
                    "%s: parent %s of resource %s is not registered, it is skipped",
                    warnings.UnregisteredParentWarning.__name__,
                    parent_name,
                    self.name,
                    extra={"resource": self.name, "parent": parent_name, "outcome": "unregistered_parent"},
                )
                continue
            resolutions.append(self._resolve_parent(parent_name, parent))

        self._tasks.add_background_task(self._join_parents(resolutions))

    async def _resolve_parent(self, name: str, parent: "ResourceNode") -> ParentResolution:
        resource = await parent.submission_loaded
        self._tasks.add_background_task(self._hide_parent_component(name))

        self._resolved_parents[name] = resource
        self.submission = self._with_resolved_parents(self.submission)
        self.notifier.refresh.emit(ChangeEvent.submission(self.submission))
        return ParentResolution(name=name, resource=resource)

    async def _hide_parent_component(self, name: str) -> None:
        """
        The parent is resolved, the component that would select it is hidden once the form is there.
        """
        form = await self.form_loaded
        component = get_component(form.get("components", []), name)
        if component is None:
            return
        component["hidden"] = True
        self.notifier.refresh.emit(ChangeEvent.form(form))

    async def _join_parents(self, resolutions: Sequence[AsyncioCoroutine[ParentResolution]]) -> None:
        # wait for every parent to settle, a failure of one parent does not stop the merge of the others
        results = await asyncio.gather(*resolutions, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                LOGGER.warning(
                    "Not all parents of resource %s resolved: %s",
                    self.name,
                    result,
                    extra={"resource": self.name, "outcome": "parents_failed"},
                )
                self.parents_loaded.reject(result)
                return

        parents: list[ParentResolution] = list(results)
        if self.parents_loaded.fulfill(parents):
            self.notifier.on_parents.emit(parents)

    def _with_resolved_parents(self, submission: Optional[Submission]) -> Submission:
        """
        Make sure the submission holds the submission of every resolved parent.
        """
        if submission is None:
            submission = {}
        data = submission.setdefault("data", {})
        data.update(self._resolved_parents)
        return submission

    def _set_submission_handle(self, submission_id: str) -> RemoteFormClient:
        self.submission_id = submission_id
        self.submission_url = build_submission_url(self.form_url, submission_id)
        self.submission_client = self.client_factory(self.submission_url)
        return self.submission_client

    async def load_submission(self, resource_id: str) -> Submission:
        """
        Load the submission with the given id. Settles `submission_loaded`.
        """
        client = self._set_submission_handle(resource_id)
        self.submission = self._with_resolved_parents({"data": {}})
        self.loader.loading = True
        self.submission_state = LoadState.loading
        try:
            submission = await client.load_submission()
        except Exception as e:
            self.submission_state = LoadState.failed
            error = self._fail(SubmissionLoadError, e)
            self.submission_loaded.reject(error)
            raise error from e

        self.submission = self._with_resolved_parents(submission)
        self.submission_state = LoadState.ready
        self.submission_loaded.fulfill(submission)
        self.loader.loading = False
        self.notifier.refresh.emit(ChangeEvent.submission(self.submission))
        return submission

    async def load_resource(self, route_params: Mapping[str, str]) -> Submission:
        """
        Load the submission identified by the `id` route parameter.
        """
        return await self.load_submission(route_params[const.ROUTE_PARAM_ID])

    async def save(self, submission: Submission) -> Submission:
        """
        Save a submission. A submission with an identifier updates that submission, one without creates a new submission
        of the form.
        """
        submission_id = submission.get(const.SUBMISSION_ID_FIELD)
        client: RemoteFormClient
        if submission_id:
            if self.submission_client is None or self.submission_id != submission_id:
                self._set_submission_handle(submission_id)
            assert self.submission_client is not None
            client = self.submission_client
        else:
            client = self.form_client

        try:
            saved = await client.save_submission(submission)
        except Exception as e:
            raise self._fail(SaveError, e) from e

        saved_id = saved.get(const.SUBMISSION_ID_FIELD)
        if saved_id and saved_id != self.submission_id:
            self._set_submission_handle(saved_id)
        self.submission = self._with_resolved_parents(saved)
        self.notifier.refresh.emit(ChangeEvent.submission(self.submission))
        return saved

    async def remove(self) -> None:
        """
        Delete the loaded submission.
        """
        if self.submission_client is None:
            raise self._fail(DeleteError, "no submission is loaded")

        try:
            await self.submission_client.delete_submission()
        except Exception as e:
            raise self._fail(DeleteError, e) from e

        self.submission = None

    def select_index(self, submission: JsonType) -> None:
        """
        Notify the observers that a submission was selected in an index of this resource.
        """
        self.notifier.on_index_select.emit(submission)

    async def join(self) -> None:
        """
        Wait until the background work of this node (form load, parent resolution, asynchronous subscribers) is done.
        """
        await self._tasks.join()
        await self.notifier.join()
