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
import json
import logging
import sys
from typing import Optional

import click

from formresource import config
from formresource.client import ClientFactory, rest_client_factory
from formresource.config import AppConfig, Config
from formresource.exceptions import FormResourceException
from formresource.logging import setup_logging
from formresource.node import ResourceConfig, ResourceNode
from formresource.registry import ResourceRegistry
from formresource.warnings import WarningsManager

LOGGER = logging.getLogger(__name__)


class ParentParam(click.ParamType):
    """
    A parent on the command line: ``NAME=FORM_PATH:ID``
    """

    name = "parent"

    def convert(self, value: object, param: Optional[click.Parameter], ctx: Optional[click.Context]) -> tuple[str, str, str]:
        if isinstance(value, tuple):
            return value
        try:
            name, rest = str(value).split("=", 1)
            form, submission_id = rest.rsplit(":", 1)
        except ValueError:
            self.fail(f"{value!r} is not of the form NAME=FORM_PATH:ID", param, ctx)
        if not name or not form or not submission_id:
            self.fail(f"{value!r} is not of the form NAME=FORM_PATH:ID", param, ctx)
        return name, form, submission_id


def get_app_config() -> AppConfig:
    app_config = config.load_app_config()
    if app_config is None:
        raise click.ClickException("No application configuration found, set [app] app-url.")
    return app_config


async def show_resource(
    app_config: AppConfig,
    client_factory: ClientFactory,
    name: str,
    form: str,
    submission_id: Optional[str],
    parents: list[tuple[str, str, str]],
) -> dict[str, object]:
    """
    Load a resource and its parents and return the resolved submission of the resource.
    """
    registry = ResourceRegistry()
    registry.error.subscribe(lambda error: LOGGER.debug("Error reported on the error channel: %s", error))

    parent_nodes: list[tuple[ResourceNode, str]] = []
    for parent_name, parent_form, parent_id in parents:
        parent_node = ResourceNode(
            app_config, ResourceConfig(name=parent_name, form=parent_form), registry=registry, client_factory=client_factory
        )
        parent_nodes.append((parent_node, parent_id))

    node = ResourceNode(
        app_config,
        ResourceConfig(name=name, form=form, parents=tuple(p[0] for p in parents)),
        registry=registry,
        client_factory=client_factory,
    )
    await asyncio.gather(*(parent_node.load_submission(parent_id) for parent_node, parent_id in parent_nodes))
    if submission_id is not None:
        await node.load_submission(submission_id)
    if parents:
        await node.parents_loaded
    await node.form_loaded
    await node.join()
    assert node.submission is not None
    return node.submission


async def delete_resource(app_config: AppConfig, client_factory: ClientFactory, form: str, submission_id: str) -> None:
    node = ResourceNode(app_config, ResourceConfig(name=form, form=form), client_factory=client_factory)
    await node.load_submission(submission_id)
    await node.remove()
    await node.join()


@click.group(help="Load form resources and their parents from a form service")
@click.option("-v", "--verbose", count=True, help="Log level for messages going to the console. Default is warnings.")
@click.option("-c", "--config", "config_file", help="Use this config file", type=click.Path(dir_okay=False))
@click.option("--config-dir", help="The directory containing additional config files", type=click.Path(file_okay=False))
@click.option(
    "--warnings",
    "warning_behaviour",
    type=click.Choice(["warn", "ignore", "error"]),
    default="warn",
    help="How to handle formresource warnings",
)
def cmd(verbose: int, config_file: Optional[str], config_dir: Optional[str], warning_behaviour: str) -> None:
    setup_logging(verbose + 1, sys.stderr)
    WarningsManager.apply(warning_behaviour)
    Config.load_config(config_file, config_dir)


@cmd.command(name="show")
@click.argument("form_path")
@click.option("--name", "-n", help="The name of the resource, defaults to the form path")
@click.option("--id", "submission_id", help="The id of the submission to load")
@click.option("--parent", "-p", "parents", type=ParentParam(), multiple=True, help="A parent resource: NAME=FORM_PATH:ID")
def show(form_path: str, name: Optional[str], submission_id: Optional[str], parents: tuple[tuple[str, str, str], ...]) -> None:
    """
    Show the submission of a resource with the submissions of its parents merged in.

    FORM_PATH: The path of the form, relative to the app url
    """
    app_config = get_app_config()
    try:
        submission = asyncio.run(
            show_resource(app_config, rest_client_factory(app_config), name or form_path, form_path, submission_id, list(parents))
        )
    except FormResourceException as e:
        raise click.ClickException(str(e))
    click.echo(json.dumps(submission, indent=2))


@cmd.command(name="delete")
@click.argument("form_path")
@click.argument("submission_id")
def delete(form_path: str, submission_id: str) -> None:
    """
    Delete a submission.

    FORM_PATH: The path of the form, relative to the app url

    SUBMISSION_ID: The id of the submission to delete
    """
    app_config = get_app_config()
    try:
        asyncio.run(delete_resource(app_config, rest_client_factory(app_config), form_path, submission_id))
    except FormResourceException as e:
        raise click.ClickException(str(e))
    click.echo(f"Deleted submission {submission_id} of {form_path}")


def main() -> None:
    cmd()


if __name__ == "__main__":
    main()
