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
import os
from collections import abc
from configparser import ConfigParser, Interpolation
from typing import Callable, Generic, List, Optional, TypeVar, Union

import pydantic

from formresource import const
from formresource.exceptions import ConfigurationError

LOGGER = logging.getLogger(__name__)


def _normalize_name(name: str) -> str:
    return name.replace("_", "-")


def _get_from_env(section: str, name: str) -> Optional[str]:
    return os.environ.get(f"{const.ENV_PREFIX}_{section}_{name}".replace("-", "_").upper(), default=None)


class LenientConfigParser(ConfigParser):
    def optionxform(self, name: str) -> str:
        name = _normalize_name(name)
        return super(LenientConfigParser, self).optionxform(name)


class Config(object):
    __instance: Optional[ConfigParser] = None

    @classmethod
    def load_config(
        cls,
        config_file: Optional[str] = None,
        config_dir: Optional[str] = None,
        main_cfg_file: str = "/etc/formresource/formresource.cfg",
    ) -> None:
        """
        Load the configuration file
        """

        cfg_files_in_config_dir: List[str]
        if config_dir and os.path.isdir(config_dir):
            cfg_files_in_config_dir = sorted(
                [os.path.join(config_dir, f) for f in os.listdir(config_dir) if f.endswith(".cfg")]
            )
        else:
            cfg_files_in_config_dir = []

        local_cfg_files: List[str] = [os.path.expanduser("~/.formresource.cfg"), ".formresource.cfg"]

        # Files with a higher index in the list, override config options defined by files with a lower index
        files: List[str] = [main_cfg_file] + cfg_files_in_config_dir + local_cfg_files
        if config_file is not None:
            files.append(config_file)

        config = LenientConfigParser(interpolation=Interpolation())
        config.read(files)
        cls.__instance = config

    @classmethod
    def _get_instance(cls) -> ConfigParser:
        if cls.__instance is None:
            cls.load_config()

        return cls.__instance

    @classmethod
    def _reset(cls) -> None:
        cls.__instance = None

    @classmethod
    def set(cls, section: str, name: str, value: str) -> None:
        """
        Override a value
        """
        name = _normalize_name(name)

        if section not in cls._get_instance():
            cls._get_instance().add_section(section)
        cls._get_instance().set(section, name, value)


def is_int(value: str) -> int:
    """int"""
    return int(value)


def is_bool(value: Union[bool, str]) -> bool:
    """Boolean value, represented as any of true, false, on, off, yes, no, 1, 0. (Case-insensitive)"""
    if isinstance(value, bool):
        return value
    boolean_states: abc.Mapping[str, bool] = Config._get_instance().BOOLEAN_STATES
    if value.lower() not in boolean_states:
        raise ValueError("Not a boolean: %s" % value)
    return boolean_states[value.lower()]


def is_str(value: str) -> str:
    """str"""
    return str(value)


def is_str_opt(value: str) -> Optional[str]:
    """optional str"""
    if value is None:
        return None
    return str(value)


T = TypeVar("T")


class Option(Generic[T]):
    """
    Defines an option and exposes it for use

    All config option should be define prior to use.

    :param section: section in the config file
    :param name: name of the option
    :param default: default value for this option
        the default value is either a value or a function, a function is called to get the actual default value
    :param documentation: the documentation for this option
    :param validator: a function responsible for turning the string representation of the option into the correct type.
    """

    def __init__(
        self,
        section: str,
        name: str,
        default: Union[T, None, Callable[[], T]],
        documentation: str,
        validator: Callable[[str], T] = is_str,
    ) -> None:
        self.section = section
        self.name = _normalize_name(name)
        self.validator = validator
        self.documentation = documentation
        self.default = default

    def get(self) -> T:
        val = _get_from_env(self.section, self.name)
        if val is not None:
            return self.validate(val)
        out = Config._get_instance().get(self.section, self.name, fallback=self.get_default_value())
        return self.validate(out)

    def validate(self, value: str) -> T:
        return self.validator(value)

    def get_default_value(self) -> Optional[T]:
        defa = self.default
        if callable(defa):
            return defa()
        else:
            return defa

    def set(self, value: str) -> None:
        """Only for tests"""
        Config.set(self.section, self.name, value)


#############################
# Application
#############################
# flake8: noqa: H904
api_url = Option("app", "api-url", None, "The base url of the form service API", is_str_opt)
app_url = Option(
    "app",
    "app-url",
    None,
    "The url of the project on the form service. Form and submission urls are built relative to this url.",
    is_str_opt,
)
form_only = Option("app", "form-only", False, "Only load the form definition, not the surrounding project", is_bool)


#############################
# Remote client
#############################
client_request_timeout = Option("client", "request-timeout", 120, "The time before a request times out in seconds", is_int)
client_connect_timeout = Option("client", "connect-timeout", 20, "The time before connecting times out in seconds", is_int)
client_token = Option("client", "token", None, "The jwt token to authenticate with against the form service", is_str_opt)
client_ssl_ca_cert_file = Option(
    "client", "ssl-ca-cert-file", None, "CA cert file used to validate the server certificate against", is_str_opt
)


class AppConfig(pydantic.BaseModel):
    """
    The application configuration every resource node requires.

    :param api_url: The base url of the form service API.
    :param app_url: The url of the project the forms live in.
    :param form_only: Only load form definitions, not the surrounding project.
    """

    model_config = pydantic.ConfigDict(frozen=True)

    api_url: Optional[str] = None
    app_url: str
    form_only: bool = False

    @pydantic.field_validator("app_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


def load_app_config() -> Optional[AppConfig]:
    """
    Build the application configuration from the config options.

    A missing app url is a configuration error: it is logged and None is returned, the caller continues in a degraded state.
    """
    url = app_url.get()
    if not url:
        LOGGER.error("%s", ConfigurationError("You must provide an application configuration ([app] app-url)."))
        return None
    return AppConfig(api_url=api_url.get(), app_url=url, form_only=form_only.get())
