# Copyright 2025 icecake0141
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# This file was created or modified with the assistance of an AI (Large Language Model).
# Review required for correctness, security, and licensing.

"""
Config file support for LinkWatch.

Settings live in ``~/.linkwatch.conf``, written either as YAML::

    default:
      history_size: 80
      log_level: info
    hosts:
      - 192.0.2.1
      - core-switch.lan

or as INI, where ``[hosts]`` lists one bare host per line::

    [default]
    history_size = 80

    [hosts]
    192.0.2.1

Command-line options win over the file, and the file wins over built-in defaults.
"""

import configparser
import logging
import os
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.expanduser("~/.linkwatch.conf")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class LinkWatchConfig:
    """Settings read from the config file. None means the file does not set it."""

    history_size: Optional[int] = None
    log_level: Optional[str] = None
    log_file: Optional[str] = None
    hosts: List[str] = field(default_factory=list)


def _invalid(path: str, key: str, value: Any, expected: str) -> ValueError:
    return ValueError(f"Invalid value for '{key}' in '{path}': expected {expected}, got {value!r}")


def _build_config(path: str, settings: Mapping[str, Any], hosts: List[Any]) -> LinkWatchConfig:
    """Validate raw settings and hosts from either file format."""
    config = LinkWatchConfig()
    for key, value in settings.items():
        if value is None:
            continue
        if key == "history_size":
            if isinstance(value, bool) or not isinstance(value, (int, str)):
                raise _invalid(path, key, value, "a positive integer")
            try:
                size = int(value)
            except ValueError:
                raise _invalid(path, key, value, "a positive integer") from None
            if size <= 0:
                raise _invalid(path, key, value, "a positive integer")
            config.history_size = size
        elif key == "log_level":
            if not isinstance(value, str) or value.upper() not in LOG_LEVELS:
                raise _invalid(path, key, value, "one of " + ", ".join(LOG_LEVELS))
            config.log_level = value.upper()
        elif key == "log_file":
            if not isinstance(value, str):
                raise _invalid(path, key, value, "a file path")
            config.log_file = value
        else:
            logger.warning("Unknown config key '%s' in '%s'; ignoring.", key, path)

    config.hosts = [str(host).strip() for host in hosts if host is not None and str(host).strip()]
    return config


def _parse_yaml(path: str, text: str) -> Tuple[Mapping[str, Any], List[Any]]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in config file '{path}': {exc}") from exc
    if data is None:
        return {}, []
    if not isinstance(data, dict):
        raise ValueError(f"Config file '{path}' must contain a YAML mapping at the top level.")

    settings = data.get("default") or {}
    if not isinstance(settings, dict):
        raise ValueError(f"The 'default' section in '{path}' must be a YAML mapping.")
    hosts = data.get("hosts") or []
    if not isinstance(hosts, list):
        raise ValueError(f"The 'hosts' section in '{path}' must be a YAML list.")
    return settings, hosts


def _parse_ini(path: str, text: str) -> Tuple[Mapping[str, Any], List[Any]]:
    # Host lines carry no value, and IPv6 literals contain ':', so '=' is the only delimiter.
    parser = configparser.ConfigParser(allow_no_value=True, delimiters=("=",), interpolation=None)
    try:
        parser.read_string(text, source=path)
    except configparser.Error as exc:
        raise ValueError(f"Invalid config file '{path}': {exc}") from exc

    settings = dict(parser.items("default")) if parser.has_section("default") else {}
    hosts = parser.options("hosts") if parser.has_section("hosts") else []
    return settings, hosts


def _looks_like_ini(text: str) -> bool:
    """True when the first significant line is a ``[section]`` header."""
    for line in text.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith(("#", ";")):
            return stripped.startswith("[")
    return False


def load_config(path: Optional[str] = None) -> LinkWatchConfig:
    """
    Load settings from the config file.

    Args:
        path: Config file path (default: ~/.linkwatch.conf)

    Returns:
        LinkWatchConfig; all fields unset when the file does not exist

    Raises:
        ValueError: If the file cannot be read or parsed, or holds an invalid value
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH
    try:
        with open(path, "r", encoding="utf-8") as fh:
            text = fh.read()
    except FileNotFoundError:
        return LinkWatchConfig()
    except (OSError, UnicodeDecodeError) as exc:
        raise ValueError(f"Cannot read config file '{path}': {exc}") from exc

    if _looks_like_ini(text):
        logger.debug("Loading INI config from '%s'.", path)
        settings, hosts = _parse_ini(path, text)
    else:
        logger.debug("Loading YAML config from '%s'.", path)
        settings, hosts = _parse_yaml(path, text)
    return _build_config(path, settings, hosts)
