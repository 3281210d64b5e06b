# SPDX-License-Identifier: MIT
# Copyright (c) 2025 rcc-client contributors

"""URL builders for the configuration authority endpoints."""

from urllib.parse import urlencode

from .conf import Conf

VERSION_PATH = "/api/version"
ITEMS_PATH = "/api/items"


def _base_params(conf: Conf) -> dict[str, str]:
    return {
        "projectName": conf.project_name,
        "envName": conf.env_name,
        "apiPassword": conf.api_password,
    }


def api_version(conf: Conf) -> str:
    """URL of the active-version check for the configured binding."""
    params = _base_params(conf)
    if conf.version_name:
        params["versionName"] = conf.version_name
    return f"{conf.server_url}{VERSION_PATH}?{urlencode(params)}"


def api_items(conf: Conf, version_id: int) -> str:
    """URL returning every key/value pair of the given version."""
    params = _base_params(conf)
    params["versionId"] = str(version_id)
    return f"{conf.server_url}{ITEMS_PATH}?{urlencode(params)}"
