#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""HABCSF - Command Sequence File generator for NXP High Assurance Boot.

The package builds the signed CSF blob that the boot ROM of HAB4 enabled
i.MX devices executes to authenticate a bootable image: it reads the image
boot header, builds the fixed chain of install-key and authenticate-data
commands, signs the command area and the image with detached CMS signatures
and lays out the result into the space the boot header reserves for it.
"""

import os
from typing import Optional, Union

from packaging.version import Version, parse
from platformdirs import PlatformDirs

from .__version__ import __version__ as habcsf_version


def value_to_bool(value: Optional[Union[bool, int, str]]) -> bool:
    """Convert value to boolean from various input formats.

    Supports conversion from string representations like "True", "true", "T", "1"
    and standard Python truthy/falsy values for other types.

    :param value: Value to convert to boolean (string, int, bool, or None).
    :return: Boolean representation of the input value.
    """
    if isinstance(value, str):
        return value in ("True", "true", "T", "1")
    return bool(value)


version: Version = parse(habcsf_version)

__author__ = "NXP"
__license__ = "BSD-3-Clause"
__version__ = str(version)

HABCSF_PLATFORM_DIRS = PlatformDirs(appauthor="nxp", appname="habcsf", version=version.base_version)

HABCSF_DEBUG_LOGGING_DISABLED = value_to_bool(os.environ.get("HABCSF_DEBUG_LOGGING_DISABLED"))
HABCSF_DEBUG_LOG_FILE = os.environ.get(
    "HABCSF_DEBUG_LOG_FILE", os.path.join(HABCSF_PLATFORM_DIRS.user_log_dir, "debug.log")
)
