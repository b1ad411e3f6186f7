#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause
"""CSF commands used by the HAB authentication chain."""

from habcsf.hab.commands.cmd_auth_data import AuthDataFlagsEnum, CmdAuthData
from habcsf.hab.commands.cmd_install_key import CmdInstallKey, InstallKeyFlagsEnum
from habcsf.hab.commands.commands import CmdBase, ImageBlock, parse_command

__all__ = [
    "AuthDataFlagsEnum",
    "CmdAuthData",
    "CmdBase",
    "CmdInstallKey",
    "ImageBlock",
    "InstallKeyFlagsEnum",
    "parse_command",
]
