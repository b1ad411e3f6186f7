#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""CLI helper for Click."""

import logging
from typing import Any, Callable, TypeVar, Union

import click

from habcsf import __version__ as habcsf_version
from habcsf.hab.boot_header import BootMedia

FC = TypeVar("FC", bound=Union[Callable[..., Any], click.Command])


def habcsf_apps_common_options(options: FC) -> FC:
    """Common click options.

    Sets --help, --version; provides: `log_level: int` for logging.

    :return: click decorator
    """
    options = click.help_option("--help")(options)
    options = click.version_option(habcsf_version, "--version")(options)
    options = click.option(
        "-vv",
        "--debug",
        "log_level",
        flag_value=logging.DEBUG,
        help="Display more debugging information.",
    )(options)
    options = click.option(
        "-v",
        "--verbose",
        "log_level",
        flag_value=logging.INFO,
        help="Print more detailed information",
    )(options)
    return options


def habcsf_output_option(options: FC) -> FC:
    """Output file click option decorator.

    Provides: `output: str` a full path to the output file.

    :return: Click decorator
    """
    return click.option(
        "-o",
        "--output",
        type=click.Path(resolve_path=True, dir_okay=False),
        required=True,
        help="Path to the output CSF binary.",
    )(options)


def habcsf_boot_media_option(options: FC) -> FC:
    """Boot media click option decorator.

    Provides: `boot_media: str` label of the boot media.

    :return: Click decorator
    """
    return click.option(
        "-m",
        "--boot-media",
        type=click.Choice(BootMedia.labels(), case_sensitive=False),
        default=BootMedia.SD.label,
        show_default=True,
        help="Boot media of the image; defines the offset of the vector table on the media.",
    )(options)
