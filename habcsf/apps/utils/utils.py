#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""HABCSF application utilities: error handling and output formatting."""

import logging
import sys
from functools import wraps
from typing import Any, Callable, Optional

import click
import hexdump

from habcsf import HABCSF_DEBUG_LOG_FILE, HABCSF_DEBUG_LOGGING_DISABLED
from habcsf.exceptions import HabCsfError

logger = logging.getLogger(__name__)


class HabCsfAppError(HabCsfError):
    """Non-fatal error of a HABCSF application with the exit code passed to OS.

    :cvar fmt: Format string template for error message display.
    """

    fmt = "{description}"

    def __init__(self, desc: Optional[str] = None, error_code: int = 1) -> None:
        """Initialize the AppError.

        :param desc: Description to print out on command line, defaults to None
        :param error_code: Error code passed to OS, defaults to 1
        """
        super().__init__(desc)
        self.error_code = error_code


class INT(click.ParamType):
    """Click parameter type accepting integers in any Python literal base (0x, 0b, 0o)."""

    name = "integer"

    def __init__(self, base: int = 0) -> None:
        """Initialize custom INT param class.

        :param base: requested base for the number, defaults to 0
        """
        super().__init__()
        self.base = base

    # pylint: disable=inconsistent-return-statements
    def convert(
        self,
        value: Any,
        param: Optional[click.Parameter] = None,
        ctx: Optional[click.Context] = None,
    ) -> int:
        """Perform the conversion str -> int.

        :param value: value to convert
        :param param: Click parameter, defaults to None
        :param ctx: Click context, defaults to None
        :return: value as integer
        """
        if isinstance(value, int):
            return value
        try:
            return int(value, self.base)
        except (TypeError, ValueError):
            self.fail(f"{value!r} is not a valid integer", param, ctx)


def _split_string(line: str, length: int) -> list[str]:
    return [line[i : i + length] for i in range(0, len(line), length)]


def format_raw_data(data: bytes, use_hexdump: bool = False, line_length: int = 16) -> str:
    """Format bytes data into human-readable form.

    :param data: Data to format
    :param use_hexdump: Use hexdump with addresses and ASCII, defaults to False
    :param line_length: bytes per line, defaults to 16
    :return: formatted string (multilined if necessary)
    """
    if use_hexdump:
        return hexdump.hexdump(data, result="return")
    data_string = data.hex()
    parts = [_split_string(line, 2) for line in _split_string(data_string, line_length * 2)]
    return "\n".join(" ".join(line) for line in parts)


def catch_habcsf_error(function: Callable) -> Callable:
    """Catch and handle HabCsfError and other exceptions.

    HabCsfAppError exits with its own error code. Any other HabCsfError or
    OSError (malformed image, unusable keys, CSF overflow, unreadable input or
    unwritable output) is printed as a one line diagnostic and exits with
    code 1. Other exceptions are defects; they exit with code 3 and the
    traceback goes to the debug log.

    :param function: The function to be decorated.
    :return: The decorated function.
    """

    @wraps(function)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return function(*args, **kwargs)
        except HabCsfAppError as app_exc:
            if app_exc.description:
                click.echo(f"{app_exc.__class__.__name__}: {app_exc}", err=True)
            if 0 < app_exc.error_code < 256:
                sys.exit(app_exc.error_code)
            sys.exit(1)
        except (HabCsfError, OSError) as habcsf_exc:
            click.echo(f"{habcsf_exc.__class__.__name__}: {habcsf_exc}", err=True)
            logger.debug(str(habcsf_exc), exc_info=True)
            sys.exit(1)
        except (Exception, KeyboardInterrupt) as base_exc:  # pylint: disable=broad-except
            click.echo(f"{base_exc.__class__.__name__}: {base_exc}", err=True)
            logger.debug(str(base_exc), exc_info=True)
            if not HABCSF_DEBUG_LOGGING_DISABLED:
                click.secho(
                    f"See debug log file: {HABCSF_DEBUG_LOG_FILE} for more info", fg="yellow"
                )
            sys.exit(3)

    return wrapper
