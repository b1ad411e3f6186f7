#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""HABCSF exception classes.

Every failure of the CSF pipeline is reported by one of the exceptions below.
The library only raises them, converting them to messages and exit codes is
left to the command line layer.
"""

from typing import Optional

#######################################################################
# # HAB CSF Exceptions
#######################################################################


class HabCsfError(Exception):
    """HABCSF Base Exception.

    :cvar fmt: Default error message format template.
    """

    fmt = "HABCSF: {description}"

    def __init__(self, desc: Optional[str] = None) -> None:
        """Initialize the base HABCSF Exception.

        :param desc: Optional description of the exception.
        """
        super().__init__()
        self.description = desc

    def __str__(self) -> str:
        return self.fmt.format(description=self.description or "Unknown Error")


class HabCsfKeyError(HabCsfError, KeyError):
    """HABCSF Key Error exception for missing enum members or dictionary keys."""


class HabCsfValueError(HabCsfError, ValueError):
    """HABCSF standard value error."""


class HabCsfTypeError(HabCsfError, TypeError):
    """HABCSF standard type error."""


class HabCsfParsingError(HabCsfError):
    """Binary data do not contain the expected HAB record."""


class HabCsfFormatError(HabCsfParsingError):
    """The target image does not start with a valid boot header.

    Raised when the vector table tag is wrong or when the boot data record
    the vector table points to lies outside of the image file.
    """


class HabCsfCryptoError(HabCsfError):
    """Key or certificate material cannot be used.

    Raised when a private key or a certificate cannot be loaded or when the
    private key does not belong to the certificate it should sign for.
    """


class HabCsfSizeOverflowError(HabCsfError):
    """Assembled CSF does not fit into the space reserved by the boot header."""

    def __init__(self, required: int, actual: int) -> None:
        """Initialize the overflow error.

        :param required: Number of bytes reserved for the CSF by the boot header.
        :param actual: Number of bytes of the assembled CSF.
        """
        self.required = required
        self.actual = actual
        self.overflow = actual - required
        super().__init__(
            f"CSF data ({actual} bytes) exceed the space reserved by the boot header "
            f"({required} bytes) by {self.overflow} bytes. "
            "Rebuild the image with more space reserved for the CSF."
        )


class HabCsfInternalConsistencyError(HabCsfError):
    """Consistency check of the assembled CSF failed; always a defect."""


class HabCsfVerificationError(HabCsfError):
    """Signature or structure of a CSF does not verify."""
