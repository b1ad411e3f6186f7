#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause
"""Super Root Key table data referenced by the CSF."""

from hashlib import sha256

from typing_extensions import Self

from habcsf.exceptions import HabCsfValueError
from habcsf.utils.abstract import BaseClass


class SrkTableData(BaseClass):
    """SRK table created by an external tool.

    The table is copied into the CSF byte by byte; its structure is not
    interpreted and no padding is added.
    """

    def __init__(self, data: bytes) -> None:
        """Initialize SRK table data.

        :param data: Binary SRK table.
        :raises HabCsfValueError: Table is empty.
        """
        if not data:
            raise HabCsfValueError("SRK table must not be empty")
        self.data = bytes(data)

    @property
    def size(self) -> int:
        """Size of the table in bytes."""
        return len(self.data)

    @property
    def digest(self) -> bytes:
        """SHA-256 of the SRK table blob, for identification."""
        return sha256(self.data).digest()

    def __len__(self) -> int:
        return self.size

    def __repr__(self) -> str:
        return f"SRK Table <Size: {self.size}>"

    def __str__(self) -> str:
        msg = "-" * 60 + "\n"
        msg += f"SRK Table (Size: {self.size})\n"
        msg += f" SHA256: {self.digest.hex()}\n"
        msg += "-" * 60 + "\n"
        return msg

    def export(self) -> bytes:
        """Export the table as is."""
        return self.data

    @classmethod
    def parse(cls, data: bytes) -> Self:
        """Take the whole data as SRK table."""
        return cls(data)
