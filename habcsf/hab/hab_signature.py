#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""HAB signature record wrapping a detached CMS signature."""

from typing import Optional, Union

from typing_extensions import Self

from habcsf.exceptions import HabCsfParsingError, HabCsfValueError
from habcsf.hab.constants import HAB_VERSION, SegmentTag
from habcsf.hab.hab_header import Header
from habcsf.utils.abstract import BaseClass
from habcsf.utils.misc import align_block, get_der_object_size


class Signature(BaseClass):
    """HAB signature record (tag 0xD8).

    The DER signature is zero padded to a 4-byte boundary; the record length
    covers header, signature and padding.
    """

    def __init__(self, version: int = HAB_VERSION, data: Optional[bytes] = None) -> None:
        """Initialize HAB signature record.

        :param version: Version of the signature format, defaults to 0x40
        :param data: DER encoded CMS signature, defaults to empty
        """
        self._header = Header(tag=SegmentTag.SIG.tag, param=version)
        self._data = b"" if data is None else bytes(data)
        self._header.length = self.size

    @property
    def data(self) -> bytes:
        """DER encoded signature without padding."""
        return self._data

    @data.setter
    def data(self, value: Union[bytes, bytearray]) -> None:
        self._data = bytes(value)
        self._header.length = self.size

    @property
    def payload(self) -> bytes:
        """Signature padded to 4-byte boundary."""
        return align_block(self._data, 4)

    @property
    def size(self) -> int:
        """Total size of the record including header and padding."""
        return Header.SIZE + len(self.payload)

    @property
    def version(self) -> int:
        """Record version."""
        return self._header.param

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return (
            f"Signature <Ver: {self._header.version_major}.{self._header.version_minor}, "
            f"Size: {len(self._data)}>"
        )

    def __str__(self) -> str:
        msg = "-" * 60 + "\n"
        msg += (
            f"Signature (Ver: {self._header.version_major}.{self._header.version_minor}, "
            f"Size: {len(self._data)}, Record: {self.size})\n"
        )
        msg += "-" * 60 + "\n"
        return msg

    def export(self) -> bytes:
        """Export signature record including header and padding."""
        self._header.length = self.size
        return self._header.export() + self.payload

    @classmethod
    def parse(cls, data: bytes) -> Self:
        """Parse signature record from binary data.

        :param data: Binary data starting with a signature record
        :raises HabCsfParsingError: Invalid data format
        :return: New Signature instance
        """
        header = Header.parse(data, SegmentTag.SIG.tag)
        if header.length > len(data):
            raise HabCsfParsingError(
                f"Signature record exceeds data ({header.length} > {len(data)})"
            )
        payload = data[Header.SIZE : header.length]
        if not any(payload):
            return cls(header.param)
        try:
            signature = payload[: get_der_object_size(payload)]
        except HabCsfValueError as exc:
            raise HabCsfParsingError(f"Invalid signature in HAB record: {exc}") from exc
        return cls(header.param, signature)
