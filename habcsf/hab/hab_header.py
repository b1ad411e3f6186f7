#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause
"""HAB header shared by CSF, certificates, signatures and commands.

Every HAB structure starts with the same four bytes::

    +-----+-----+-----+-----+
    | tag |   length  |param|
    +-----+-----+-----+-----+

where ``length`` is big-endian and covers the whole structure including the
header itself.
"""

from struct import calcsize, pack, unpack_from
from typing import Optional, Union

from typing_extensions import Self

from habcsf.exceptions import HabCsfError, HabCsfParsingError
from habcsf.hab.constants import CmdTag
from habcsf.utils.abstract import BaseClass


class Header(BaseClass):
    """HAB header element.

    :cvar FORMAT: Binary format string for header structure packing.
    :cvar SIZE: Fixed size of the header in bytes.
    """

    FORMAT = ">BHB"
    SIZE = calcsize(FORMAT)

    def __init__(self, tag: int = 0, param: int = 0, length: Optional[int] = None) -> None:
        """Initialize HAB header with tag, parameters and length.

        :param tag: Section tag identifier for the HAB header.
        :param param: Version or flags, depending on the structure.
        :param length: Length of the binary data; header size is used when not specified.
        """
        self._tag = tag
        self.param: int = param
        self.length: int = self.SIZE if length is None else length

    @property
    def tag(self) -> int:
        """Tag of a command or segment."""
        return self._tag

    @property
    def size(self) -> int:
        """Header size in bytes."""
        return self.SIZE

    @property
    def version_major(self) -> int:
        """Major format version stored in the upper nibble of param."""
        return self.param >> 4

    @property
    def version_minor(self) -> int:
        """Minor format version stored in the lower nibble of param."""
        return self.param & 0xF

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.param}, {self.length})"

    def __str__(self) -> str:
        return (
            f"{self.__class__.__name__} <TAG:0x{self.tag:02X}, "
            f"PARAM:0x{self.param:02X}, LEN:{self.length}B>"
        )

    def export(self) -> bytes:
        """Export header as binary data.

        :raises HabCsfError: If the length does not fit into the 16-bit field.
        :return: Binary representation of the header.
        """
        if not self.SIZE <= self.length <= 0xFFFF:
            raise HabCsfError(f"Invalid header length: {self.length}")
        return pack(self.FORMAT, self.tag, self.length, self.param)

    @classmethod
    def parse(cls, data: bytes, required_tag: Optional[int] = None) -> Self:
        """Parse header from binary data.

        :param data: Raw data as bytes or bytearray to parse.
        :param required_tag: Expected header tag value, or None to skip the check.
        :return: Header object created from parsed data.
        :raises HabCsfParsingError: If input data is too small or header tag doesn't match.
        """
        if len(data) < cls.SIZE:
            raise HabCsfParsingError(
                f"Invalid input data size for {cls.__name__}: ({len(data)} < {cls.SIZE})."
            )
        tag, length, param = unpack_from(cls.FORMAT, data)

        if required_tag is not None and tag != required_tag:
            raise HabCsfParsingError(
                f"Invalid header tag: '0x{tag:02X}' expected '0x{required_tag:02X}'"
            )

        return cls(tag, param, length)


class CmdHeader(Header):
    """Header of a CSF command; the param byte carries the command flags."""

    def __init__(
        self, tag: Union[CmdTag, int], param: int = 0, length: Optional[int] = None
    ) -> None:
        """Initialize command header.

        :param tag: Command tag identifier, either CmdTag enum or integer value
        :param param: Command flags
        :param length: Length of the command binary section in bytes
        :raises HabCsfError: If invalid command tag is provided
        """
        tag = tag.tag if isinstance(tag, CmdTag) else tag
        if tag not in CmdTag.tags():
            raise HabCsfError(f"Invalid command tag: 0x{tag:02X}")
        super().__init__(tag, param, length)

    @property
    def tag_name(self) -> str:
        """Label of the command tag."""
        return CmdTag.get_label(self.tag)

    @classmethod
    def parse(cls, data: bytes, required_tag: Optional[int] = None) -> Self:
        """Parse command header from raw binary data.

        :param data: Raw data as bytes or bytearray
        :param required_tag: Check header tag if specified value or ignore if is None
        :return: Command header object
        :raises HabCsfParsingError: If the tag is not a known command tag
        """
        header = Header.parse(data, required_tag)
        if header.tag not in CmdTag.tags():
            raise HabCsfParsingError(f"Unknown command tag: 0x{header.tag:02X}")
        return cls(header.tag, header.param, header.length)
