#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Base of HAB CSF commands and the command parser."""

from dataclasses import dataclass
from typing import Optional

from habcsf.exceptions import HabCsfParsingError
from habcsf.hab.constants import CmdTag
from habcsf.hab.hab_header import CmdHeader
from habcsf.utils.abstract import BaseClass


@dataclass(frozen=True)
class ImageBlock:
    """Memory block authenticated by the Authenticate Data command."""

    address: int
    length: int

    def __str__(self) -> str:
        return f"[0x{self.address:08X}, 0x{self.address + self.length:08X}) {self.length} B"


class CmdBase(BaseClass):
    """Base class for all HAB commands.

    A command referencing out-of-line data (key table, certificate or
    signature) keeps the pointer to that data in ``cmd_data_offset``; the
    pointer is written by the CSF assembler once the layout is known.

    :cvar CMD_TAG: Command tag that identifies the specific command type.
    """

    CMD_TAG: CmdTag

    def __init__(self, flags: int, length: Optional[int] = None) -> None:
        """Initialize HAB command with header parameters.

        :param flags: Command flags stored in the header param byte.
        :param length: Length of the binary command representation in bytes.
        """
        self._header = CmdHeader(self.CMD_TAG, flags, length)

    @property
    def size(self) -> int:
        """Size of the command in bytes as declared in its header."""
        return self._header.length

    @property
    def tag(self) -> int:
        """Command tag value."""
        return self._header.tag

    @property
    def flags(self) -> int:
        """Command flags bitmask."""
        return self._header.param

    @flags.setter
    def flags(self, value: int) -> None:
        self._header.param = value

    @property
    def cmd_data_offset(self) -> int:
        """Pointer to the additional data referenced by this command."""
        raise NotImplementedError("Derived class has to implement this property.")

    def __repr__(self) -> str:
        return f"Command: {CmdTag.get_description(self.tag)}"

    def __str__(self) -> str:
        return f'Command "{CmdTag.get_description(self.tag)}"   [Tag={self.tag:#04x}, Length={self.size}]\n'

    def export(self) -> bytes:
        """Export command header to binary form; derived classes append the body."""
        return self._header.export()


def parse_command(data: bytes) -> CmdBase:
    """Parse a CSF command from binary data.

    :param data: Binary data starting with a command.
    :raises HabCsfParsingError: Unknown command tag.
    :return: Parsed command object.
    """
    # pylint: disable=import-outside-toplevel  # circular dependency
    from habcsf.hab.commands.cmd_auth_data import CmdAuthData
    from habcsf.hab.commands.cmd_install_key import CmdInstallKey

    header = CmdHeader.parse(data)
    parsers: dict[int, type[CmdBase]] = {
        CmdTag.INS_KEY.tag: CmdInstallKey,
        CmdTag.AUT_DAT.tag: CmdAuthData,
    }
    if header.tag not in parsers:
        raise HabCsfParsingError(f"Unsupported command tag: 0x{header.tag:02X}")
    return parsers[header.tag].parse(data)


def check_command_size(name: str, data: bytes, length: int) -> None:
    """Check that data contain the whole command of the given length.

    :raises HabCsfParsingError: Data are shorter than the command.
    """
    if len(data) < length:
        raise HabCsfParsingError(f"Invalid input data size for {name}: ({len(data)} < {length}).")
