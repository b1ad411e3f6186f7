#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause
"""HAB Install Key command."""

from struct import calcsize, pack, unpack_from

from typing_extensions import Self

from habcsf.exceptions import HabCsfError, HabCsfParsingError
from habcsf.hab.commands.commands import CmdBase, check_command_size
from habcsf.hab.constants import CertFormatEnum, CmdTag, EnumAlgorithm
from habcsf.hab.hab_header import CmdHeader
from habcsf.utils.habcsf_enum import HabCsfEnum


class InstallKeyFlagsEnum(HabCsfEnum):
    """Flag bits of the Install Key command."""

    CLR = (0, "CLR", "No flags set")
    ABS = (1, "ABS", "Absolute certificate address")
    CSF = (2, "CSF", "Install CSF key")
    DAT = (4, "DAT", "Key binds to Data Type")
    CFG = (8, "CFG", "Key binds to Configuration")
    FID = (16, "FID", "Key binds to Fabrication UID")
    MID = (32, "MID", "Key binds to Manufacturing ID")
    CID = (64, "CID", "Key binds to Caller ID")
    HSH = (128, "HSH", "Certificate hash present")


class CmdInstallKey(CmdBase):
    """Install Key command.

    Installs the SRK table (source is the SRK index) or a public key
    certificate verified by an already installed key::

    +-------------+--------------+--------------+
    |     tag     |      len     |    flags     |
    +----------+--+-------+------+---+----------+
    | cert_fmt | hash_alg |   src    |   tgt    |
    +----------+----------+----------+----------+
    |                 location                  |
    +-------------------------------------------+

    :cvar CMD_TAG: Command tag identifier for Install Key operations.
    """

    CMD_TAG = CmdTag.INS_KEY
    BODY_FORMAT = ">4BL"
    SIZE = CmdHeader.SIZE + calcsize(BODY_FORMAT)

    def __init__(
        self,
        flags: int = InstallKeyFlagsEnum.CLR.tag,
        cert_fmt: CertFormatEnum = CertFormatEnum.SRK,
        hash_alg: EnumAlgorithm = EnumAlgorithm.ANY,
        src_index: int = 0,
        tgt_index: int = 0,
        location: int = 0,
    ) -> None:
        """Initialize Install Key command.

        :param flags: Bitmask of InstallKeyFlagsEnum values.
        :param cert_fmt: Format of the installed key data.
        :param hash_alg: Hash algorithm of the key data, SHA256 for SRK table.
        :param src_index: Index of the SRK (SRK table) or of the verifying key.
        :param tgt_index: Index the key is installed to.
        :param location: Pointer to the key data, resolved during CSF assembly.
        """
        super().__init__(flags, self.SIZE)
        self.certificate_format = cert_fmt
        self.hash_algorithm = hash_alg
        self.source_index = src_index
        self.target_index = tgt_index
        self.cmd_data_location = location

    @property
    def source_index(self) -> int:
        """Index of the verification key; SRK index for the SRK table (0-3)."""
        return self._src_index

    @source_index.setter
    def source_index(self, value: int) -> None:
        if self.certificate_format == CertFormatEnum.SRK:
            if value not in (0, 1, 2, 3):
                raise HabCsfError(f"Incorrect SRK index value: {value}")
        elif value not in (0, 2, 3, 4, 5):
            raise HabCsfError(f"Incorrect source index value: {value}")
        self._src_index = value

    @property
    def target_index(self) -> int:
        """Index the key is installed to (0-5)."""
        return self._tgt_index

    @target_index.setter
    def target_index(self, value: int) -> None:
        if value not in (0, 1, 2, 3, 4, 5):
            raise HabCsfError(f"Incorrect key index: {value}")
        self._tgt_index = value

    @property
    def cmd_data_offset(self) -> int:
        """Pointer to the installed key data."""
        return self.cmd_data_location

    @cmd_data_offset.setter
    def cmd_data_offset(self, value: int) -> None:
        self.cmd_data_location = value

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__} <{self.certificate_format.label}, "
            f"{self.source_index} -> {self.target_index}, @0x{self.cmd_data_location:X}>"
        )

    def __str__(self) -> str:
        flags = [flag.label for flag in InstallKeyFlagsEnum if flag.tag & self.flags]
        msg = super().__str__()
        msg += f" Flag        : 0x{self.flags:02X} ({'|'.join(flags) or 'CLR'})\n"
        msg += f" CertFormat  : {self.certificate_format.label}\n"
        msg += f" Algorithm   : {self.hash_algorithm.label}\n"
        msg += f" SrcKeyIdx   : {self.source_index}\n"
        msg += f" TgtKeyIdx   : {self.target_index}\n"
        msg += f" Location    : 0x{self.cmd_data_location:08X}\n"
        return msg

    def export(self) -> bytes:
        """Export command to binary form."""
        raw_data = super().export()
        raw_data += pack(
            self.BODY_FORMAT,
            self.certificate_format.tag,
            self.hash_algorithm.tag,
            self.source_index,
            self.target_index,
            self.cmd_data_location,
        )
        return raw_data

    @classmethod
    def parse(cls, data: bytes) -> Self:
        """Parse Install Key command from binary data.

        :param data: Binary data starting with the command.
        :raises HabCsfParsingError: Data do not contain valid Install Key command.
        :return: Parsed command.
        """
        header = CmdHeader.parse(data, CmdTag.INS_KEY.tag)
        if header.length != cls.SIZE:
            raise HabCsfParsingError(f"Unsupported Install Key command length: {header.length}")
        check_command_size(cls.__name__, data, cls.SIZE)
        protocol, algorithm, src_index, tgt_index, location = unpack_from(
            cls.BODY_FORMAT, data, CmdHeader.SIZE
        )
        try:
            return cls(
                header.param,
                CertFormatEnum.from_tag(protocol),
                EnumAlgorithm.from_tag(algorithm),
                src_index,
                tgt_index,
                location,
            )
        except HabCsfError as exc:
            raise HabCsfParsingError(f"Invalid Install Key command: {exc.description}") from exc
