#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause
"""Command Sequence File (CSF) binary.

The CSF starts with the header and the commands (the command area). The data
the commands refer to (SRK table, certificates and signatures) follow the
command area; each command stores the pointer to its data. The blob ends with
zero padding up to the space reserved for the CSF by the boot header.
"""

import logging
from typing import Iterator, Optional, Union

from typing_extensions import Self

from habcsf.crypto.cms import cms_verify
from habcsf.exceptions import (
    HabCsfError,
    HabCsfInternalConsistencyError,
    HabCsfKeyError,
    HabCsfParsingError,
    HabCsfVerificationError,
)
from habcsf.hab.boot_header import BootVectorTable
from habcsf.hab.commands import (
    CmdAuthData,
    CmdBase,
    CmdInstallKey,
    InstallKeyFlagsEnum,
    parse_command,
)
from habcsf.hab.constants import HAB_VERSION, CertFormatEnum, SegmentTag
from habcsf.hab.hab_certificate import HabCertificate
from habcsf.hab.hab_header import Header
from habcsf.hab.hab_signature import Signature
from habcsf.hab.hab_srk import SrkTableData
from habcsf.utils.abstract import BaseClass
from habcsf.utils.misc import extend_block

logger = logging.getLogger(__name__)

CsfRecord = Union[SrkTableData, HabCertificate, Signature]

# ABS flag has the same bit in Install Key and Authenticate Data commands
ABS_FLAG = InstallKeyFlagsEnum.ABS.tag


class CsfImage(BaseClass):
    """CSF binary: header, commands, referenced data and padding."""

    def __init__(self, version: int = HAB_VERSION, base_address: int = 0) -> None:
        """Initialize empty CSF.

        :param version: CSF header version.
        :param base_address: Load address of the CSF; added to the data pointers
            of commands with the ABS flag.
        """
        self._header = Header(SegmentTag.CSF.tag, version)
        self.base_address = base_address
        self._commands: list[CmdBase] = []
        # data referenced by the commands, keyed by offset from the CSF start
        self._cmd_data: dict[int, CsfRecord] = {}
        self.padding_len = 0

    @property
    def version(self) -> int:
        """CSF header version."""
        return self._header.param

    @property
    def commands(self) -> list[CmdBase]:
        """Commands in execution order."""
        return self._commands

    @property
    def header_length(self) -> int:
        """Length of the command area as stored in the CSF header."""
        return self._header.length

    @property
    def cmd_data(self) -> list[tuple[int, CsfRecord]]:
        """Referenced data sorted by offset."""
        return sorted(self._cmd_data.items(), key=lambda item: item[0])

    @property
    def size(self) -> int:
        """Size of the CSF without padding."""
        result = self._header.length
        for offset, record in self._cmd_data.items():
            result = max(result, offset + record.size)
        return result

    @property
    def space(self) -> int:
        """Size of the CSF including padding."""
        return self.size + self.padding_len

    def __len__(self) -> int:
        return len(self._commands)

    def __iter__(self) -> Iterator[CmdBase]:
        return iter(self._commands)

    def __getitem__(self, key: int) -> CmdBase:
        return self._commands[key]

    def __repr__(self) -> str:
        return f"CSF <Commands: {len(self)}, Size: {self.size}, Padding: {self.padding_len}>"

    def __str__(self) -> str:
        msg = f"CSF Version        : {hex(self.version)}\n"
        msg += f"Command area length: {self.header_length}\n"
        msg += f"Number of commands : {len(self)}\n"
        for cmd in self._commands:
            msg += str(cmd) + "\n"
        msg += "[CMD-DATA]\n"
        for offset, record in self.cmd_data:
            msg += f"- OFFSET : {offset:#x}\n"
            msg += str(record)
        msg += f"Padding            : {self.padding_len} bytes\n"
        return msg

    def append_command(self, cmd: CmdBase) -> None:
        """Append command to the command area.

        :param cmd: Install Key or Authenticate Data command.
        """
        self._commands.append(cmd)
        self._header.length += cmd.size

    def record_offset(self, cmd: CmdBase) -> int:
        """Offset of the data referenced by the command from the CSF start."""
        if cmd.flags & ABS_FLAG:
            return cmd.cmd_data_offset - self.base_address
        return cmd.cmd_data_offset

    def set_cmd_data(self, cmd: CmdBase, offset: int, record: CsfRecord) -> None:
        """Place data referenced by the command at the given offset.

        The pointer of the command is updated; the ABS flag of the command
        decides whether the base address is added.

        :param cmd: Command referring to the data.
        :param offset: Offset of the data from the CSF start.
        :param record: Referenced data.
        """
        cmd.cmd_data_offset = offset + (self.base_address if cmd.flags & ABS_FLAG else 0)
        self._cmd_data[offset] = record
        logger.debug(f"{cmd!r}: data {record!r} at offset {offset:#x}")

    def get_cmd_data(self, cmd: CmdBase) -> CsfRecord:
        """Get data referenced by the command.

        :raises HabCsfKeyError: No data at the pointer of the command.
        """
        offset = self.record_offset(cmd)
        if offset not in self._cmd_data:
            raise HabCsfKeyError(f"No data for {cmd!r} at offset {offset:#x}")
        return self._cmd_data[offset]

    def export_commands(self) -> bytes:
        """Export the command area; this is the data signed to authenticate the CSF."""
        data = self._header.export()
        for cmd in self._commands:
            data += cmd.export()
        if len(data) != self._header.length:
            raise HabCsfInternalConsistencyError(
                f"Command area length {len(data)} differs from CSF header length "
                f"{self._header.length}"
            )
        return data

    def export(self) -> bytes:
        """Export the whole CSF including referenced data and padding.

        :raises HabCsfInternalConsistencyError: Referenced data overlap.
        """
        data = self.export_commands()
        for offset, record in self.cmd_data:
            if offset < len(data):
                raise HabCsfInternalConsistencyError(
                    f"{record!r} at offset {offset:#x} overlaps previous data ending at {len(data):#x}"
                )
            data = extend_block(data, offset)
            data += record.export()
        return data + bytes(self.padding_len)

    @classmethod
    def parse(cls, data: bytes, base_address: Optional[int] = None) -> Self:
        """Parse CSF binary.

        :param data: CSF binary including padding.
        :param base_address: Load address of the CSF, needed when the commands use absolute pointers.
        :raises HabCsfParsingError: Malformed CSF.
        :return: Parsed CSF.
        """
        header = Header.parse(data, SegmentTag.CSF.tag)
        if header.length > len(data):
            raise HabCsfParsingError(f"CSF header length {header.length} exceeds data {len(data)}")
        obj = cls(version=header.param, base_address=base_address or 0)
        index = header.size
        while index < header.length:
            try:
                cmd = parse_command(data[index:])
            except HabCsfError as exc:
                raise HabCsfParsingError(
                    f"Failed to parse command at position {index:#x}: {exc.description}"
                ) from exc
            obj.append_command(cmd)
            index += cmd.size
        if obj.header_length != header.length:
            raise HabCsfParsingError(
                f"Commands end at {obj.header_length:#x}, header declares {header.length:#x}"
            )

        if base_address is None and any(cmd.flags & ABS_FLAG for cmd in obj.commands):
            raise HabCsfParsingError("CSF uses absolute pointers; base address is required")

        offsets = sorted(obj.record_offset(cmd) for cmd in obj.commands)
        for cmd in obj.commands:
            offset = obj.record_offset(cmd)
            if not header.length <= offset < len(data):
                raise HabCsfParsingError(f"Data pointer of {cmd!r} points outside of the CSF")
            if offset in obj._cmd_data:
                raise HabCsfParsingError(f"Data at offset {offset:#x} referenced twice")
            obj._cmd_data[offset] = cls._parse_cmd_data(cmd, data, offset, offsets)

        obj.padding_len = len(data) - obj.size
        return obj

    @staticmethod
    def _parse_cmd_data(cmd: CmdBase, data: bytes, offset: int, offsets: list[int]) -> CsfRecord:
        if isinstance(cmd, CmdAuthData):
            return Signature.parse(data[offset:])
        if isinstance(cmd, CmdInstallKey):
            if cmd.certificate_format == CertFormatEnum.SRK:
                end = next((other for other in offsets if other > offset), len(data))
                return SrkTableData.parse(data[offset:end])
            if cmd.certificate_format == CertFormatEnum.X509:
                return HabCertificate.parse(data[offset:])
            raise HabCsfParsingError(f"Unsupported key format in {cmd!r}")
        raise HabCsfParsingError(f"Unsupported command {cmd!r}")

    def _find_key_certificate(self, auth_cmd: CmdAuthData) -> HabCertificate:
        key_cmds = [
            cmd
            for cmd in self._commands[: self._commands.index(auth_cmd)]
            if isinstance(cmd, CmdInstallKey) and cmd.target_index == auth_cmd.key_index
        ]
        if not key_cmds:
            raise HabCsfVerificationError(f"No key installed to index {auth_cmd.key_index}")
        record = self.get_cmd_data(key_cmds[-1])
        if not isinstance(record, HabCertificate):
            raise HabCsfVerificationError(f"Key at index {auth_cmd.key_index} is not a certificate")
        return record

    def verify_signatures(self, image: Optional[bytes] = None) -> int:
        """Verify signatures of all Authenticate Data commands.

        Commands without blocks authenticate the command area. Commands with
        blocks authenticate the image; these are skipped when no image is given.

        :param image: Target image starting with the vector table.
        :raises HabCsfVerificationError: A signature does not verify.
        :return: Number of verified signatures.
        """
        image_address = BootVectorTable.parse(image).self_address if image is not None else 0
        verified = 0
        for cmd in self._commands:
            if not isinstance(cmd, CmdAuthData):
                continue
            certificate = self._find_key_certificate(cmd)
            signature = self.get_cmd_data(cmd)
            if not isinstance(signature, Signature) or not signature.data:
                raise HabCsfVerificationError(f"Missing signature of {cmd!r}")
            if not cmd.blocks:
                payload = self.export_commands()
            elif image is None:
                logger.warning(f"Image not available, signature of {cmd!r} not verified")
                continue
            else:
                payload = b""
                for block in cmd.blocks:
                    start = block.address - image_address
                    if start < 0 or start + block.length > len(image):
                        raise HabCsfVerificationError(f"Block {block} is outside of the image")
                    payload += image[start : start + block.length]
            cms_verify(signature.data, payload, certificate.cert)
            logger.info(f"Signature of {cmd!r} verified")
            verified += 1
        return verified
