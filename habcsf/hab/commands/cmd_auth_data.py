#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause
"""HAB Authenticate Data command."""

from struct import calcsize, pack, unpack_from
from typing import Iterable, Iterator, Optional

from typing_extensions import Self

from habcsf.exceptions import HabCsfError, HabCsfParsingError
from habcsf.hab.commands.commands import CmdBase, ImageBlock, check_command_size
from habcsf.hab.constants import CertFormatEnum, CmdTag, EngineEnum
from habcsf.hab.hab_header import CmdHeader
from habcsf.utils.habcsf_enum import HabCsfEnum


class AuthDataFlagsEnum(HabCsfEnum):
    """Flag bits of the Authenticate Data command."""

    CLR = (0, "CLR", "No flags set")
    ABS = (1, "ABS", "Absolute signature address")


class CmdAuthData(CmdBase):
    """Authenticate Data command.

    Verifies the signature referenced by ``aut_start`` with the key installed
    at ``key_index``. Without blocks the signed data is the CSF itself,
    otherwise the blocks list the signed memory regions::

        +--------------+---------------+--------------+
        |     tag      |      len      |    flags     |
        +-----------+--+-------+-------+-+------------+
        | key_index | sig_fmt  | engine  | engine_cfg |
        +-----------+----------+---------+------------+
        |                  aut_start                  |
        +---------------------------------------------+
        |                 [blk_start]                 |
        +---------------------------------------------+
        |                 [blk_bytes]                 |
        +---------------------------------------------+

    :cvar CMD_TAG: Command tag identifier for authenticate data operations.
    """

    CMD_TAG = CmdTag.AUT_DAT
    BODY_FORMAT = ">4BL"
    BLOCK_FORMAT = ">2L"
    BASE_SIZE = CmdHeader.SIZE + calcsize(BODY_FORMAT)

    def __init__(
        self,
        flags: int = AuthDataFlagsEnum.CLR.tag,
        key_index: int = 1,
        sig_fmt: CertFormatEnum = CertFormatEnum.CMS,
        engine: EngineEnum = EngineEnum.ANY,
        engine_cfg: int = 0,
        location: int = 0,
        blocks: Optional[Iterable[ImageBlock]] = None,
    ) -> None:
        """Initialize the Authenticate Data command.

        :param flags: Bitmask of AuthDataFlagsEnum values.
        :param key_index: Index of the installed key verifying the signature.
        :param sig_fmt: Format of the signature.
        :param engine: Engine executing the authentication.
        :param engine_cfg: Engine specific configuration.
        :param location: Pointer to the signature, resolved during CSF assembly.
        :param blocks: Authenticated memory blocks.
        """
        super().__init__(flags, self.BASE_SIZE)
        self.key_index = key_index
        self.sig_format = sig_fmt
        self.engine = engine
        self.engine_cfg = engine_cfg
        self.location = location
        self._blocks: list[ImageBlock] = []
        for block in blocks or []:
            self.append_block(block)

    @property
    def key_index(self) -> int:
        """Index of the key verifying the signature (0-5)."""
        return self._key_index

    @key_index.setter
    def key_index(self, value: int) -> None:
        if value not in (0, 1, 2, 3, 4, 5):
            raise HabCsfError(f"Incorrect key index: {value}")
        self._key_index = value

    @property
    def engine(self) -> EngineEnum:
        """Engine executing the authentication."""
        return self._engine

    @engine.setter
    def engine(self, value: EngineEnum) -> None:
        self._engine = value

    @property
    def engine_cfg(self) -> int:
        """Engine configuration flags."""
        return self._engine_cfg

    @engine_cfg.setter
    def engine_cfg(self, value: int) -> None:
        if value and self._engine == EngineEnum.ANY:
            raise HabCsfError("Engine configuration not allowed for ANY engine")
        self._engine_cfg = value

    @property
    def blocks(self) -> list[ImageBlock]:
        """Authenticated memory blocks."""
        return list(self._blocks)

    def append_block(self, block: ImageBlock) -> None:
        """Append an authenticated memory block and update the command length."""
        self._blocks.append(block)
        self._header.length = self.BASE_SIZE + len(self._blocks) * calcsize(self.BLOCK_FORMAT)

    def __iter__(self) -> Iterator[ImageBlock]:
        return iter(self._blocks)

    def __len__(self) -> int:
        return len(self._blocks)

    @property
    def cmd_data_offset(self) -> int:
        """Pointer to the signature."""
        return self.location

    @cmd_data_offset.setter
    def cmd_data_offset(self, value: int) -> None:
        self.location = value

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__} <key {self.key_index}, {self.sig_format.label}, "
            f"@0x{self.location:X}, blocks: {len(self._blocks)}>"
        )

    def __str__(self) -> str:
        flags = [flag.label for flag in AuthDataFlagsEnum if flag.tag & self.flags]
        msg = super().__str__()
        msg += f" Flag      : 0x{self.flags:02X} ({'|'.join(flags) or 'CLR'})\n"
        msg += f" Key index : {self.key_index}\n"
        msg += f" Sig format: {self.sig_format.label}\n"
        msg += f" Engine    : {self.engine.label}\n"
        msg += f" Engine cfg: 0x{self.engine_cfg:02X}\n"
        msg += f" Location  : 0x{self.location:08X}\n"
        for block in self._blocks:
            msg += f" Block     : {block}\n"
        return msg

    def export(self) -> bytes:
        """Export command to binary form."""
        raw_data = super().export()
        raw_data += pack(
            self.BODY_FORMAT,
            self.key_index,
            self.sig_format.tag,
            self.engine.tag,
            self.engine_cfg,
            self.location,
        )
        for block in self._blocks:
            raw_data += pack(self.BLOCK_FORMAT, block.address, block.length)
        return raw_data

    @classmethod
    def parse(cls, data: bytes) -> Self:
        """Parse Authenticate Data command from binary data.

        :param data: Binary data starting with the command.
        :raises HabCsfParsingError: Data do not contain valid Authenticate Data command.
        :return: Parsed command.
        """
        header = CmdHeader.parse(data, CmdTag.AUT_DAT.tag)
        block_size = calcsize(cls.BLOCK_FORMAT)
        if header.length < cls.BASE_SIZE or (header.length - cls.BASE_SIZE) % block_size:
            raise HabCsfParsingError(
                f"Unsupported Authenticate Data command length: {header.length}"
            )
        check_command_size(cls.__name__, data, header.length)
        key_index, sig_fmt, engine, engine_cfg, location = unpack_from(
            cls.BODY_FORMAT, data, CmdHeader.SIZE
        )
        blocks = [
            ImageBlock(*unpack_from(cls.BLOCK_FORMAT, data, offset))
            for offset in range(cls.BASE_SIZE, header.length, block_size)
        ]
        try:
            return cls(
                header.param,
                key_index,
                CertFormatEnum.from_tag(sig_fmt),
                EngineEnum.from_tag(engine),
                engine_cfg,
                location,
                blocks,
            )
        except HabCsfError as exc:
            raise HabCsfParsingError(
                f"Invalid Authenticate Data command: {exc.description}"
            ) from exc
