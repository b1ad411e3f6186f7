#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause
"""Boot header of HAB images: Image Vector Table and Boot Data.

The boot ROM locates an image by its Image Vector Table (IVT). The IVT points
to the Boot Data record which declares the whole on-device image length,
including the leading gap on the boot medium and the space reserved for the
CSF after the image. The parser recovers from these the exact size the CSF
blob has to occupy.
"""

import logging
from dataclasses import dataclass
from struct import calcsize, pack, unpack_from

from typing_extensions import Self

from habcsf.exceptions import HabCsfFormatError, HabCsfParsingError
from habcsf.hab.constants import SegmentTag
from habcsf.hab.hab_header import Header
from habcsf.utils.abstract import BaseClass
from habcsf.utils.habcsf_enum import HabCsfEnum
from habcsf.utils.misc import size_fmt

logger = logging.getLogger(__name__)


class BootMedia(HabCsfEnum):
    """Boot media with their offset of the IVT from the start of the medium."""

    SD = (0, "SD", "SD card")
    MMC = (1, "MMC", "eMMC")
    NAND = (2, "NAND", "Raw NAND flash")
    SPI_NOR = (3, "SPI_NOR", "Serial NOR flash (eCSPI)")
    FLEXSPI_NOR = (4, "FLEXSPI_NOR", "FlexSPI NOR flash")
    SERIAL = (5, "SERIAL", "Serial downloader (image loaded to RAM as is)")

    @property
    def ivt_offset(self) -> int:
        """Fixed gap between the start of the medium and the vector table."""
        return _IVT_OFFSETS[self.label]


_IVT_OFFSETS = {
    "SD": 0x400,
    "MMC": 0x400,
    "NAND": 0x400,
    "SPI_NOR": 0x400,
    "FLEXSPI_NOR": 0x1000,
    "SERIAL": 0x0,
}


class BootVectorTable(BaseClass):
    """Image Vector Table (IVT).

    The header is big-endian like every HAB header, the addresses are
    little-endian 32-bit words.

    :cvar FORMAT: Binary format of the IVT body following the header.
    :cvar SIZE: Total size of the IVT including header.
    """

    FORMAT = "<7L"
    SIZE = Header.SIZE + calcsize(FORMAT)

    def __init__(
        self,
        entry_point: int = 0,
        dcd_address: int = 0,
        boot_data_address: int = 0,
        self_address: int = 0,
        csf_address: int = 0,
        version: int = 0x40,
    ) -> None:
        """Initialize IVT.

        :param entry_point: Absolute address of the application entry point.
        :param dcd_address: Absolute address of the DCD, zero when not present.
        :param boot_data_address: Absolute address of the Boot Data record.
        :param self_address: Absolute address of this IVT.
        :param csf_address: Absolute address of the CSF, zero when not signed.
        :param version: IVT version, packed major/minor nibbles.
        """
        self._header = Header(SegmentTag.IVT.tag, version, self.SIZE)
        self.entry_point = entry_point
        self.dcd_address = dcd_address
        self.boot_data_address = boot_data_address
        self.self_address = self_address
        self.csf_address = csf_address
        self.reserved1 = 0
        self.reserved2 = 0

    @property
    def version(self) -> int:
        """Version of IVT and image format."""
        return self._header.param

    @property
    def boot_data_offset(self) -> int:
        """Offset of Boot Data record relative to the IVT."""
        return self.boot_data_address - self.self_address

    def __repr__(self) -> str:
        return (
            f"IVT <IVT:0x{self.self_address:X}, BDT:0x{self.boot_data_address:X},"
            f" DCD:0x{self.dcd_address:X}, APP:0x{self.entry_point:X}, CSF:0x{self.csf_address:X}>"
        )

    def __str__(self) -> str:
        return (
            f" Format version   : 0x{self.version:02X}\n"
            f" IVT start address: 0x{self.self_address:08X}\n"
            f" BDT start address: 0x{self.boot_data_address:08X}\n"
            f" DCD start address: 0x{self.dcd_address:08X}\n"
            f" APP entry point  : 0x{self.entry_point:08X}\n"
            f" CSF start address: 0x{self.csf_address:08X}\n"
        )

    def export(self) -> bytes:
        """Export IVT to binary representation."""
        return self._header.export() + pack(
            self.FORMAT,
            self.entry_point,
            self.reserved1,
            self.dcd_address,
            self.boot_data_address,
            self.self_address,
            self.csf_address,
            self.reserved2,
        )

    @classmethod
    def parse(cls, data: bytes) -> Self:
        """Parse IVT from the beginning of data.

        :param data: Image data starting with IVT.
        :raises HabCsfFormatError: Data do not start with valid IVT.
        :return: Parsed IVT.
        """
        if len(data) < cls.SIZE:
            raise HabCsfFormatError(
                f"Image is too small to contain vector table: ({len(data)} < {cls.SIZE})"
            )
        try:
            header = Header.parse(data, SegmentTag.IVT.tag)
        except HabCsfParsingError as exc:
            raise HabCsfFormatError(
                f"Image does not start with boot vector table: {exc.description}"
            ) from exc
        obj = cls(version=header.param)
        (
            obj.entry_point,
            obj.reserved1,
            obj.dcd_address,
            obj.boot_data_address,
            obj.self_address,
            obj.csf_address,
            obj.reserved2,
        ) = unpack_from(cls.FORMAT, data, Header.SIZE)
        if header.length != cls.SIZE:
            logger.warning(f"Unexpected IVT length {header.length}, expected {cls.SIZE}")
        return obj


class BootData(BaseClass):
    """Boot Data record referenced by the IVT."""

    FORMAT = "<3L"
    SIZE = calcsize(FORMAT)

    def __init__(self, start_address: int = 0, image_length: int = 0, plugin: int = 0) -> None:
        """Initialize Boot Data.

        :param start_address: Absolute address of the start of the image on the medium.
        :param image_length: Whole image length including CSF space.
        :param plugin: Plugin flag, zero for normal images.
        """
        self.start_address = start_address
        self.image_length = image_length
        self.plugin = plugin

    def __repr__(self) -> str:
        return (
            f"BDT <ADDR: 0x{self.start_address:X}, LEN: {self.image_length} Bytes"
            f", Plugin: {self.plugin}>"
        )

    def __str__(self) -> str:
        return (
            f" Start      : 0x{self.start_address:08X}\n"
            f" App Length : {size_fmt(self.image_length)} ({self.image_length} Bytes)\n"
            f" Plugin     : {'YES' if self.plugin else 'NO'}\n"
        )

    def export(self) -> bytes:
        """Export Boot Data to binary representation."""
        return pack(self.FORMAT, self.start_address, self.image_length, self.plugin)

    @classmethod
    def parse(cls, data: bytes) -> Self:
        """Parse Boot Data from the beginning of data.

        :raises HabCsfFormatError: Not enough data.
        """
        if len(data) < cls.SIZE:
            raise HabCsfFormatError(f"Not enough data for boot data: ({len(data)} < {cls.SIZE})")
        return cls(*unpack_from(cls.FORMAT, data))


@dataclass
class BootHeaderInfo:
    """Result of the boot header parsing.

    ``required_csf_length`` may be negative when the boot data declares less
    space than the image file already occupies; no CSF fits then.
    """

    ivt: BootVectorTable
    boot_data: BootData
    image_length: int
    leading_offset: int

    @property
    def self_address(self) -> int:
        """Load address of the vector table, start of the authenticated image."""
        return self.ivt.self_address

    @property
    def csf_address(self) -> int:
        """Load address of the CSF."""
        return self.ivt.csf_address

    @property
    def required_csf_length(self) -> int:
        """Exact size the assembled CSF has to occupy."""
        return self.boot_data.image_length - self.image_length - self.leading_offset

    def __str__(self) -> str:
        msg = "Image Vector Table:\n"
        msg += str(self.ivt)
        msg += "Boot Data:\n"
        msg += str(self.boot_data)
        msg += f"Image file length  : {self.image_length} (0x{self.image_length:X})\n"
        msg += f"Leading offset     : 0x{self.leading_offset:X}\n"
        msg += f"Required CSF length: {self.required_csf_length} (0x{self.required_csf_length:X})\n"
        return msg


def parse_boot_header(data: bytes, boot_media: BootMedia = BootMedia.SD) -> BootHeaderInfo:
    """Parse boot header of the target image.

    :param data: Whole target image file, starting with the IVT.
    :param boot_media: Boot medium; defines the gap before the IVT.
    :raises HabCsfFormatError: Image does not start with IVT or Boot Data is outside of the image.
    :return: Parsed boot header with the required CSF length.
    """
    ivt = BootVectorTable.parse(data)
    offset = ivt.boot_data_offset
    if offset < 0 or offset + BootData.SIZE > len(data):
        raise HabCsfFormatError(
            f"Boot data offset {offset:#x} (0x{ivt.boot_data_address:X} - "
            f"0x{ivt.self_address:X}) is outside of the image of {len(data)} bytes"
        )
    boot_data = BootData.parse(data[offset:])
    info = BootHeaderInfo(ivt, boot_data, len(data), boot_media.ivt_offset)
    logger.debug(f"Parsed boot header: {ivt!r}, {boot_data!r}")
    logger.info(f"Required CSF length: {info.required_csf_length} bytes")
    return info
