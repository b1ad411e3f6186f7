#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause
"""Assembler of the signed CSF.

The CSF executes a fixed chain of trust:

1. Install SRK: install the selected key of the SRK table (fused hash).
2. Install CSFK: install the CSF key certificate verified by the SRK.
3. Authenticate CSF: verify the command area with the CSF key.
4. Install image key: install the image key certificate verified by the SRK.
5. Authenticate image: verify the whole image with the image key.

The data the commands point to follow the command area in the order SRK
table, CSF certificate, CSF signature, image certificate, image signature.
The CSF signature covers the command area including the pointers, so the
pointers are resolved with the length of the CSF signature record known in
advance and the command area is signed afterwards.
"""

import logging
from typing import Optional

from habcsf.crypto.cms import sign
from habcsf.crypto.keys import SigningCredentials
from habcsf.exceptions import (
    HabCsfInternalConsistencyError,
    HabCsfSizeOverflowError,
    HabCsfValueError,
)
from habcsf.hab.boot_header import BootHeaderInfo, BootMedia, parse_boot_header
from habcsf.hab.commands import (
    AuthDataFlagsEnum,
    CmdAuthData,
    CmdBase,
    CmdInstallKey,
    ImageBlock,
    InstallKeyFlagsEnum,
)
from habcsf.hab.constants import HAB_VERSION, CertFormatEnum, EngineEnum, EnumAlgorithm
from habcsf.hab.csf_image import ABS_FLAG, CsfImage, CsfRecord
from habcsf.hab.hab_certificate import HabCertificate
from habcsf.hab.hab_signature import Signature
from habcsf.hab.hab_srk import SrkTableData
from habcsf.utils.habcsf_enum import HabCsfEnum

logger = logging.getLogger(__name__)

SRK_INDEX_RANGE = range(1, 5)
CSF_KEY_INDEX = 1
IMAGE_KEY_INDEX = 2


class PointerMode(HabCsfEnum):
    """Base of the data pointers stored in Install Key and Authenticate Data commands."""

    CSF_RELATIVE = (0, "CSF_RELATIVE", "Offsets from the start of the CSF")
    ABSOLUTE = (1, "ABSOLUTE", "CSF load address added to the offsets, ABS flag set")


def build_install_srk(srk_index: int) -> CmdInstallKey:
    """Install the SRK selected by 1-based index from the SRK table.

    :param srk_index: 1-based index of the SRK (1-4).
    :raises HabCsfValueError: Index out of range.
    """
    if srk_index not in SRK_INDEX_RANGE:
        raise HabCsfValueError(f"SRK index must be 1-4, got {srk_index}")
    return CmdInstallKey(
        flags=InstallKeyFlagsEnum.CLR.tag,
        cert_fmt=CertFormatEnum.SRK,
        hash_alg=EnumAlgorithm.SHA256,
        src_index=srk_index - 1,
        tgt_index=0,
    )


def build_install_csfk() -> CmdInstallKey:
    """Install the CSF key certificate, verified by the SRK."""
    return CmdInstallKey(
        flags=InstallKeyFlagsEnum.CSF.tag,
        cert_fmt=CertFormatEnum.X509,
        hash_alg=EnumAlgorithm.ANY,
        src_index=0,
        tgt_index=CSF_KEY_INDEX,
    )


def build_auth_csf() -> CmdAuthData:
    """Authenticate the command area with the CSF key."""
    return CmdAuthData(
        flags=AuthDataFlagsEnum.CLR.tag,
        key_index=CSF_KEY_INDEX,
        sig_fmt=CertFormatEnum.CMS,
        engine=EngineEnum.ANY,
        engine_cfg=0,
    )


def build_install_image_key() -> CmdInstallKey:
    """Install the image key certificate, verified by the SRK."""
    return CmdInstallKey(
        flags=InstallKeyFlagsEnum.CLR.tag,
        cert_fmt=CertFormatEnum.X509,
        hash_alg=EnumAlgorithm.ANY,
        src_index=0,
        tgt_index=IMAGE_KEY_INDEX,
    )


def build_auth_image(self_address: int, image_length: int) -> CmdAuthData:
    """Authenticate the whole image with the image key.

    :param self_address: Load address of the vector table, start of the image.
    :param image_length: Length of the image file.
    """
    return CmdAuthData(
        flags=AuthDataFlagsEnum.CLR.tag,
        key_index=IMAGE_KEY_INDEX,
        sig_fmt=CertFormatEnum.CMS,
        engine=EngineEnum.ANY,
        engine_cfg=0,
        blocks=[ImageBlock(self_address, image_length)],
    )


class CsfBuilder:
    """Builder of the signed CSF for one target image.

    :cvar MAX_SIGN_ATTEMPTS: Number of CSF signing attempts to hit the reserved signature length.
    """

    MAX_SIGN_ATTEMPTS = 16

    def __init__(
        self,
        csf_credentials: SigningCredentials,
        img_credentials: SigningCredentials,
        srk_table: bytes,
        srk_index: int,
        pointer_mode: PointerMode = PointerMode.CSF_RELATIVE,
        version: int = HAB_VERSION,
    ) -> None:
        """Initialize the builder.

        :param csf_credentials: Certificate and key signing the command area.
        :param img_credentials: Certificate and key signing the image.
        :param srk_table: SRK table created by an external tool.
        :param srk_index: 1-based index of the SRK in the table (1-4).
        :param pointer_mode: Base of the data pointers.
        :param version: Version of the CSF header and of the certificate and signature records.
        :raises HabCsfValueError: SRK index out of range or empty SRK table.
        """
        if srk_index not in SRK_INDEX_RANGE:
            raise HabCsfValueError(f"SRK index must be 1-4, got {srk_index}")
        self.csf_credentials = csf_credentials
        self.img_credentials = img_credentials
        self.srk_table = SrkTableData(srk_table)
        self.srk_index = srk_index
        self.pointer_mode = pointer_mode
        self.version = version

    def _create_commands(self, boot_header: BootHeaderInfo) -> list[CmdBase]:
        commands: list[CmdBase] = [
            build_install_srk(self.srk_index),
            build_install_csfk(),
            build_auth_csf(),
            build_install_image_key(),
            build_auth_image(boot_header.self_address, boot_header.image_length),
        ]
        if self.pointer_mode == PointerMode.ABSOLUTE:
            for cmd in commands:
                cmd.flags |= ABS_FLAG
        return commands

    @staticmethod
    def _layout(csf: CsfImage, records: list[tuple[CmdBase, CsfRecord]]) -> int:
        """Place the records one after another behind the command area.

        :return: Offset of the end of the last record.
        """
        offset = csf.header_length
        for cmd, record in records:
            csf.set_cmd_data(cmd, offset, record)
            offset += record.size
        return offset

    def _sign_csf(
        self, csf: CsfImage, records: list[tuple[CmdBase, CsfRecord]], reserved: int
    ) -> Signature:
        """Sign the command area with the pointers resolved.

        The pointers behind the CSF signature depend on the signature record
        length; signing repeats until the signature fits the reserved length.
        """
        self._layout(csf, records)
        cmd_area = csf.export_commands()
        for attempt in range(1, self.MAX_SIGN_ATTEMPTS + 1):
            signature = Signature(self.version, sign(self.csf_credentials, cmd_area))
            if signature.size == reserved:
                logger.debug(f"CSF signed in attempt {attempt}, signature record {reserved} bytes")
                return signature
            logger.debug(
                f"CSF signature record has {signature.size} bytes, {reserved} reserved; signing again"
            )
        raise HabCsfInternalConsistencyError(
            f"Length of CSF signature record did not settle at {reserved} bytes "
            f"in {self.MAX_SIGN_ATTEMPTS} attempts"
        )

    def build_csf(self, image: bytes, boot_header: BootHeaderInfo) -> CsfImage:
        """Create the signed CSF without padding.

        :param image: Target image file data.
        :param boot_header: Parsed boot header of the image.
        :return: CSF with all pointers resolved and signatures filled.
        """
        base_address = boot_header.csf_address if self.pointer_mode == PointerMode.ABSOLUTE else 0
        csf = CsfImage(self.version, base_address)
        commands = self._create_commands(boot_header)
        for cmd in commands:
            csf.append_command(cmd)
        logger.debug(f"Command area length: {csf.header_length}")

        img_signature = Signature(self.version, sign(self.img_credentials, image))
        # provisional signature of the command area defines the reserved signature length
        csf_signature = Signature(self.version, sign(self.csf_credentials, csf.export_commands()))
        records: list[tuple[CmdBase, CsfRecord]] = [
            (commands[0], self.srk_table),
            (commands[1], HabCertificate(self.csf_credentials.certificate, self.version)),
            (commands[2], csf_signature),
            (commands[3], HabCertificate(self.img_credentials.certificate, self.version)),
            (commands[4], img_signature),
        ]
        records[2] = (commands[2], self._sign_csf(csf, records, csf_signature.size))
        end = self._layout(csf, records)
        logger.debug(f"CSF data end at offset {end:#x}")
        return csf

    def build(self, image: bytes, boot_header: Optional[BootHeaderInfo] = None) -> bytes:
        """Create the signed CSF padded to the length reserved by the boot header.

        :param image: Target image file data.
        :param boot_header: Parsed boot header; parsed from the image for SD boot media when not given.
        :raises HabCsfSizeOverflowError: CSF does not fit into the reserved space.
        :raises HabCsfInternalConsistencyError: Length of the padded CSF differs from the reserved space.
        :return: CSF binary.
        """
        if boot_header is None:
            boot_header = parse_boot_header(image, BootMedia.SD)
        required = boot_header.required_csf_length
        csf = self.build_csf(image, boot_header)
        if csf.size > required:
            raise HabCsfSizeOverflowError(required, csf.size)
        csf.padding_len = required - csf.size
        logger.debug(f"CSF padding: {csf.padding_len} bytes")
        data = csf.export()
        if len(data) != required:
            raise HabCsfInternalConsistencyError(
                f"CSF length {len(data)} differs from required length {required} "
                f"(size {csf.size}, padding {csf.padding_len})"
            )
        logger.info(f"CSF created: {csf.size} bytes of data, {csf.padding_len} bytes of padding")
        return data


def build_signed_csf(
    image: bytes,
    csf_credentials: SigningCredentials,
    img_credentials: SigningCredentials,
    srk_table: bytes,
    srk_index: int,
    boot_media: BootMedia = BootMedia.SD,
    pointer_mode: PointerMode = PointerMode.CSF_RELATIVE,
) -> bytes:
    """Parse the boot header of the image and create the signed CSF for it.

    :param image: Target image starting with the vector table.
    :param csf_credentials: Certificate and key signing the command area.
    :param img_credentials: Certificate and key signing the image.
    :param srk_table: SRK table created by an external tool.
    :param srk_index: 1-based index of the SRK (1-4).
    :param boot_media: Boot medium defining the gap before the vector table.
    :param pointer_mode: Base of the data pointers.
    :return: CSF binary of the length reserved by the boot header.
    """
    boot_header = parse_boot_header(image, boot_media)
    builder = CsfBuilder(csf_credentials, img_credentials, srk_table, srk_index, pointer_mode)
    return builder.build(image, boot_header)
