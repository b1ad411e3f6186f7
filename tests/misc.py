#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Helpers creating test inputs: certificates and boot images."""

from datetime import datetime, timedelta, timezone

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.x509.oid import NameOID

from habcsf.crypto.keys import PrivateKey
from habcsf.hab.boot_header import BootData, BootMedia, BootVectorTable

IMAGE_ADDRESS = 0x87800000
SRK_TABLE = bytes([0xD7, 0x04, 0x04, 0x43]) + bytes(range(256)) * 4


def generate_certificate(private_key: PrivateKey, common_name: str) -> x509.Certificate:
    """Create self-signed certificate for the key."""
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.now(timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=365))
        .sign(private_key, hashes.SHA256())
    )


def create_boot_image(
    app_length: int = 0x1000,
    csf_space: int = 0x2000,
    self_address: int = IMAGE_ADDRESS,
    boot_media: BootMedia = BootMedia.SD,
) -> bytes:
    """Create image with vector table and boot data reserving csf_space bytes for the CSF.

    :param app_length: Length of the image file.
    :param csf_space: Space reserved for the CSF after the image.
    :param self_address: Load address of the vector table.
    :param boot_media: Boot media defining the gap before the vector table.
    :return: Image file data.
    """
    ivt = BootVectorTable(
        entry_point=self_address + 0x100,
        boot_data_address=self_address + BootVectorTable.SIZE,
        self_address=self_address,
        csf_address=self_address + app_length,
    )
    boot_data = BootData(
        start_address=self_address - boot_media.ivt_offset,
        image_length=boot_media.ivt_offset + app_length + csf_space,
    )
    header = ivt.export() + boot_data.export()
    body = bytes(i & 0xFF for i in range(app_length - len(header)))
    return header + body
