#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause
"""CSF binary model tests."""

import pytest

from habcsf.crypto.keys import SigningCredentials
from habcsf.exceptions import (
    HabCsfInternalConsistencyError,
    HabCsfKeyError,
    HabCsfParsingError,
    HabCsfVerificationError,
)
from habcsf.hab.commands import CmdAuthData, CmdInstallKey, InstallKeyFlagsEnum
from habcsf.hab.constants import CertFormatEnum
from habcsf.hab.csf_builder import CsfBuilder
from habcsf.hab.csf_image import CsfImage
from habcsf.hab.hab_certificate import HabCertificate
from habcsf.hab.hab_signature import Signature
from habcsf.hab.hab_srk import SrkTableData
from tests.misc import SRK_TABLE, create_boot_image


@pytest.fixture(scope="module")
def csf_data(csf_credentials: SigningCredentials, img_credentials: SigningCredentials) -> bytes:
    """Signed CSF for the default test image."""
    builder = CsfBuilder(csf_credentials, img_credentials, SRK_TABLE, 3)
    return builder.build(create_boot_image())


def test_csf_parse(csf_data: bytes) -> None:
    """Parsed CSF describes the fixed chain."""
    csf = CsfImage.parse(csf_data)
    assert len(csf) == 5
    assert csf.version == 0x40
    assert csf.space == len(csf_data)
    assert csf[0].source_index == 2
    srk = csf.get_cmd_data(csf[0])
    assert isinstance(srk, SrkTableData)
    assert srk.data == SRK_TABLE
    output = str(csf)
    assert "SRK Table" in output
    assert "CSF1_1_sha256_2048_65537_v3_usr" in output
    assert "IMG1_1_sha256_2048_65537_v3_usr" in output
    assert f"Padding            : {csf.padding_len} bytes" in output


def test_csf_parse_export(csf_data: bytes) -> None:
    """Export of the parsed CSF reproduces the binary."""
    assert CsfImage.parse(csf_data).export() == csf_data


def test_csf_parse_wrong_tag(csf_data: bytes) -> None:
    """CSF must start with the CSF header."""
    with pytest.raises(HabCsfParsingError):
        CsfImage.parse(b"\xd1" + csf_data[1:])


def test_csf_parse_pointer_outside(csf_data: bytes) -> None:
    """Data pointer outside of the CSF is rejected."""
    data = bytearray(csf_data)
    # data pointer of the first command
    data[12:16] = (len(csf_data) + 0x100).to_bytes(4, "big")
    with pytest.raises(HabCsfParsingError):
        CsfImage.parse(bytes(data))


def test_csf_parse_truncated_commands(csf_data: bytes) -> None:
    """Header length must end on a command boundary."""
    data = bytearray(csf_data)
    data[1:3] = (70).to_bytes(2, "big")
    with pytest.raises(HabCsfParsingError):
        CsfImage.parse(bytes(data))


def test_csf_manual_layout(csf_credentials: SigningCredentials) -> None:
    """Records are placed at the offsets the commands point to."""
    csf = CsfImage()
    install = CmdInstallKey(
        flags=InstallKeyFlagsEnum.CSF.tag, cert_fmt=CertFormatEnum.X509, tgt_index=1
    )
    auth = CmdAuthData(key_index=1)
    csf.append_command(install)
    csf.append_command(auth)
    assert csf.header_length == 28
    certificate = HabCertificate(csf_credentials.certificate)
    csf.set_cmd_data(install, 28, certificate)
    csf.set_cmd_data(auth, 28 + certificate.size, Signature(data=b"\x30\x00"))
    assert install.cmd_data_offset == 28
    assert csf.size == 28 + certificate.size + 8
    data = csf.export()
    assert len(data) == csf.size
    assert data[28] == 0xD7
    assert data[28 + certificate.size] == 0xD8


def test_csf_absolute_layout(csf_credentials: SigningCredentials) -> None:
    """Base address is added to pointers of commands with ABS flag only."""
    csf = CsfImage(base_address=0x20000000)
    install = CmdInstallKey(
        flags=InstallKeyFlagsEnum.ABS.tag, cert_fmt=CertFormatEnum.X509, tgt_index=1
    )
    auth = CmdAuthData(key_index=1)
    csf.append_command(install)
    csf.append_command(auth)
    certificate = HabCertificate(csf_credentials.certificate)
    csf.set_cmd_data(install, 28, certificate)
    csf.set_cmd_data(auth, 28 + certificate.size, Signature(data=b"\x30\x00"))
    assert install.cmd_data_offset == 0x20000000 + 28
    assert auth.cmd_data_offset == 28 + certificate.size
    assert csf.get_cmd_data(install) is certificate


def test_csf_overlapping_records(csf_credentials: SigningCredentials) -> None:
    """Overlapping records are an internal error."""
    csf = CsfImage()
    install = CmdInstallKey(cert_fmt=CertFormatEnum.X509, tgt_index=1)
    auth = CmdAuthData(key_index=1)
    csf.append_command(install)
    csf.append_command(auth)
    csf.set_cmd_data(install, 28, HabCertificate(csf_credentials.certificate))
    csf.set_cmd_data(auth, 32, Signature(data=b"\x30\x00"))
    with pytest.raises(HabCsfInternalConsistencyError):
        csf.export()


def test_csf_missing_data() -> None:
    """Command without placed data has no record."""
    csf = CsfImage()
    auth = CmdAuthData(key_index=1, location=0x40)
    csf.append_command(auth)
    with pytest.raises(HabCsfKeyError):
        csf.get_cmd_data(auth)


def test_csf_verify_without_key() -> None:
    """Signature verified by a key that was not installed fails."""
    csf = CsfImage()
    auth = CmdAuthData(key_index=3)
    csf.append_command(auth)
    csf.set_cmd_data(auth, csf.header_length, Signature(data=b"\x30\x00"))
    with pytest.raises(HabCsfVerificationError):
        csf.verify_signatures()
