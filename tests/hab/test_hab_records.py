#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause
"""HAB certificate, signature and SRK table record tests."""

from hashlib import sha256

import pytest

from habcsf.crypto.cms import sign
from habcsf.crypto.keys import SigningCredentials
from habcsf.exceptions import HabCsfParsingError, HabCsfValueError
from habcsf.hab.hab_certificate import HabCertificate
from habcsf.hab.hab_signature import Signature
from habcsf.hab.hab_srk import SrkTableData


def test_certificate_record(csf_credentials: SigningCredentials) -> None:
    """Certificate record is padded to four bytes; padding is counted in length."""
    record = HabCertificate(csf_credentials.certificate)
    data = record.export()
    assert len(data) == record.size
    assert record.size % 4 == 0
    assert data[0] == 0xD7
    assert int.from_bytes(data[1:3], "big") == record.size
    assert data[3] == 0x40
    assert "CSF1_1" in str(record)


def test_certificate_record_parse(img_credentials: SigningCredentials) -> None:
    """Padding is stripped from the parsed certificate."""
    record = HabCertificate(img_credentials.certificate)
    parsed = HabCertificate.parse(record.export() + bytes(16))
    assert parsed.cert == img_credentials.certificate
    assert parsed.size == record.size


def test_certificate_record_parse_truncated(csf_credentials: SigningCredentials) -> None:
    """Record longer than data is rejected."""
    data = HabCertificate(csf_credentials.certificate).export()
    with pytest.raises(HabCsfParsingError):
        HabCertificate.parse(data[:-8])


def test_signature_class() -> None:
    """Empty signature record contains header only."""
    sig = Signature(version=0x40)
    assert sig.size == 4
    assert len(sig) == 0
    assert str(sig)


@pytest.mark.parametrize("length,expected_size", [(1, 8), (4, 8), (5, 12), (70, 76), (72, 76)])
def test_signature_padding(length: int, expected_size: int) -> None:
    """Signature record is padded to four bytes."""
    sig = Signature(data=b"\x01" * length)
    assert sig.size == expected_size
    assert len(sig.export()) == expected_size
    assert len(sig) == length


def test_signature_parse(ec_credentials: SigningCredentials) -> None:
    """Parsed signature equals the CMS signature without padding."""
    cms_data = sign(ec_credentials, b"data")
    record = Signature(data=cms_data)
    parsed = Signature.parse(record.export())
    assert parsed.data == cms_data
    assert parsed == record


def test_signature_parse_wrong_tag() -> None:
    """Certificate tag is not accepted as signature."""
    with pytest.raises(HabCsfParsingError):
        Signature.parse(b"\xd7\x00\x04\x40")


def test_srk_table() -> None:
    """SRK table is kept verbatim without padding; digest identifies the blob."""
    srk = SrkTableData(b"\x01\x02\x03")
    assert srk.size == 3
    assert srk.export() == b"\x01\x02\x03"
    assert srk.digest == sha256(b"\x01\x02\x03").digest()
    with pytest.raises(HabCsfValueError):
        SrkTableData(b"")
