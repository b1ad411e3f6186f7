#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause
"""Detached CMS signature tests."""

from datetime import datetime, timezone

import pytest
from asn1crypto import cms

from habcsf.crypto.cms import cms_sign, cms_verify, sign
from habcsf.crypto.keys import SigningCredentials
from habcsf.exceptions import HabCsfCryptoError, HabCsfVerificationError


@pytest.mark.parametrize("credentials_name", ["csf_credentials", "ec_credentials"])
def test_sign_verify(credentials_name: str, request: pytest.FixtureRequest) -> None:
    """Detached signature verifies against the signed data."""
    credentials: SigningCredentials = request.getfixturevalue(credentials_name)
    signature = sign(credentials, b"payload")
    cms_verify(signature, b"payload", credentials.certificate)
    with pytest.raises(HabCsfVerificationError):
        cms_verify(signature, b"payloaD", credentials.certificate)


def test_signature_structure(csf_credentials: SigningCredentials) -> None:
    """Signature is detached, without certificates and S/MIME capabilities."""
    signature = sign(csf_credentials, b"payload")
    content_info = cms.ContentInfo.load(signature)
    assert content_info["content_type"].native == "signed_data"
    signed_data = content_info["content"]
    assert signed_data["encap_content_info"]["content"].native is None
    assert not signed_data["certificates"].native
    signer_info = signed_data["signer_infos"][0]
    attr_types = [attr["type"].native for attr in signer_info["signed_attrs"]]
    assert attr_types == ["content_type", "signing_time", "message_digest"]
    assert signer_info["sid"].chosen["serial_number"].native == (
        csf_credentials.certificate.serial_number
    )


def test_signature_wrong_certificate(
    csf_credentials: SigningCredentials, img_credentials: SigningCredentials
) -> None:
    """Signature does not verify with another certificate."""
    signature = sign(csf_credentials, b"payload")
    with pytest.raises(HabCsfVerificationError):
        cms_verify(signature, b"payload", img_credentials.certificate)


def test_signature_invalid_data(csf_credentials: SigningCredentials) -> None:
    """Garbage is not a CMS signature."""
    with pytest.raises(HabCsfVerificationError):
        cms_verify(b"\x30\x03\x02\x01\x00", b"payload", csf_credentials.certificate)


def test_sign_without_timezone(csf_credentials: SigningCredentials) -> None:
    """Signing time must carry the time zone."""
    with pytest.raises(HabCsfCryptoError):
        cms_sign(
            b"payload",
            csf_credentials.certificate,
            csf_credentials.private_key,
            datetime(2025, 1, 1),
        )


def test_sign_fixed_time(csf_credentials: SigningCredentials) -> None:
    """Signing time is stored as UTC time."""
    zulu = datetime(2025, 3, 4, 5, 6, 7, tzinfo=timezone.utc)
    signature = cms_sign(
        b"payload", csf_credentials.certificate, csf_credentials.private_key, zulu
    )
    signer_info = cms.ContentInfo.load(signature)["content"]["signer_infos"][0]
    assert signer_info["signed_attrs"][1]["values"][0].native == zulu
