#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""HABCSF pytest configuration and shared test fixtures.

Keys and self-signed certificates are generated once per session; boot images
are synthesized from the vector table and boot data formats.
"""

import os
from dataclasses import dataclass
from pathlib import Path

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

os.environ["HABCSF_DEBUG_LOGGING_DISABLED"] = "True"

# pylint: disable=wrong-import-position
from habcsf.crypto.keys import SigningCredentials
from tests.cli_runner import CliRunner
from tests.misc import SRK_TABLE, create_boot_image, generate_certificate


@dataclass
class SigningFiles:
    """Paths of the inputs of the sign command."""

    csf_key: str
    csf_cert: str
    img_key: str
    img_cert: str
    srk_table: str
    image: str


@pytest.fixture
def cli_runner() -> CliRunner:
    """Get CLI runner instance for testing."""
    return CliRunner()


@pytest.fixture(scope="session")
def csf_credentials() -> SigningCredentials:
    """RSA credentials signing the CSF."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return SigningCredentials(generate_certificate(key, "CSF1_1_sha256_2048_65537_v3_usr"), key)


@pytest.fixture(scope="session")
def img_credentials() -> SigningCredentials:
    """RSA credentials signing the image."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return SigningCredentials(generate_certificate(key, "IMG1_1_sha256_2048_65537_v3_usr"), key)


@pytest.fixture(scope="session")
def ec_credentials() -> SigningCredentials:
    """NIST P-256 credentials."""
    key = ec.generate_private_key(ec.SECP256R1())
    return SigningCredentials(generate_certificate(key, "CSF1_1_sha256_secp256r1_v3_usr"), key)


@pytest.fixture
def signing_files(
    tmp_path: Path, csf_credentials: SigningCredentials, img_credentials: SigningCredentials
) -> SigningFiles:
    """Keys, certificates, SRK table and image stored in files."""

    def write(name: str, data: bytes) -> str:
        path = str(tmp_path / name)
        with open(path, "wb") as f:
            f.write(data)
        return path

    def key_pem(credentials: SigningCredentials) -> bytes:
        return credentials.private_key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )

    return SigningFiles(
        csf_key=write("csf_key.pem", key_pem(csf_credentials)),
        csf_cert=write(
            "csf_crt.pem", csf_credentials.certificate.public_bytes(serialization.Encoding.PEM)
        ),
        img_key=write("img_key.pem", key_pem(img_credentials)),
        img_cert=write(
            "img_crt.der", img_credentials.certificate.public_bytes(serialization.Encoding.DER)
        ),
        srk_table=write("srk_table.bin", SRK_TABLE),
        image=write("image.imx", create_boot_image()),
    )
