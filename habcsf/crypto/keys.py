#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Loading of private keys and X.509 certificates used for CSF signing."""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    PublicFormat,
    load_der_private_key,
    load_pem_private_key,
)

from habcsf.exceptions import HabCsfCryptoError
from habcsf.utils.misc import load_binary

logger = logging.getLogger(__name__)

PrivateKey = Union[rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey]


def _is_pem(data: bytes) -> bool:
    return b"-----BEGIN" in data


def load_private_key_from_data(data: bytes, password: Optional[str] = None) -> PrivateKey:
    """Load RSA or ECC private key from PEM or DER encoded data.

    :param data: Encoded private key.
    :param password: Password of an encrypted key.
    :return: Private key object.
    :raises HabCsfCryptoError: The key cannot be loaded or is not RSA/ECC key.
    """
    load_function = load_pem_private_key if _is_pem(data) else load_der_private_key
    try:
        private_key = load_function(data, password.encode("utf-8") if password else None)
    except TypeError as exc:
        # missing password for encrypted key or password given for plain key
        raise HabCsfCryptoError(f"Cannot load private key: {exc}") from exc
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise HabCsfCryptoError(f"Cannot load private key: {exc}") from exc
    if not isinstance(private_key, (rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey)):
        raise HabCsfCryptoError(f"Unsupported private key type {type(private_key).__name__}")
    return private_key


def load_private_key(file_path: str, password: Optional[str] = None) -> PrivateKey:
    """Load private key from file.

    :param file_path: Path to the file with PEM or DER encoded private key.
    :param password: Password of an encrypted key.
    :return: RSA/ECC private key
    """
    return load_private_key_from_data(load_binary(file_path), password)


def load_certificate_from_data(data: bytes) -> x509.Certificate:
    """Load X.509 certificate from PEM or DER encoded data.

    :param data: Encoded certificate.
    :return: Certificate (from cryptography library)
    :raises HabCsfCryptoError: The certificate cannot be loaded.
    """
    try:
        if _is_pem(data):
            return x509.load_pem_x509_certificate(data)
        return x509.load_der_x509_certificate(data)
    except ValueError as exc:
        raise HabCsfCryptoError(f"Cannot load certificate: {exc}") from exc


def load_certificate(file_path: str) -> x509.Certificate:
    """Load X.509 certificate from file.

    :param file_path: Path to the file with PEM or DER encoded certificate.
    :return: Certificate (from cryptography library)
    """
    return load_certificate_from_data(load_binary(file_path))


def key_matches_certificate(private_key: PrivateKey, certificate: x509.Certificate) -> bool:
    """Check that the private key belongs to the public key of the certificate."""
    key_data = private_key.public_key().public_bytes(
        Encoding.DER, PublicFormat.SubjectPublicKeyInfo
    )
    cert_data = certificate.public_key().public_bytes(
        Encoding.DER, PublicFormat.SubjectPublicKeyInfo
    )
    return key_data == cert_data


@dataclass
class SigningCredentials:
    """Certificate and the matching private key used to produce one signature."""

    certificate: x509.Certificate
    private_key: PrivateKey

    def __post_init__(self) -> None:
        if not key_matches_certificate(self.private_key, self.certificate):
            raise HabCsfCryptoError(
                "Given private key does not match the public key of certificate "
                f"'{self.certificate.subject.rfc4514_string()}'"
            )

    @classmethod
    def load(
        cls, certificate_path: str, private_key_path: str, password: Optional[str] = None
    ) -> "SigningCredentials":
        """Load certificate and private key from files.

        :param certificate_path: Path to the X.509 certificate.
        :param private_key_path: Path to the private key.
        :param password: Password of an encrypted private key.
        :return: Credentials with verified key pair.
        """
        logger.debug(f"Loading signing credentials {certificate_path}, {private_key_path}")
        return cls(load_certificate(certificate_path), load_private_key(private_key_path, password))
