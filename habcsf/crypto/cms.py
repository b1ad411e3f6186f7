#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""CMS (PKCS#7) detached signatures for HAB.

The produced SignedData is what CST creates for HAB4: binary content, detached
(no encapsulated content), without the signer certificate (HAB gets it from the
certificate installed by the CSF) and without the S/MIME capabilities attribute.
"""

import hashlib
import logging
from datetime import datetime, timezone
from typing import Optional

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa

from habcsf.crypto.keys import PrivateKey, SigningCredentials
from habcsf.exceptions import HabCsfCryptoError, HabCsfVerificationError

logger = logging.getLogger(__name__)


def cms_sign(
    data: bytes,
    certificate: x509.Certificate,
    signing_key: PrivateKey,
    zulu: Optional[datetime] = None,
) -> bytes:
    """Sign provided data and return detached CMS signature.

    :param data: to be signed
    :param certificate: Certificate with issuer information
    :param signing_key: Signing key, RSA or ECC
    :param zulu: signing time, current UTC time by default
    :return: CMS signature (DER)
    :raises HabCsfCryptoError: If private key is not supported or time-zone is missing
    """
    # Lazy imports are used here to save some time during startup
    from asn1crypto import cms, util
    from asn1crypto import x509 as asn1_x509
    from cryptography.hazmat.primitives.serialization import Encoding

    if not isinstance(signing_key, (rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey)):
        raise HabCsfCryptoError(f"Unsupported private key type {type(signing_key)}.")
    zulu = zulu or datetime.now(timezone.utc)
    if not zulu.tzinfo:
        raise HabCsfCryptoError("Incorrect time-zone")

    is_rsa = isinstance(signing_key, rsa.RSAPrivateKey)

    # signed data (main section)
    signed_data = cms.SignedData()
    signed_data["version"] = "v1"
    signed_data["encap_content_info"] = util.OrderedDict([("content_type", "data")])
    signed_data["digest_algorithms"] = [
        util.OrderedDict([("algorithm", "sha256"), ("parameters", None)])
    ]

    # signer info sub-section
    signer_info = cms.SignerInfo()
    signer_info["version"] = "v1"
    signer_info["digest_algorithm"] = util.OrderedDict(
        [("algorithm", "sha256"), ("parameters", None)]
    )
    signer_info["signature_algorithm"] = (
        util.OrderedDict([("algorithm", "rsassa_pkcs1v15"), ("parameters", b"")])
        if is_rsa
        else util.OrderedDict([("algorithm", "sha256_ecdsa")])
    )
    asn1_cert = asn1_x509.Certificate.load(certificate.public_bytes(Encoding.DER))
    signer_info["sid"] = cms.SignerIdentifier(
        {
            "issuer_and_serial_number": cms.IssuerAndSerialNumber(
                {
                    "issuer": asn1_cert.issuer,
                    "serial_number": asn1_cert.serial_number,
                }
            )
        }
    )
    # signed attributes, no S/MIME capabilities
    signed_attrs = cms.CMSAttributes()
    signed_attrs.append(
        cms.CMSAttribute({"type": "content_type", "values": [cms.ContentType("data")]})
    )
    signed_attrs.append(
        cms.CMSAttribute(
            {
                "type": "signing_time",
                "values": [cms.Time(name="utc_time", value=zulu.strftime("%y%m%d%H%M%SZ"))],
            }
        )
    )
    signed_attrs.append(
        cms.CMSAttribute(
            {
                "type": "message_digest",
                "values": [cms.OctetString(hashlib.sha256(data).digest())],
            }
        )
    )
    signer_info["signed_attrs"] = signed_attrs

    data_to_sign = signed_attrs.dump()
    if is_rsa:
        signature = signing_key.sign(data_to_sign, padding.PKCS1v15(), hashes.SHA256())
    else:
        signature = signing_key.sign(data_to_sign, ec.ECDSA(hashes.SHA256()))
    signer_info["signature"] = signature
    signed_data["signer_infos"] = [signer_info]

    content_info = cms.ContentInfo()
    content_info["content_type"] = "signed_data"
    content_info["content"] = signed_data

    result = content_info.dump()
    logger.debug(f"CMS signature of {len(data)} bytes created, size {len(result)} bytes")
    return result


def sign(credentials: SigningCredentials, data: bytes) -> bytes:
    """Create detached CMS signature of data with given credentials.

    :param credentials: Certificate and private key of the signer.
    :param data: Payload to be signed.
    :return: DER encoded CMS signature.
    """
    return cms_sign(data, credentials.certificate, credentials.private_key)


def cms_verify(signature: bytes, data: bytes, certificate: x509.Certificate) -> None:
    """Verify detached CMS signature created by `cms_sign`.

    :param signature: DER encoded CMS ContentInfo with SignedData.
    :param data: Payload the signature was created for.
    :param certificate: Certificate of the signer.
    :raises HabCsfVerificationError: The signature does not match data or certificate.
    """
    from asn1crypto import cms

    try:
        content_info = cms.ContentInfo.load(signature)
        if content_info["content_type"].native != "signed_data":
            raise HabCsfVerificationError("CMS content is not SignedData")
        signer_info = content_info["content"]["signer_infos"][0]
        signed_attrs = signer_info["signed_attrs"]
        digests = [
            attr["values"][0].native
            for attr in signed_attrs
            if attr["type"].native == "message_digest"
        ]
        signature_value = signer_info["signature"].native
        # signature is computed over SET OF tag, not over the implicit [0]
        attrs_data = b"\x31" + signed_attrs.dump()[1:]
    except (ValueError, KeyError, IndexError, TypeError) as exc:
        raise HabCsfVerificationError(f"Invalid CMS signature structure: {exc}") from exc

    if digests != [hashlib.sha256(data).digest()]:
        raise HabCsfVerificationError("Message digest in CMS signature does not match data")

    public_key = certificate.public_key()
    try:
        if isinstance(public_key, rsa.RSAPublicKey):
            public_key.verify(signature_value, attrs_data, padding.PKCS1v15(), hashes.SHA256())
        elif isinstance(public_key, ec.EllipticCurvePublicKey):
            public_key.verify(signature_value, attrs_data, ec.ECDSA(hashes.SHA256()))
        else:
            raise HabCsfVerificationError(
                f"Unsupported public key type {type(public_key).__name__}"
            )
    except InvalidSignature as exc:
        raise HabCsfVerificationError("CMS signature does not match the certificate") from exc
