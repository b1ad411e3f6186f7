#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause
"""HAB certificate record.

The record wraps a DER encoded X.509 certificate referenced by an Install Key
command. The certificate is zero padded to a 4-byte boundary and the padding
is counted in the record length.
"""

from cryptography import x509
from cryptography.hazmat.primitives.serialization import Encoding
from typing_extensions import Self

from habcsf.exceptions import HabCsfParsingError
from habcsf.hab.constants import HAB_VERSION, SegmentTag
from habcsf.hab.hab_header import Header
from habcsf.utils.abstract import BaseClass
from habcsf.utils.misc import align_block, get_der_object_size


class HabCertificate(BaseClass):
    """HAB certificate record (tag 0xD7)."""

    def __init__(self, certificate: x509.Certificate, version: int = HAB_VERSION) -> None:
        """Initialize the HAB certificate record.

        :param certificate: Certificate to be embedded in the record.
        :param version: HAB version in format 0xMN, defaults to 0x40 (4.0).
        """
        self._header = Header(tag=SegmentTag.CRT.tag, param=version)
        self.cert = certificate
        self._header.length = self.size

    @property
    def payload(self) -> bytes:
        """DER encoded certificate padded to 4-byte boundary."""
        return align_block(self.cert.public_bytes(Encoding.DER), 4)

    @property
    def size(self) -> int:
        """Size of the whole record including header and padding."""
        return Header.SIZE + len(self.payload)

    @property
    def version(self) -> int:
        """Record version."""
        return self._header.param

    def __len__(self) -> int:
        return self.size

    def __repr__(self) -> str:
        return (
            f"Certificate <Ver: {self._header.version_major}.{self._header.version_minor}, "
            f"Size: {self.size}>"
        )

    def __str__(self) -> str:
        msg = "-" * 60 + "\n"
        msg += (
            f"Certificate (Ver: {self._header.version_major:X}.{self._header.version_minor:X}, "
            f"Size: {self.size})\n"
        )
        msg += f" Subject: {self.cert.subject.rfc4514_string()}\n"
        msg += f" Issuer : {self.cert.issuer.rfc4514_string()}\n"
        msg += f" Serial : {self.cert.serial_number:#x}\n"
        msg += "-" * 60 + "\n"
        return msg

    def export(self) -> bytes:
        """Export the record: header, certificate and zero padding."""
        self._header.length = self.size
        return self._header.export() + self.payload

    @classmethod
    def parse(cls, data: bytes) -> Self:
        """Parse a HAB certificate record from binary data.

        :param data: Binary data starting with a HAB certificate record
        :raises HabCsfParsingError: If the data don't contain a valid certificate record
        :return: New HabCertificate instance
        """
        header = Header.parse(data, SegmentTag.CRT.tag)
        if header.length > len(data):
            raise HabCsfParsingError(
                f"Certificate record exceeds data ({header.length} > {len(data)})"
            )
        payload = data[Header.SIZE : header.length]
        try:
            der_data = payload[: get_der_object_size(payload)]
            certificate = x509.load_der_x509_certificate(der_data)
        except ValueError as exc:
            raise HabCsfParsingError(f"Invalid certificate in HAB record: {exc}") from exc
        return cls(certificate, header.param)
