#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""HAB (High Assurance Boot) protocol constants.

Tags of HAB data structures and commands, and the identifiers of algorithms,
certificate/signature formats and engines written into the CSF commands.
"""

from habcsf.utils.habcsf_enum import HabCsfEnum


class SegmentTag(HabCsfEnum):
    """Tags of HAB data structures."""

    IVT = (0xD1, "IVT", "Image Vector Table")
    DCD = (0xD2, "DCD", "Device Configuration Data")
    CSF = (0xD4, "CSF", "Command Sequence File Data")
    CRT = (0xD7, "CRT", "Certificate")
    SIG = (0xD8, "SIG", "Signature")


class CmdTag(HabCsfEnum):
    """Tags of CSF commands."""

    INS_KEY = (0xBE, "INS_KEY", "Install Key")
    AUT_DAT = (0xCA, "AUT_DAT", "Authenticate Data")


class EnumAlgorithm(HabCsfEnum):
    """HAB algorithm identifiers."""

    ANY = (0x00, "ANY", "Algorithm type ANY")
    SHA1 = (0x11, "SHA1", "SHA-1 algorithm ID")
    SHA256 = (0x17, "SHA256", "SHA-256 algorithm ID")
    SHA512 = (0x1B, "SHA512", "SHA-512 algorithm ID")
    PKCS1 = (0x21, "PKCS1", "PKCS#1 RSA signature algorithm")
    ECDSA = (0x27, "ECDSA", "NIST ECDSA signature algorithm")


class CertFormatEnum(HabCsfEnum):
    """Certificate and signature formats (protocol field of the commands)."""

    SRK = (0x03, "SRK", "SRK certificate format")
    X509 = (0x09, "X509", "X.509v3 certificate format")
    CMS = (0xC5, "CMS", "CMS/PKCS#7 signature format")


class EngineEnum(HabCsfEnum):
    """Engines that may execute the authentication."""

    ANY = (0x00, "ANY", "First compatible engine will be selected")
    SCC = (0x03, "SCC", "Security controller")
    DCP = (0x1B, "DCP", "Data Co-Processor")
    CAAM = (0x1D, "CAAM", "Cryptographic Acceleration and Assurance Module")
    SW = (0xFF, "SW", "Software engine")


HAB_VERSION = 0x40
