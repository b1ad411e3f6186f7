#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause
"""Miscellaneous utilities tests."""

import os
from pathlib import Path

import pytest

from habcsf.exceptions import HabCsfError, HabCsfKeyError, HabCsfValueError
from habcsf.hab.constants import CertFormatEnum
from habcsf.utils.misc import (
    align,
    align_block,
    extend_block,
    get_der_object_size,
    load_binary,
    size_fmt,
    write_file,
)


@pytest.mark.parametrize(
    "number,alignment,expected", [(0, 4, 0), (1, 4, 4), (4, 4, 4), (5, 4, 8), (0x3F1, 0x400, 0x400)]
)
def test_align(number: int, alignment: int, expected: int) -> None:
    """Number is aligned up."""
    assert align(number, alignment) == expected


def test_align_invalid() -> None:
    """Alignment must be positive."""
    with pytest.raises(HabCsfError):
        align(1, 0)


def test_align_block() -> None:
    """Block is padded to the alignment."""
    assert align_block(b"\x01\x02\x03") == b"\x01\x02\x03\x00"
    assert align_block(b"\x01\x02\x03\x04") == b"\x01\x02\x03\x04"
    assert align_block(b"\x01", 4, 0xFF) == b"\x01\xff\xff\xff"


def test_extend_block() -> None:
    """Block is extended to the length."""
    assert extend_block(b"\x01", 3) == b"\x01\x00\x00"
    assert extend_block(b"\x01", 1) == b"\x01"
    with pytest.raises(HabCsfValueError):
        extend_block(b"\x01\x02", 1)


@pytest.mark.parametrize(
    "data,size",
    [
        (b"\x30\x03\x02\x01\x00\x00\x00", 5),
        (b"\x30\x81\x80" + bytes(0x80), 0x83),
        (b"\x30\x82\x01\x00" + bytes(0x100), 0x104),
    ],
)
def test_get_der_object_size(data: bytes, size: int) -> None:
    """DER object size includes tag and length."""
    assert get_der_object_size(data) == size


@pytest.mark.parametrize("data", [b"", b"\x30", b"\x30\x05\x00", b"\x30\x82\x01"])
def test_get_der_object_size_invalid(data: bytes) -> None:
    """Truncated DER object is rejected."""
    with pytest.raises(HabCsfValueError):
        get_der_object_size(data)


def test_write_load_binary(tmp_path: Path) -> None:
    """Written binary is loaded back; directories are created."""
    path = os.path.join(tmp_path, "sub", "data.bin")
    assert write_file(b"\x01\x02", path, mode="wb") == 2
    assert load_binary(path) == b"\x01\x02"


def test_size_fmt() -> None:
    """Sizes are printed in binary units."""
    assert size_fmt(100) == "100 B"
    assert size_fmt(0x2000) == "8.0 kiB"


def test_enum_lookup() -> None:
    """Enum members are found by tag and label."""
    assert CertFormatEnum.from_tag(0x09) == CertFormatEnum.X509
    assert CertFormatEnum.from_label("cms") == CertFormatEnum.CMS
    assert CertFormatEnum.get_label(0x03) == "SRK"
    assert CertFormatEnum.contains(0xC5)
    assert not CertFormatEnum.contains(0x01)
    with pytest.raises(HabCsfKeyError):
        CertFormatEnum.from_tag(0x01)
