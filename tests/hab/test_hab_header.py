#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause
"""HAB header tests."""

import pytest

from habcsf.exceptions import HabCsfError, HabCsfParsingError
from habcsf.hab.constants import CmdTag, SegmentTag
from habcsf.hab.hab_header import CmdHeader, Header


def test_header_export_parse() -> None:
    """Header is tag, big-endian length and param."""
    header = Header(tag=SegmentTag.CSF.tag, param=0x40, length=0x48)
    data = header.export()
    assert data == b"\xd4\x00\x48\x40"
    parsed = Header.parse(data, SegmentTag.CSF.tag)
    assert parsed == header
    assert parsed.version_major == 4
    assert parsed.version_minor == 0


def test_header_default_length() -> None:
    """Header without length covers only itself."""
    header = Header(SegmentTag.SIG.tag, 0x40)
    assert header.length == Header.SIZE == 4


def test_header_parse_wrong_tag() -> None:
    """Parsing with another required tag fails."""
    with pytest.raises(HabCsfParsingError):
        Header.parse(b"\xd1\x00\x20\x40", SegmentTag.CSF.tag)


def test_header_parse_short_data() -> None:
    """Parsing less than four bytes fails."""
    with pytest.raises(HabCsfParsingError):
        Header.parse(b"\xd4\x00")


@pytest.mark.parametrize("length", [0, 3, 0x10000])
def test_header_export_invalid_length(length: int) -> None:
    """Length must cover the header and fit into 16 bits."""
    with pytest.raises(HabCsfError):
        Header(SegmentTag.CSF.tag, 0x40, length).export()


def test_cmd_header() -> None:
    """Command header accepts only command tags."""
    header = CmdHeader(CmdTag.INS_KEY, 0x02, 12)
    assert header.tag == 0xBE
    assert header.tag_name == "INS_KEY"
    assert header.export() == b"\xbe\x00\x0c\x02"
    with pytest.raises(HabCsfError):
        CmdHeader(0xD4)
    with pytest.raises(HabCsfParsingError):
        CmdHeader.parse(b"\xd4\x00\x0c\x00")
