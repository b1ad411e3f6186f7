#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Miscellaneous helpers: block alignment and file access."""

import logging
import os
from typing import Union

from habcsf.exceptions import HabCsfError, HabCsfValueError

logger = logging.getLogger(__name__)


def align(number: int, alignment: int = 4) -> int:
    """Align number (size or address) up to the given boundary.

    :param number: The number to be aligned.
    :param alignment: The boundary alignment, typically 4.
    :return: Aligned number, always greater than or equal to the input number.
    :raises HabCsfError: When alignment is non-positive or number is negative.
    """
    if alignment <= 0 or number < 0:
        raise HabCsfError("Wrong alignment")
    return (number + (alignment - 1)) // alignment * alignment


def align_block(data: Union[bytes, bytearray], alignment: int = 4, padding: int = 0) -> bytes:
    """Align binary data block length by appending padding bytes.

    :param data: Binary data to be aligned.
    :param alignment: Boundary alignment in bytes.
    :param padding: 8-bit value used for padding, zero by default.
    :return: Aligned binary data block.
    """
    current_size = len(data)
    num_padding = align(current_size, alignment) - current_size
    return bytes(data) + bytes([padding]) * num_padding


def extend_block(data: bytes, length: int, padding: int = 0) -> bytes:
    """Extend binary data block with padding to reach specified length.

    :param data: Binary block to be extended.
    :param length: Requested block length; must be >= current block length.
    :param padding: 8-bit value to be used as padding (default: 0).
    :return: Block extended with padding bytes.
    :raises HabCsfValueError: When the length is smaller than current block length.
    """
    current_len = len(data)
    if length < current_len:
        raise HabCsfValueError(f"Incorrect length: {length} < {current_len}")
    num_padding = length - current_len
    if not num_padding:
        return data
    return data + bytes([padding]) * num_padding


def load_binary(path: str) -> bytes:
    """Load the whole content of a binary file.

    :param path: Path to the binary file to load.
    :return: Content of the binary file as bytes.
    """
    logger.debug(f"Loading binary file from {path}")
    with open(path, "rb") as f:
        return f.read()


def write_file(data: Union[str, bytes], path: str, mode: str = "w", encoding: str = "utf-8") -> int:
    """Write data to a file, parent directories are created when missing.

    :param data: Data to write to the file.
    :param path: Path to the target file.
    :param mode: File writing mode ('w' for text, 'wb' for binary), defaults to 'w'.
    :param encoding: Text encoding, defaults to 'utf-8'.
    :return: Number of characters or bytes written to the file.
    """
    folder = os.path.dirname(path)
    if folder and not os.path.exists(folder):
        os.makedirs(folder, exist_ok=True)

    logger.debug(f"Storing {'binary' if 'b' in mode else 'text'} file at {path}")
    with open(path, mode, encoding=None if "b" in mode else encoding) as f:
        return f.write(data)


def size_fmt(num: Union[float, int], use_kibibyte: bool = True) -> str:
    """Format byte size into human-readable string representation.

    :param num: The byte size value to format.
    :param use_kibibyte: Use binary prefixes (1024-based), decimal ones otherwise.
    :return: Formatted size string with value and unit (e.g., "1.5 kiB", "1024 B").
    """
    base, suffix = [(1000.0, "B"), (1024.0, "iB")][use_kibibyte]
    i = "B"
    for i in ["B"] + [i + suffix for i in list("kMGTP")]:
        if num < base:
            break
        num /= base

    return f"{int(num)} {i}" if i == "B" else f"{num:3.1f} {i}"


def get_der_object_size(data: bytes) -> int:
    """Get total size of the DER object (tag, length and value) at the start of data.

    Certificates and signatures stored in HAB records are followed by zero
    padding; the DER length tells where the object really ends.

    :param data: Data starting with a DER encoded object.
    :return: Size of the whole DER object in bytes.
    :raises HabCsfValueError: The data do not start with a complete DER object.
    """
    if len(data) < 2:
        raise HabCsfValueError("Not enough data for DER object")
    length = data[1]
    offset = 2
    if length & 0x80:
        length_size = length & 0x7F
        if length_size == 0 or length_size > 4 or len(data) < offset + length_size:
            raise HabCsfValueError("Invalid DER length encoding")
        length = int.from_bytes(data[offset : offset + length_size], "big")
        offset += length_size
    if offset + length > len(data):
        raise HabCsfValueError(f"DER object exceeds data size ({offset + length} > {len(data)})")
    return offset + length
