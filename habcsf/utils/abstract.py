#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Abstract base class shared by all binary HAB records."""

from abc import ABC, abstractmethod
from typing import Any

from typing_extensions import Self


class BaseClass(ABC):
    """Base class for objects with a binary representation.

    Objects compare equal when they are of the same class and carry the same
    attributes, so a record parsed back from its export equals the exported one.
    """

    def __eq__(self, obj: Any) -> bool:
        return isinstance(obj, self.__class__) and vars(obj) == vars(self)

    def __ne__(self, obj: Any) -> bool:
        return not self.__eq__(obj)

    @abstractmethod
    def __repr__(self) -> str:
        """Get short representation of the object."""

    @abstractmethod
    def __str__(self) -> str:
        """Get human readable description of the object."""

    @abstractmethod
    def export(self) -> bytes:
        """Export object into bytes array.

        :return: Object representation as bytes.
        """

    @classmethod
    @abstractmethod
    def parse(cls, data: bytes) -> Self:
        """Parse object from bytes array.

        :param data: Byte array containing the serialized object data.
        :return: Parsed object instance.
        """
