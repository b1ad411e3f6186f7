#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Enumeration with numeric tag, label and description for protocol constants."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from typing_extensions import Self

from habcsf.exceptions import HabCsfKeyError, HabCsfTypeError


@dataclass(frozen=True)
class HabCsfEnumMember:
    """Single member of the HABCSF enumeration."""

    tag: int
    label: str
    description: Optional[str] = None


class HabCsfEnum(HabCsfEnumMember, Enum):
    """Enumeration whose members are looked up by tag (wire value) or label.

    Members compare equal to their tag and to their label, so the wire value
    read from a binary record can be compared with a member directly.
    """

    def __eq__(self, __value: object) -> bool:
        return self.tag == __value or self.label == __value

    def __hash__(self) -> int:
        return hash((self.tag, self.label, self.description))

    @classmethod
    def labels(cls) -> list[str]:
        """Get list of labels of all enum members."""
        return [value.label for value in cls.__members__.values()]

    @classmethod
    def tags(cls) -> list[int]:
        """Get list of tags of all enum members."""
        return [value.tag for value in cls.__members__.values()]

    @classmethod
    def contains(cls, obj: Union[int, str]) -> bool:
        """Check if member with given tag/label exists in enum.

        :param obj: Label or tag of enum member to check for existence.
        :raises HabCsfTypeError: Object must be either string or integer.
        :return: True if member exists, False otherwise.
        """
        if not isinstance(obj, (int, str)):
            raise HabCsfTypeError("Object must be either string or integer")
        try:
            cls.from_attr(obj)
            return True
        except HabCsfKeyError:
            return False

    @classmethod
    def get_label(cls, tag: int) -> str:
        """Get label of enum member with given tag."""
        return cls.from_tag(tag).label

    @classmethod
    def get_description(cls, tag: int, default: Optional[str] = None) -> Optional[str]:
        """Get description of enum member with given tag.

        :param tag: Tag to be used for searching.
        :param default: Default value if member contains no description.
        :return: Description of found enum member or default value.
        """
        return cls.from_tag(tag).description or default

    @classmethod
    def from_attr(cls, attribute: Union[int, str]) -> Self:
        """Get enum member with given tag (int) or label (str)."""
        if isinstance(attribute, int):
            return cls.from_tag(attribute)
        return cls.from_label(attribute)

    @classmethod
    def from_tag(cls, tag: int) -> Self:
        """Get enum member with given tag.

        :param tag: Tag to be used for searching
        :raises HabCsfKeyError: If enum with given tag is not found
        :return: Found enum member
        """
        for item in cls.__members__.values():
            if item.tag == tag:
                return item
        raise HabCsfKeyError(f"There is no {cls.__name__} item with tag {tag:#x} defined")

    @classmethod
    def from_label(cls, label: str) -> Self:
        """Get enum member with given label, case insensitive.

        :param label: Label to be used for searching
        :raises HabCsfKeyError: If enum with given label is not found or label is not string
        :return: Found enum member
        """
        if not isinstance(label, str):
            raise HabCsfKeyError("Label must be string")
        for item in cls.__members__.values():
            if item.label.upper() == label.upper():
                return item
        raise HabCsfKeyError(f"There is no {cls.__name__} item with label {label} defined")
