# Copyright (c) 2023 Aiven, Helsinki, Finland. https://aiven.io/
# See LICENSE for details
"""compmatrix - StrEnum"""

from __future__ import annotations

from compmatrix.errors import InvalidConfigurationError
from typing import Optional
from typing_extensions import Self

import enum


class StrEnum(str, enum.Enum):
    def __str__(self) -> str:
        return str(self.value)

    @classmethod
    def of(cls, value: str) -> Optional[Self]:
        try:
            return cls(value)
        except ValueError:
            return None

    @classmethod
    def parse(cls, value: str) -> Self:
        """Like `of` but raises InvalidConfigurationError for unknown values"""
        member = cls.of(value)
        if member is None:
            valid = ", ".join(str(m) for m in cls)
            raise InvalidConfigurationError(f"invalid {cls.__name__} {value!r}, expected one of: {valid}")
        return member
