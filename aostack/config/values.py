# SPDX-License-Identifier: BUSL-1.1
"""Lookup results and the opaque secret handle.

A configuration store answers a lookup with exactly one of:

    Plain(value)       the entry exists and is safe to expose
    Sensitive(handle)  the entry exists and must stay opaque
    ABSENT             the store holds nothing usable under that name
"""

from dataclasses import dataclass
from typing import Callable


MASK = "[secret]"


class Secret:
    """Deferred secret value.

    The underlying string is produced by a loader that only runs when
    ``reveal()`` is called. Formatting a Secret never shows its content.
    """

    __slots__ = ("_loader",)

    def __init__(self, loader: Callable[[], str]):
        self._loader = loader

    @classmethod
    def of(cls, value: str) -> "Secret":
        return cls(lambda: value)

    def reveal(self) -> str:
        return self._loader()

    def __str__(self) -> str:
        return MASK

    def __repr__(self) -> str:
        return f"Secret({MASK})"

    def __format__(self, spec: str) -> str:
        return format(MASK, spec)


@dataclass(frozen=True)
class Plain:
    value: str


@dataclass(frozen=True)
class Sensitive:
    handle: Secret


class _Absent:
    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()
