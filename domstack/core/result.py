"""Evaluation results.

Handlers never raise to abort a run.  Every evaluation returns either
``Ok(value)`` or ``Err(kind, message)``.  A fatal ``Err`` from a child
is handed back up unchanged and the run driver stops on it; a recoverable
one only skips the command that produced it.

Error tiers
-----------
recoverable — MISSING_NAME, NO_MEANINGFUL_CHILD
              logged as a warning, the command is skipped, the run goes on
run-fatal   — INVALID_OPERAND, INVALID_REFERENCE
              logged as an error, the rest of the run is abandoned
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(Enum):
    MISSING_NAME        = ("missing name attribute", False)
    NO_MEANINGFUL_CHILD = ("no meaningful child", False)
    INVALID_OPERAND     = ("invalid operand", True)
    INVALID_REFERENCE   = ("invalid reference", True)

    def __init__(self, label: str, fatal: bool) -> None:
        self.label = label
        self.fatal = fatal


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    kind:    ErrorKind
    message: str

    @property
    def fatal(self) -> bool:
        return self.kind.fatal

    def __str__(self) -> str:
        return f"{self.kind.label}: {self.message}"


Result = Union[Ok, Err]
