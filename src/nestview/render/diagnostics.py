"""
Non-fatal failure records collected while composing a page.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class FailureKind(str, Enum):
    NOT_FOUND = "not_found"
    INVALID_DECLARATION = "invalid_declaration"
    INVALID_INPUT = "invalid_input"
    TEMPLATE_ERROR = "template_error"


@dataclass(frozen=True)
class Diagnostic:
    """
    One thing that was skipped instead of breaking the page.

    Attributes:
        kind: Failure category.
        message: Human readable explanation.
        subject: The filename or declaration kind the failure concerns.
    """
    kind: FailureKind
    message: str
    subject: Optional[str] = None

    def as_row(self) -> tuple[str, str, str]:
        return (self.kind.value, self.subject or "", self.message)


@dataclass(frozen=True)
class DeclarationResult:
    """
    Outcome of a single head declaration; truthy when the entry was stored.
    """
    accepted: bool
    diagnostic: Optional[Diagnostic] = None
    value: Any = None

    def __bool__(self) -> bool:
        return self.accepted
