"""Operator decisions raised by the snapshot engine.

The engine never talks to a terminal. Whenever it needs an answer it
builds a DecisionRequest describing the question, its default and the
entries involved, and hands it to a Confirm callable supplied by the
caller. The CLI renders requests with Rich; tests and ``--yes`` runs use
AutoConfirm.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from archon.models.snapshot import ManifestEntry
from archon.snapshot.errors import ConfirmationError

logger = logging.getLogger(__name__)


class DecisionKind(str, Enum):
    """What a decision request is about."""

    CREATE_SNAPSHOT_DIR = "create_snapshot_dir"
    ORIGIN_MISMATCH = "origin_mismatch"
    UNDECLARED_ENTRIES = "undeclared_entries"
    OVERWRITE = "overwrite"
    BACKUP_MISSING = "backup_missing"
    BACKUP_STALE = "backup_stale"
    CONFIRM_CLEAN = "confirm_clean"
    CONFIRM_CLEAN_AGAIN = "confirm_clean_again"
    OFFER_BACKUP = "offer_backup"


@dataclass(frozen=True, slots=True)
class DecisionRequest:
    """A yes/no question for the operator.

    Attributes:
        kind: What the decision is about.
        question: The question to ask, phrased for a yes/no answer.
        default: Answer assumed when the operator just presses enter.
        message: Optional context shown before the question.
        entries: Manifest entries the question refers to, if any.
    """

    kind: DecisionKind
    question: str
    default: bool
    message: str = ""
    entries: tuple[ManifestEntry, ...] = field(default_factory=tuple)


class Confirm(Protocol):
    """Callable answering a decision request.

    Implementations may raise OSError or EOFError when no answer can be
    read; ask() converts those into ConfirmationError.
    """

    def __call__(self, request: DecisionRequest) -> bool: ...


def ask(confirm: Confirm, request: DecisionRequest) -> bool:
    """Ask the operator a question through a Confirm callable.

    Args:
        confirm: Callable that answers the request.
        request: The question to ask.

    Returns:
        The operator's answer.

    Raises:
        ConfirmationError: If the answer could not be read.
    """
    logger.debug("Asking %s (default=%s)", request.kind.value, request.default)
    try:
        answer = confirm(request)
    except (OSError, EOFError) as e:
        msg = f"Could not read an answer to '{request.question}': {e}"
        raise ConfirmationError(msg) from e
    logger.debug("Answer to %s: %s", request.kind.value, answer)
    return bool(answer)


class AutoConfirm:
    """Answer every request without asking anybody.

    Args:
        answer: Fixed answer to give, or None to accept each request's default.

    Attributes:
        requests: Every request received, in order.
    """

    def __init__(self, answer: bool | None = True) -> None:
        self.answer = answer
        self.requests: list[DecisionRequest] = []

    def __call__(self, request: DecisionRequest) -> bool:
        self.requests.append(request)
        if self.answer is None:
            return request.default
        return self.answer

    @property
    def kinds(self) -> list[DecisionKind]:
        """Kinds of the requests received so far."""
        return [request.kind for request in self.requests]
