"""Yes/no gate in front of mutating commands."""

from __future__ import annotations

import re
from enum import Enum
from typing import Callable, Optional

_YES_RE = re.compile(r"^y(es)?$", re.IGNORECASE)


class GateOutcome(str, Enum):
    CONFIRMED = "confirmed"
    CANCELED = "canceled"
    BYPASSED = "bypassed"

    @property
    def proceed(self) -> bool:
        return self is not GateOutcome.CANCELED


def confirm(
    question: str,
    assume_yes: bool = False,
    input_func: Optional[Callable[[str], str]] = None,
) -> GateOutcome:
    """Ask ``question``; only ``y``/``yes`` (any case) confirms.

    ``assume_yes`` skips the prompt entirely. Empty input and EOF cancel.
    """
    if assume_yes:
        return GateOutcome.BYPASSED
    try:
        answer = (input_func or input)(f"{question} [y/N]: ")
    except EOFError:
        return GateOutcome.CANCELED
    if _YES_RE.match((answer or "").strip()):
        return GateOutcome.CONFIRMED
    return GateOutcome.CANCELED
