"""Caller-facing generation state machine.

    input --submit--> generating --ok--> display
                          |                 |
                          +--fail--> error  +--regenerate--> generating
    display/error --edit--> input
    error --retry--> generating

Opening a session with a previously produced result starts in ``display``.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Awaitable, Callable

from cv_tailor.errors import GenerationFailedError, InvalidTransitionError
from cv_tailor.pipeline.error_classifier import classify_error

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    INPUT = "input"
    GENERATING = "generating"
    DISPLAY = "display"
    ERROR = "error"


_TRANSITIONS: dict[Phase, frozenset[Phase]] = {
    Phase.INPUT: frozenset({Phase.GENERATING}),
    Phase.GENERATING: frozenset({Phase.DISPLAY, Phase.ERROR}),
    Phase.DISPLAY: frozenset({Phase.INPUT, Phase.GENERATING}),
    Phase.ERROR: frozenset({Phase.INPUT, Phase.GENERATING}),
}


class GenerationSession:
    """Tracks one generation surface (e.g. a cover-letter dialog)."""

    def __init__(
        self,
        runner: Callable[[Any], Awaitable[Any]],
        *,
        previous_result: Any = None,
        previous_request: Any = None,
        on_phase: Callable[[Phase], None] | None = None,
    ):
        self._runner = runner
        self._on_phase = on_phase
        self.result = previous_result
        self.error: GenerationFailedError | None = None
        self.last_request = previous_request
        self.phase = Phase.DISPLAY if previous_result is not None else Phase.INPUT

    def _move(self, target: Phase) -> None:
        if target not in _TRANSITIONS[self.phase]:
            raise InvalidTransitionError(
                f"Cannot move from {self.phase.value} to {target.value}"
            )
        logger.debug("Session phase %s -> %s", self.phase.value, target.value)
        self.phase = target
        if self._on_phase:
            self._on_phase(target)

    async def submit(self, request: Any) -> Any:
        """Start generating from fresh inputs; settles in display or error."""
        self._move(Phase.GENERATING)
        self.last_request = request
        self.error = None
        try:
            result = await self._runner(request)
        except GenerationFailedError as exc:
            self.error = exc
            self._move(Phase.ERROR)
            return None
        except Exception as exc:
            logger.error("Generation runner raised unexpectedly", exc_info=True)
            self.error = GenerationFailedError(classify_error(exc), attempts=1)
            self._move(Phase.ERROR)
            return None
        self.result = result
        self._move(Phase.DISPLAY)
        return result

    async def regenerate(self) -> Any:
        """Re-run the full pipeline with the last accepted inputs."""
        if self.last_request is None:
            raise InvalidTransitionError("Nothing to regenerate: no inputs were submitted")
        if self.phase is Phase.INPUT:
            raise InvalidTransitionError("Cannot regenerate from input; submit instead")
        return await self.submit(self.last_request)

    async def retry(self) -> Any:
        """Retry affordance shown in the error state (fresh attempt budget)."""
        if self.phase is not Phase.ERROR:
            raise InvalidTransitionError(f"Cannot retry from {self.phase.value}")
        return await self.regenerate()

    def edit(self) -> None:
        """Return to the input form, keeping the last inputs for prefill."""
        self._move(Phase.INPUT)
