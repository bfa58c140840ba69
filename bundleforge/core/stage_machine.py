"""Deployment run state machine.

Enforces:
- Steps advance only along the linear pipeline order
- FAILED is reachable from every non-terminal state and absorbs the run
- No transition leaves DONE or FAILED (no retry, no resumption)
- Every transition is recorded and logged
"""

from __future__ import annotations

import logging

from bundleforge.models.stages import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    PipelineState,
    StateTransition,
)

logger = logging.getLogger(__name__)


class InvalidTransitionError(RuntimeError):
    """Raised when a requested state transition is not valid."""


class PipelineStateMachine:
    """Tracks a single run from CONFIGURED to DONE or FAILED."""

    def __init__(self) -> None:
        self._state = PipelineState.CONFIGURED
        self._history: list[StateTransition] = []

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def history(self) -> list[StateTransition]:
        """Snapshot of all transitions taken so far."""
        return list(self._history)

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    # ------------------------------------------------------------------
    # Transition logic
    # ------------------------------------------------------------------

    def transition(
        self,
        target_state: PipelineState,
        *,
        reason: str | None = None,
    ) -> StateTransition:
        """Move to *target_state*, recording the transition."""
        allowed = VALID_TRANSITIONS.get(self._state, set())
        if target_state not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition from {self._state.value} to {target_state.value}. "
                f"Allowed: {sorted(s.value for s in allowed)}"
            )

        record = StateTransition(
            from_state=self._state,
            to_state=target_state,
            reason=reason,
        )
        self._history.append(record)
        self._state = target_state

        if target_state == PipelineState.FAILED:
            logger.error(
                "Pipeline %s -> %s: %s",
                record.from_state.value,
                record.to_state.value,
                reason,
            )
        else:
            logger.debug(
                "Pipeline %s -> %s", record.from_state.value, record.to_state.value
            )
        return record

    def fail(self, reason: str) -> StateTransition:
        """Enter the absorbing FAILED state."""
        return self.transition(PipelineState.FAILED, reason=reason)
