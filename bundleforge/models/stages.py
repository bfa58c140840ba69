"""Pipeline state models — one linear path plus an absorbing failure state."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class PipelineState(str, Enum):
    """Where a deployment run currently is."""

    CONFIGURED = "configured"
    FETCHED = "fetched"
    VERSION_RESOLVED = "version_resolved"
    BUILT = "built"
    HASHED = "hashed"
    UPLOADED = "uploaded"
    REGISTERED = "registered"
    DONE = "done"
    FAILED = "failed"


# The happy path, in execution order.
PIPELINE_ORDER: list[PipelineState] = [
    PipelineState.CONFIGURED,
    PipelineState.FETCHED,
    PipelineState.VERSION_RESOLVED,
    PipelineState.BUILT,
    PipelineState.HASHED,
    PipelineState.UPLOADED,
    PipelineState.REGISTERED,
    PipelineState.DONE,
]


def _build_transitions() -> dict[PipelineState, set[PipelineState]]:
    table: dict[PipelineState, set[PipelineState]] = {}
    for current, following in zip(PIPELINE_ORDER, PIPELINE_ORDER[1:]):
        table[current] = {following, PipelineState.FAILED}
    table[PipelineState.DONE] = set()  # terminal
    table[PipelineState.FAILED] = set()  # terminal, no resumption
    return table


VALID_TRANSITIONS: dict[PipelineState, set[PipelineState]] = _build_transitions()

TERMINAL_STATES: frozenset[PipelineState] = frozenset(
    {PipelineState.DONE, PipelineState.FAILED}
)


class StateTransition(BaseModel):
    """Records a single state transition for the run summary."""

    model_config = ConfigDict(frozen=True)

    from_state: PipelineState
    to_state: PipelineState
    reason: str | None = None  # populated when entering FAILED
