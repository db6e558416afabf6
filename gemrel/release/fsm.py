from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Generic, TypeVar

from gemrel.core.result import Err, Ok, Result
from gemrel.release.errors import ReleaseError
from gemrel.release.model import ReleaseOutcome

S = TypeVar("S")


@dataclass(frozen=True, slots=True)
class StepAdvance(Generic[S]):
    state: S


@dataclass(frozen=True, slots=True)
class StepFinish:
    outcome: ReleaseOutcome


StepOutcome = StepAdvance[S] | StepFinish
StepHandler = Callable[[S], Result[StepOutcome[S], ReleaseError]]
GetStep = Callable[[S], str]


def advance(state: S) -> StepAdvance[S]:
    return StepAdvance(state=state)


def finish(outcome: ReleaseOutcome) -> StepFinish:
    return StepFinish(outcome=outcome)


def run_state_machine(
    *,
    initial_state: S,
    get_step: GetStep[S],
    handlers: Mapping[str, StepHandler[S]],
) -> Result[ReleaseOutcome, ReleaseError]:
    """Run handlers until one finishes; the first error stops the machine."""
    current = initial_state

    while True:
        step = get_step(current)
        handler = handlers.get(step)
        if handler is None:
            return Err(
                ReleaseError(
                    kind="invalid_input",
                    message=f"unknown release step: {step}",
                )
            )

        outcome = handler(current)
        if isinstance(outcome, Err):
            return outcome

        if isinstance(outcome.value, StepFinish):
            return Ok(outcome.value.outcome)

        current = outcome.value.state
