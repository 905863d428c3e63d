"""Commands accepted by the simulation state machine.

Each command is a frozen pydantic model tagged by its `type` field, so a
command list can be round-tripped through JSON (e.g. for replaying a saved
session) and parsed back with `parse_command`.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from cmosim.models.content import (
    AnyWildcard,
    BigBetOption,
    BigBetOutcome,
    ImpactVector,
    TalentCandidate,
    Tactic,
)
from cmosim.models.state import QuarterKey


class _Command(BaseModel):
    model_config = ConfigDict(frozen=True)


class StartSimulation(_Command):
    type: Literal["START_SIMULATION"] = "START_SIMULATION"
    user_id: Optional[str] = None
    total_budget: Optional[float] = Field(default=None, gt=0.0)


class SetStrategy(_Command):
    """Partial strategy update; last write wins per field."""

    type: Literal["SET_STRATEGY"] = "SET_STRATEGY"
    strategy: dict[str, Any] = Field(default_factory=dict)


class CompleteStrategySession(_Command):
    type: Literal["COMPLETE_STRATEGY_SESSION"] = "COMPLETE_STRATEGY_SESSION"


class AddTactic(_Command):
    type: Literal["ADD_TACTIC"] = "ADD_TACTIC"
    quarter: QuarterKey
    tactic: Tactic


class RemoveTactic(_Command):
    type: Literal["REMOVE_TACTIC"] = "REMOVE_TACTIC"
    quarter: QuarterKey
    tactic_id: str


class TriggerWildcard(_Command):
    type: Literal["TRIGGER_WILDCARD"] = "TRIGGER_WILDCARD"
    quarter: QuarterKey
    wildcard: AnyWildcard


class RespondToWildcard(_Command):
    """Answer the pending wildcard.

    If impact is supplied it is applied as-is instead of being computed by
    the resolver.
    """

    type: Literal["RESPOND_TO_WILDCARD"] = "RESPOND_TO_WILDCARD"
    quarter: QuarterKey
    wildcard: AnyWildcard
    choice_id: str
    impact: Optional[ImpactVector] = None


class HireTalent(_Command):
    type: Literal["HIRE_TALENT"] = "HIRE_TALENT"
    quarter: QuarterKey
    talent: TalentCandidate


class MakeBigBet(_Command):
    """Commit to a big bet; the outcome is rolled unless supplied."""

    type: Literal["MAKE_BIG_BET"] = "MAKE_BIG_BET"
    quarter: QuarterKey
    option: BigBetOption
    outcome: Optional[BigBetOutcome] = None


class CompleteQuarter(_Command):
    type: Literal["COMPLETE_QUARTER"] = "COMPLETE_QUARTER"
    quarter: QuarterKey


class CompleteDebrief(_Command):
    type: Literal["COMPLETE_DEBRIEF"] = "COMPLETE_DEBRIEF"


class SaveSimulation(_Command):
    type: Literal["SAVE_SIMULATION"] = "SAVE_SIMULATION"


class RestartSimulation(_Command):
    type: Literal["RESTART_SIMULATION"] = "RESTART_SIMULATION"


Command = Annotated[
    Union[
        StartSimulation,
        SetStrategy,
        CompleteStrategySession,
        AddTactic,
        RemoveTactic,
        TriggerWildcard,
        RespondToWildcard,
        HireTalent,
        MakeBigBet,
        CompleteQuarter,
        CompleteDebrief,
        SaveSimulation,
        RestartSimulation,
    ],
    Field(discriminator="type"),
]

_command_adapter: TypeAdapter[Command] = TypeAdapter(Command)


def parse_command(data: dict[str, Any] | str) -> Command:
    """Build a command from a dict or JSON string.

    Raises:
        pydantic.ValidationError: If the payload is not a known command
    """
    if isinstance(data, str):
        return _command_adapter.validate_json(data)
    return _command_adapter.validate_python(data)
