from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ProcedureIn(BaseModel):
    # JSON bodies only: "1" is not an int and extra keys are rejected.
    model_config = ConfigDict(strict=True, extra="forbid")


class PoolIdIn(ProcedureIn):
    id: str


class PoolCreateIn(ProcedureIn):
    name: str = Field(min_length=1)


class PoolRenameIn(ProcedureIn):
    id: str
    name: str = Field(min_length=1)


class GroupCreateIn(ProcedureIn):
    poolId: str


class GroupIdIn(ProcedureIn):
    id: int


class ParticipantCreateIn(ProcedureIn):
    groupId: int
    name: str = Field(min_length=1)


class ParticipantMoveIn(ProcedureIn):
    participantId: str
    groupId: int


class ParticipantIdIn(ProcedureIn):
    id: str


class PoolListIn(ProcedureIn):
    id: list[str] = Field(default_factory=list)
