# arena_server/models/messages.py
"""Validation models for client-to-server payloads."""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class Envelope(BaseModel):
    type: str
    data: Any = None
    requestId: Optional[str] = None


class PositionPayload(BaseModel):
    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)


class PlayerUpdatePayload(BaseModel):
    position: PositionPayload
    angle: float = Field(default=0.0, allow_inf_nan=False)


class PlayerShootPayload(BaseModel):
    angle: float = Field(allow_inf_nan=False)


class CreatePartyPayload(BaseModel):
    name: Optional[str] = Field(default=None, max_length=32)


class JoinPartyPayload(BaseModel):
    partyId: str
    playerName: Optional[str] = Field(default=None, max_length=32)


class UpgradePayload(BaseModel):
    type: str


class MemberDetailsPayload(BaseModel):
    ids: List[str]
