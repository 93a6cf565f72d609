# shikishi/schemas/message.py
from typing import Optional
from pydantic import BaseModel, Field

from shikishi.schemas.board import HEX_COLOR, PositionIn, PositionOut
from shikishi.services.placement import SizeTier


class MessageCreate(BaseModel):
    author: str = Field(..., min_length=1, max_length=100)
    content: str = Field(..., min_length=1, max_length=2000)
    color: str = Field("#000000", pattern=HEX_COLOR)
    viewportWidth: Optional[int] = Field(None, gt=0, le=10000, description="Client viewport width in px")
    position: Optional[PositionIn] = Field(None, description="Explicit position; omitted => allocated by the server")


class PlacementRequest(BaseModel):
    viewportWidth: Optional[int] = Field(None, gt=0, le=10000)


class PlacementOut(BaseModel):
    position: PositionOut
    sizeTier: SizeTier
    attempts: int
    degraded: bool


class MessageDeletedOut(BaseModel):
    success: bool
