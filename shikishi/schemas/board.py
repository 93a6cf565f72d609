# shikishi/schemas/board.py
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field

from shikishi.services.placement import SizeTier

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class PositionIn(BaseModel):
    x: float = Field(..., ge=0, le=100)
    y: float = Field(..., ge=0, le=100)


class PositionOut(BaseModel):
    x: float
    y: float


class BoardCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    recipient: str = Field(..., min_length=1, max_length=100)
    backgroundColor: str = Field("#F5F5F5", pattern=HEX_COLOR)
    sizeTier: Optional[SizeTier] = Field(None, description="null = grow with the message count")


class BoardUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    recipient: Optional[str] = Field(None, min_length=1, max_length=100)
    backgroundColor: Optional[str] = Field(None, pattern=HEX_COLOR)
    sizeTier: Optional[SizeTier] = None


class BoardSummaryOut(BaseModel):
    id: int
    title: str
    recipient: str
    backgroundColor: str
    sizeTier: Optional[SizeTier] = None
    messageCount: int = 0
    createdAt: datetime
    updatedAt: datetime


class BoardCreatedOut(BoardSummaryOut):
    manageToken: str


class MessageOut(BaseModel):
    id: int
    boardId: int
    author: str
    content: str
    color: str
    position: PositionOut
    createdAt: datetime


class BoardDetailOut(BoardSummaryOut):
    messages: List[MessageOut] = []


class BoardDeletedOut(BaseModel):
    message: str
