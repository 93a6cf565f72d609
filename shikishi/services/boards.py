# shikishi/services/boards.py
from __future__ import annotations
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from shikishi.models.board import MessageBoard, BoardMessage
from shikishi.schemas.board import BoardSummaryOut, BoardDetailOut, MessageOut, PositionOut
from shikishi.services.placement import Position, SizeTier


def touch(board: MessageBoard) -> None:
    board.updated_at = datetime.now(timezone.utc)


def board_size_tier(board: MessageBoard) -> Optional[SizeTier]:
    return SizeTier(board.size_tier) if board.size_tier else None


def existing_positions(db: Session, board_id: int) -> List[Position]:
    rows = (
        db.query(BoardMessage.position_x, BoardMessage.position_y)
        .filter(BoardMessage.board_id == board_id)
        .all()
    )
    return [Position(x, y) for x, y in rows]


def count_messages(db: Session, board_id: int) -> int:
    return db.query(func.count(BoardMessage.id)).filter(BoardMessage.board_id == board_id).scalar() or 0


def message_out(m: BoardMessage) -> MessageOut:
    return MessageOut(
        id=m.id,
        boardId=m.board_id,
        author=m.author,
        content=m.content,
        color=m.color,
        position=PositionOut(x=m.position_x, y=m.position_y),
        createdAt=m.created_at,
    )


def board_summary_out(board: MessageBoard, message_count: int) -> BoardSummaryOut:
    return BoardSummaryOut(
        id=board.id,
        title=board.title,
        recipient=board.recipient,
        backgroundColor=board.background_color,
        sizeTier=board_size_tier(board),
        messageCount=message_count,
        createdAt=board.created_at,
        updatedAt=board.updated_at,
    )


def board_detail_out(db: Session, board: MessageBoard) -> BoardDetailOut:
    messages = (
        db.query(BoardMessage)
        .filter(BoardMessage.board_id == board.id)
        .order_by(BoardMessage.created_at.asc(), BoardMessage.id.asc())
        .all()
    )
    summary = board_summary_out(board, len(messages))
    return BoardDetailOut(**summary.model_dump(), messages=[message_out(m) for m in messages])
