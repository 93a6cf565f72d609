# shikishi/models/board.py
from sqlalchemy import Column, Integer, String, Text, Float, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from shikishi.core.database import Base


class MessageBoard(Base):
    __tablename__ = "message_boards"

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    recipient = Column(String(100), nullable=False)
    background_color = Column(String(7), nullable=False, server_default="#F5F5F5")
    size_tier = Column(String(16), nullable=True)  # normal|large|xlarge, NULL => derive from message count
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    messages = relationship(
        "BoardMessage",
        back_populates="board",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="BoardMessage.id",
    )


class BoardMessage(Base):
    __tablename__ = "board_messages"

    id = Column(Integer, primary_key=True)
    board_id = Column(Integer, ForeignKey("message_boards.id", ondelete="CASCADE"), nullable=False)
    author = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    position_x = Column(Float, nullable=False)
    position_y = Column(Float, nullable=False)
    color = Column(String(7), nullable=False, server_default="#000000")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    board = relationship("MessageBoard", back_populates="messages")

    __table_args__ = (
        Index("ix_board_messages_board_created", "board_id", "created_at"),
    )
