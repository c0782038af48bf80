from enum import Enum
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database.connection import Base

class TodoStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

class Todo(Base):
    """Todo table; every todo has a creator and an assignee"""
    __tablename__ = "todos"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(SQLEnum(TodoStatus), default=TodoStatus.PENDING, nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=True)
    order = Column(Integer, default=0, nullable=False)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    assigned_to_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    created_by = relationship("User", foreign_keys=[created_by_id], back_populates="created_todos")
    assigned_to = relationship("User", foreign_keys=[assigned_to_id], back_populates="assigned_todos")
    files = relationship(
        "TodoFile",
        back_populates="todo",
        cascade="all, delete-orphan",
        order_by="TodoFile.id",
    )

    @property
    def file_count(self) -> int:
        return len(self.files)
