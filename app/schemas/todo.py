from enum import Enum
from pydantic import BaseModel, computed_field
from typing import List, Optional
from datetime import datetime
from app.models.todo import TodoStatus
from app.schemas.file import TodoFileResponse
from app.schemas.user import UserSummary

class TodoScope(str, Enum):
    ALL = "all"
    CREATED = "created"
    ASSIGNED = "assigned"

class TodoFilters(BaseModel):
    """Filters for listing the caller's todos"""
    scope: TodoScope = TodoScope.ALL
    status: Optional[TodoStatus] = None
    search: Optional[str] = None

class TodoCreate(BaseModel):
    """Schema for creating a new todo; the title is checked by the todo service"""
    title: Optional[str] = None
    description: Optional[str] = None
    assigned_to_id: int
    due_date: Optional[datetime] = None

class TodoUpdate(BaseModel):
    """Schema for updating a todo; only fields that are sent change"""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TodoStatus] = None
    due_date: Optional[datetime] = None
    order: Optional[int] = None
    assigned_to_id: Optional[int] = None

class TodoOrderUpdate(BaseModel):
    id: int
    order: int

class TodoReorderRequest(BaseModel):
    """Schema for reordering several todos at once"""
    todo_updates: List[TodoOrderUpdate]

class TodoResponse(BaseModel):
    """Schema for todo response, with creator, assignee and files inlined"""
    id: int
    title: str
    description: Optional[str] = None
    status: TodoStatus
    due_date: Optional[datetime] = None
    order: int
    created_by_id: int
    assigned_to_id: int
    created_by: UserSummary
    assigned_to: UserSummary
    files: List[TodoFileResponse] = []
    created_at: datetime
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def file_count(self) -> int:
        return len(self.files)

    class Config:
        from_attributes = True
