from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from app.models.todo import TodoStatus

class TodoFileResponse(BaseModel):
    """Schema for attachment metadata"""
    id: int
    filename: str
    original_name: str
    path: str
    size: int
    mime_type: str
    todo_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class FileUserRef(BaseModel):
    id: int
    full_name: str

    class Config:
        from_attributes = True

class FileTodoSummary(BaseModel):
    """Parent todo as shown next to a file"""
    id: int
    title: str
    status: TodoStatus
    created_by: FileUserRef
    assigned_to: FileUserRef

    class Config:
        from_attributes = True

class TodoFileWithTodoResponse(TodoFileResponse):
    todo: FileTodoSummary
