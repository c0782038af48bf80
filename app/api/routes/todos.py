from datetime import datetime
from fastapi import APIRouter, Depends, File as FastAPIFile, Form, Query, UploadFile, status
from sqlalchemy.orm import Session
from typing import List, Optional
from app.database.connection import get_db
from app.models.todo import TodoStatus
from app.models.user import User
from app.schemas.todo import (
    TodoCreate,
    TodoFilters,
    TodoReorderRequest,
    TodoResponse,
    TodoScope,
    TodoUpdate,
)
from app.schemas.user import UserSummary
from app.auth.dependencies import get_current_user
from app.config.helpers import read_uploads
from app.config.storage import LocalFileStorage, get_file_storage
from app.services import todos as todo_service

router = APIRouter(prefix="/todos", tags=["Todos"])

@router.get("/", response_model=List[TodoResponse])
def get_todos(
    scope: TodoScope = TodoScope.ALL,
    status_filter: Optional[TodoStatus] = Query(None, alias="status"),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Get todos the current user created or is assigned to
    - scope: all, created or assigned (default: all)
    - status: PENDING, IN_PROGRESS or COMPLETED
    - search: case-insensitive match on title or description
    """
    filters = TodoFilters(scope=scope, status=status_filter, search=search)
    return todo_service.list_todos(db, current_user, filters)

@router.post("/", response_model=TodoResponse, status_code=status.HTTP_201_CREATED)
def create_todo(
    assigned_to_id: int = Form(...),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    due_date: Optional[datetime] = Form(None),
    files: Optional[List[UploadFile]] = FastAPIFile(None),
    db: Session = Depends(get_db),
    storage: LocalFileStorage = Depends(get_file_storage),
    current_user: User = Depends(get_current_user)
):
    """
    Create a new todo (multipart form)
    - **title**: required, cannot be empty
    - **assigned_to_id**: an active user
    - **description**, **due_date**: optional
    - **files**: up to 5 attachments
    """
    data = TodoCreate(
        title=title,
        description=description,
        assigned_to_id=assigned_to_id,
        due_date=due_date
    )
    return todo_service.create_todo(db, storage, current_user, data, read_uploads(files))

@router.get("/users/assignable", response_model=List[UserSummary])
def get_assignable_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Active users a todo can be assigned to
    """
    return todo_service.list_assignable_users(db)

@router.patch("/reorder", response_model=dict)
def reorder_todos(
    reorder: TodoReorderRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Set the display order of several todos at once; all or nothing
    """
    todo_service.reorder_todos(db, current_user, reorder.todo_updates)
    return {"message": "Todo order updated successfully"}

@router.get("/{todo_id}", response_model=TodoResponse)
def get_todo(
    todo_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Get a specific todo by ID
    - **todo_id**: ID of the todo to retrieve
    """
    return todo_service.get_todo(db, current_user, todo_id)

@router.put("/{todo_id}", response_model=TodoResponse)
def update_todo(
    todo_id: int,
    todo_update: TodoUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Update a todo (partial update allowed)
    - **title**, **description**, **status**, **due_date**, **order**: optional
    - **assigned_to_id**: optional, must be an active user
    """
    changes = todo_update.model_dump(exclude_unset=True)
    return todo_service.update_todo(db, current_user, todo_id, changes)

@router.delete("/{todo_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_todo(
    todo_id: int,
    db: Session = Depends(get_db),
    storage: LocalFileStorage = Depends(get_file_storage),
    current_user: User = Depends(get_current_user)
):
    """
    Delete a todo and its attachments (creator only)

    - **todo_id**: ID of the todo to delete
    """
    todo_service.delete_todo(db, storage, current_user, todo_id)
    return None
