import logging
from typing import List
from fastapi import APIRouter, Depends, File as FastAPIFile, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from app.auth.dependencies import get_current_user
from app.config.helpers import read_uploads
from app.config.storage import LocalFileStorage, get_file_storage
from app.database.connection import get_db
from app.models.user import User
from app.schemas.file import TodoFileResponse, TodoFileWithTodoResponse
from app.services import files as file_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files", tags=["Files"])

@router.post("/upload/{todo_id}", response_model=dict, status_code=status.HTTP_201_CREATED)
def upload_files(
    todo_id: int,
    files: List[UploadFile] = FastAPIFile(...),
    db: Session = Depends(get_db),
    storage: LocalFileStorage = Depends(get_file_storage),
    current_user: User = Depends(get_current_user)
):
    """
    Attach up to 5 files to a todo; if one file is rejected none are stored
    """
    records = file_service.upload_files(db, storage, current_user, todo_id, read_uploads(files))
    return {
        "message": "Files uploaded successfully",
        "files": [TodoFileResponse.model_validate(record).model_dump(mode="json") for record in records]
    }

@router.get("/", response_model=List[TodoFileWithTodoResponse])
def list_my_files(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Files on every todo the current user created or is assigned to
    """
    return file_service.list_files_for_user(db, current_user)

@router.get("/todo/{todo_id}", response_model=List[TodoFileResponse])
def list_todo_files(
    todo_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return file_service.list_files_for_todo(db, current_user, todo_id)

@router.get("/download/{file_id}")
def download_file(
    file_id: int,
    db: Session = Depends(get_db),
    storage: LocalFileStorage = Depends(get_file_storage),
    current_user: User = Depends(get_current_user)
):
    """
    Stream a file with its original name and media type
    """
    file, path = file_service.open_for_download(db, storage, current_user, file_id)
    logger.info(f"User {current_user.id} downloading file {file.id} ({file.size} bytes)")
    return FileResponse(
        path=str(path),
        filename=file.original_name,
        media_type=file.mime_type
    )

@router.get("/{file_id}", response_model=TodoFileWithTodoResponse)
def get_file_info(
    file_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return file_service.get_file(db, current_user, file_id)

@router.delete("/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_file(
    file_id: int,
    db: Session = Depends(get_db),
    storage: LocalFileStorage = Depends(get_file_storage),
    current_user: User = Depends(get_current_user)
):
    """
    Delete an attachment; any party of the parent todo may do this
    """
    file_service.delete_file(db, storage, current_user, file_id)
    return None
