"""
Attachment handling for todos.

Uploads are validated as a whole batch before anything is written. Blobs are
written first and removed again if a later write or the commit fails, so a
rejected batch leaves neither rows nor stored files behind.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload
from app.config.settings import settings
from app.config.storage import LocalFileStorage, StorageObjectMissing
from app.config.validators import is_allowed_attachment
from app.models.file import TodoFile
from app.models.todo import Todo
from app.models.user import User
from app.services.access import get_accessible_file, get_accessible_todo
from app.services.errors import (
    FileTooLarge,
    StorageInconsistency,
    UnsupportedFileType,
    ValidationError,
)

logger = logging.getLogger(__name__)


@dataclass
class IncomingFile:
    """An uploaded file as received from the client"""
    original_name: str
    content_type: Optional[str]
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def validate_batch(files: List[IncomingFile], allow_empty: bool = False) -> None:
    if not files:
        if allow_empty:
            return
        raise ValidationError("files", "No files uploaded")

    if len(files) > settings.MAX_FILES_PER_UPLOAD:
        raise ValidationError("files", f"At most {settings.MAX_FILES_PER_UPLOAD} files per upload")

    for incoming in files:
        if incoming.size > settings.MAX_FILE_SIZE:
            raise FileTooLarge(
                f"{incoming.original_name} exceeds the {settings.MAX_FILE_SIZE} byte limit"
            )
        if not is_allowed_attachment(incoming.original_name, incoming.content_type):
            raise UnsupportedFileType(f"File type not allowed: {incoming.original_name}")


def remove_blobs(storage: LocalFileStorage, files: Iterable[TodoFile]) -> None:
    """Best-effort removal of stored bytes; failures are logged, not raised"""
    for file in files:
        try:
            storage.delete(file.filename)
        except StorageObjectMissing:
            logger.warning(f"Stored file already missing for file {file.id} ({file.filename})")
        except OSError as e:
            logger.warning(f"Could not remove stored file {file.filename}: {e}")


def _discard_written(storage: LocalFileStorage, names: List[str]) -> None:
    for name in names:
        try:
            storage.delete(name)
        except OSError as e:
            logger.warning(f"Could not clean up stored file {name}: {e}")


def store_batch(db: Session, storage: LocalFileStorage, todo: Todo, files: List[IncomingFile]) -> Tuple[List[TodoFile], List[str]]:
    """
    Write a validated batch to storage and stage its metadata rows.

    The caller commits. Returns the staged records and the storage names that
    were written, so the caller can discard them if the commit fails.
    """
    written: List[str] = []
    records: List[TodoFile] = []
    try:
        for incoming in files:
            name = storage.generate_name(incoming.original_name)
            storage.save(name, incoming.data)
            written.append(name)
            record = TodoFile(
                filename=name,
                original_name=incoming.original_name,
                path=storage.relative_path(name),
                size=incoming.size,
                mime_type=incoming.content_type or "application/octet-stream",
                todo=todo,
            )
            db.add(record)
            records.append(record)
    except Exception:
        _discard_written(storage, written)
        raise
    return records, written


def commit_with_blobs(db: Session, storage: LocalFileStorage, written: List[str]) -> None:
    """Commit the session; on failure roll back and drop the blobs written for it"""
    try:
        db.commit()
    except Exception:
        db.rollback()
        _discard_written(storage, written)
        raise


def upload_files(db: Session, storage: LocalFileStorage, user: User, todo_id: int, files: List[IncomingFile]) -> List[TodoFile]:
    todo = get_accessible_todo(db, user, todo_id)
    validate_batch(files)

    records, written = store_batch(db, storage, todo, files)
    commit_with_blobs(db, storage, written)
    for record in records:
        db.refresh(record)

    logger.info(f"User {user.id} uploaded {len(records)} file(s) to todo {todo.id}")
    return records


def list_files_for_todo(db: Session, user: User, todo_id: int) -> List[TodoFile]:
    todo = get_accessible_todo(db, user, todo_id)
    return (
        db.query(TodoFile)
        .filter(TodoFile.todo_id == todo.id)
        .order_by(TodoFile.created_at.desc(), TodoFile.id.desc())
        .all()
    )


def list_files_for_user(db: Session, user: User) -> List[TodoFile]:
    """Files attached to every todo the user created or is assigned"""
    return (
        db.query(TodoFile)
        .join(TodoFile.todo)
        .options(
            joinedload(TodoFile.todo).joinedload(Todo.created_by),
            joinedload(TodoFile.todo).joinedload(Todo.assigned_to),
        )
        .filter(or_(Todo.created_by_id == user.id, Todo.assigned_to_id == user.id))
        .order_by(TodoFile.created_at.desc(), TodoFile.id.desc())
        .all()
    )


def get_file(db: Session, user: User, file_id: int) -> TodoFile:
    return get_accessible_file(db, user, file_id)


def open_for_download(db: Session, storage: LocalFileStorage, user: User, file_id: int) -> Tuple[TodoFile, Path]:
    """
    Resolve a file the user may read to its stored path.

    Raises:
        NotFoundOrForbidden: unknown file or no access to its todo
        StorageInconsistency: the record exists but the bytes do not
    """
    file = get_accessible_file(db, user, file_id)
    try:
        path = storage.resolve(file.filename)
    except StorageObjectMissing:
        logger.error(f"File {file.id} exists in database but not on disk: {file.filename}")
        raise StorageInconsistency("File not found")
    return file, path


def delete_file(db: Session, storage: LocalFileStorage, user: User, file_id: int) -> None:
    """Any party of the parent todo may delete an attachment"""
    file = get_accessible_file(db, user, file_id)
    remove_blobs(storage, [file])
    db.delete(file)
    db.commit()
    logger.info(f"User {user.id} deleted file {file_id}")
