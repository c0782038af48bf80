"""
Todo repository: listing, CRUD and ordering, always scoped to the caller.
"""
import logging
from typing import Iterable, List, Optional
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, joinedload, selectinload
from app.config.storage import LocalFileStorage
from app.models.todo import Todo, TodoStatus
from app.models.user import User, UserStatus
from app.schemas.todo import TodoCreate, TodoFilters, TodoOrderUpdate, TodoScope
from app.services.access import can_access, can_delete
from app.services.errors import AccessDenied, InvalidAssignee, NotFoundOrForbidden, ValidationError
from app.services.files import IncomingFile, commit_with_blobs, remove_blobs, store_batch, validate_batch

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "description", "status", "due_date", "order", "assigned_to_id")


def _with_relations():
    return (
        joinedload(Todo.created_by),
        joinedload(Todo.assigned_to),
        selectinload(Todo.files),
    )


def _load(db: Session, todo_id: int) -> Todo:
    return db.query(Todo).options(*_with_relations()).filter(Todo.id == todo_id).one()


def _require_active_assignee(db: Session, user_id) -> User:
    assignee = db.query(User).filter(User.id == user_id).first() if user_id is not None else None
    if assignee is None or assignee.status != UserStatus.ACTIVE:
        raise InvalidAssignee()
    return assignee


def _clean_title(title: Optional[str]) -> str:
    if title is None or not str(title).strip():
        raise ValidationError("title", "Title cannot be empty")
    return str(title).strip()


def _parse_status(value) -> TodoStatus:
    try:
        return TodoStatus(value)
    except ValueError:
        valid = ", ".join(s.value for s in TodoStatus)
        raise ValidationError("status", f"Invalid status. Valid values: {valid}")


def _escape_like(text: str) -> str:
    # Search is a literal substring match; LIKE wildcards in user text are escaped
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def list_todos(db: Session, user: User, filters: Optional[TodoFilters] = None) -> List[Todo]:
    filters = filters or TodoFilters()

    if filters.scope == TodoScope.CREATED:
        conditions = [Todo.created_by_id == user.id]
    elif filters.scope == TodoScope.ASSIGNED:
        conditions = [Todo.assigned_to_id == user.id]
    else:
        conditions = [or_(Todo.created_by_id == user.id, Todo.assigned_to_id == user.id)]

    if filters.status is not None:
        conditions.append(Todo.status == _parse_status(filters.status))

    search = (filters.search or "").strip()
    if search:
        pattern = f"%{_escape_like(search)}%"
        conditions.append(or_(
            Todo.title.ilike(pattern, escape="\\"),
            Todo.description.ilike(pattern, escape="\\"),
        ))

    return (
        db.query(Todo)
        .options(*_with_relations())
        .filter(and_(*conditions))
        .order_by(Todo.order.asc(), Todo.created_at.desc(), Todo.id.desc())
        .all()
    )


def get_todo(db: Session, user: User, todo_id: int) -> Todo:
    todo = db.query(Todo).options(*_with_relations()).filter(Todo.id == todo_id).first()
    if todo is None or not can_access(user, todo):
        raise NotFoundOrForbidden("Todo not found or access denied")
    return todo


def create_todo(
    db: Session,
    storage: LocalFileStorage,
    user: User,
    data: TodoCreate,
    files: Optional[List[IncomingFile]] = None,
) -> Todo:
    """
    Create a todo owned by `user`, optionally with attachments.

    The title, the assignee and every file are checked before anything is
    written; the todo and its file rows are committed together.
    """
    files = files or []
    title = _clean_title(data.title)
    _require_active_assignee(db, data.assigned_to_id)
    validate_batch(files, allow_empty=True)

    todo = Todo(
        title=title,
        description=data.description,
        due_date=data.due_date,
        created_by_id=user.id,
        assigned_to_id=data.assigned_to_id,
    )
    db.add(todo)

    written: List[str] = []
    if files:
        try:
            _, written = store_batch(db, storage, todo, files)
        except Exception:
            db.rollback()
            raise
    commit_with_blobs(db, storage, written)

    logger.info(f"User {user.id} created todo {todo.id} assigned to {todo.assigned_to_id} with {len(files)} file(s)")
    return _load(db, todo.id)


def update_todo(db: Session, user: User, todo_id: int, changes: dict) -> Todo:
    """Apply a partial update; only keys present in `changes` are touched"""
    todo = get_todo(db, user, todo_id)

    unknown = set(changes) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError(errors=[{"field": f, "message": "Field cannot be updated"} for f in sorted(unknown)])

    if "title" in changes:
        todo.title = _clean_title(changes["title"])
    if "description" in changes:
        todo.description = changes["description"]
    if "status" in changes:
        todo.status = _parse_status(changes["status"])
    if "due_date" in changes:
        todo.due_date = changes["due_date"]
    if "order" in changes:
        order = changes["order"]
        if isinstance(order, bool) or not isinstance(order, int):
            raise ValidationError("order", "Order must be an integer")
        todo.order = order
    if "assigned_to_id" in changes:
        assignee = _require_active_assignee(db, changes["assigned_to_id"])
        todo.assigned_to_id = assignee.id

    db.commit()
    return _load(db, todo.id)


def reorder_todos(db: Session, user: User, updates: Iterable[TodoOrderUpdate]) -> None:
    """
    Set `order` on several todos in one transaction.

    Every id must be accessible to the user, otherwise nothing is changed.
    """
    updates = list(updates)
    if not updates:
        return

    todo_ids = {update.id for update in updates}
    todos = db.query(Todo).filter(Todo.id.in_(todo_ids)).all()
    accessible = {todo.id: todo for todo in todos if can_access(user, todo)}

    if len(accessible) != len(todo_ids):
        raise AccessDenied("Access denied to some todos")

    try:
        for update in updates:
            accessible[update.id].order = update.order
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"User {user.id} reordered {len(todo_ids)} todo(s)")


def delete_todo(db: Session, storage: LocalFileStorage, user: User, todo_id: int) -> None:
    """
    Delete a todo together with its files. Only the creator may do this.

    Raises:
        NotFoundOrForbidden: unknown todo or the caller is unrelated to it
        AccessDenied: the caller is only the assignee
    """
    todo = db.query(Todo).options(selectinload(Todo.files)).filter(Todo.id == todo_id).first()
    if todo is None or not can_access(user, todo):
        raise NotFoundOrForbidden("Todo not found or access denied")
    if not can_delete(user, todo):
        raise AccessDenied("Only the creator can delete this todo")

    remove_blobs(storage, todo.files)
    db.delete(todo)
    db.commit()
    logger.info(f"User {user.id} deleted todo {todo_id}")


def list_assignable_users(db: Session) -> List[User]:
    return (
        db.query(User)
        .filter(User.status == UserStatus.ACTIVE)
        .order_by(User.full_name.asc())
        .all()
    )
