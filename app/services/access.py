"""
Same-row ownership checks for todos and their files.

A user can access a todo when they created it or are assigned to it; only the
creator may delete it. The admin role grants nothing here.
"""
from sqlalchemy.orm import Session, joinedload
from app.models.user import User
from app.models.todo import Todo
from app.models.file import TodoFile
from app.services.errors import NotFoundOrForbidden


def can_access(user: User, todo: Todo) -> bool:
    return user.id in (todo.created_by_id, todo.assigned_to_id)


def can_delete(user: User, todo: Todo) -> bool:
    return user.id == todo.created_by_id


def can_access_file(user: User, file: TodoFile) -> bool:
    return can_access(user, file.todo)


def get_accessible_todo(db: Session, user: User, todo_id: int, *options) -> Todo:
    """
    Fetch a todo the user can access.

    Raises:
        NotFoundOrForbidden: the todo does not exist or the user is neither
            its creator nor its assignee
    """
    query = db.query(Todo)
    if options:
        query = query.options(*options)
    todo = query.filter(Todo.id == todo_id).first()
    if todo is None or not can_access(user, todo):
        raise NotFoundOrForbidden("Todo not found or access denied")
    return todo


def get_accessible_file(db: Session, user: User, file_id: int) -> TodoFile:
    file = (
        db.query(TodoFile)
        .options(joinedload(TodoFile.todo))
        .filter(TodoFile.id == file_id)
        .first()
    )
    if file is None or not can_access_file(user, file):
        raise NotFoundOrForbidden("File not found or access denied")
    return file
