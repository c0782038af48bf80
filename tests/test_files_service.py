"""Tests for attachment upload, download and deletion."""
import pytest

from app.config.settings import settings
from app.models.file import TodoFile
from app.models.todo import Todo
from app.schemas.todo import TodoCreate
from app.services import files as file_service
from app.services import todos as todo_service
from app.services.errors import (
    FileTooLarge,
    NotFoundOrForbidden,
    StorageInconsistency,
    UnsupportedFileType,
    ValidationError,
)
from app.services.files import IncomingFile


def _pdf(name="doc.pdf", size=10):
    return IncomingFile(original_name=name, content_type="application/pdf", data=b"x" * size)


def _stored(storage):
    if not storage.root.exists():
        return []
    return list(storage.root.iterdir())


def test_upload_stores_blobs_under_generated_names(db, storage, make_user, make_todo):
    user = make_user()
    todo = make_todo(user)

    records = file_service.upload_files(db, storage, user, todo.id, [_pdf("../../etc/passwd.pdf"), _pdf("b.txt")])

    assert len(records) == 2
    assert records[0].original_name == "../../etc/passwd.pdf"
    assert "/" not in records[0].filename
    assert records[0].filename != records[0].original_name
    assert {p.name for p in _stored(storage)} == {r.filename for r in records}
    assert all(p.parent == storage.root for p in _stored(storage))


def test_batch_with_oversize_member_persists_nothing(db, storage, make_user, make_todo):
    user = make_user()
    todo = make_todo(user)
    batch = [_pdf("a.pdf"), _pdf("big.pdf", size=settings.MAX_FILE_SIZE + 1), _pdf("c.pdf")]

    with pytest.raises(FileTooLarge):
        file_service.upload_files(db, storage, user, todo.id, batch)

    assert db.query(TodoFile).count() == 0
    assert _stored(storage) == []


def test_batch_with_unsupported_type_persists_nothing(db, storage, make_user, make_todo):
    user = make_user()
    todo = make_todo(user)
    batch = [_pdf("a.pdf"), IncomingFile("script.exe", "application/octet-stream", b"MZ")]

    with pytest.raises(UnsupportedFileType):
        file_service.upload_files(db, storage, user, todo.id, batch)

    assert db.query(TodoFile).count() == 0
    assert _stored(storage) == []


def test_upload_batch_size_is_bounded(db, storage, make_user, make_todo):
    user = make_user()
    todo = make_todo(user)
    batch = [_pdf(f"f{i}.pdf") for i in range(settings.MAX_FILES_PER_UPLOAD + 1)]

    with pytest.raises(ValidationError):
        file_service.upload_files(db, storage, user, todo.id, batch)
    with pytest.raises(ValidationError):
        file_service.upload_files(db, storage, user, todo.id, [])


def test_upload_requires_access_to_todo(db, storage, make_user, make_todo):
    owner = make_user()
    stranger = make_user()
    todo = make_todo(owner)

    with pytest.raises(NotFoundOrForbidden):
        file_service.upload_files(db, storage, stranger, todo.id, [_pdf()])
    assert _stored(storage) == []


def test_create_todo_with_failing_file_creates_no_todo(db, storage, make_user):
    user = make_user()
    files = [_pdf("ok.pdf"), _pdf("huge.pdf", size=settings.MAX_FILE_SIZE + 1)]

    with pytest.raises(FileTooLarge):
        todo_service.create_todo(db, storage, user, TodoCreate(title="With files", assigned_to_id=user.id), files)

    assert db.query(Todo).count() == 0
    assert _stored(storage) == []


def test_create_todo_with_files(db, storage, make_user):
    user = make_user()
    todo = todo_service.create_todo(
        db, storage, user, TodoCreate(title="With files", assigned_to_id=user.id), [_pdf("one.pdf"), _pdf("two.pdf")]
    )
    assert todo.file_count == 2
    assert {f.original_name for f in todo.files} == {"one.pdf", "two.pdf"}


def test_list_files_for_user_spans_accessible_todos(db, storage, make_user, make_todo):
    alice = make_user()
    bob = make_user()
    mine = make_todo(alice)
    assigned = make_todo(bob, alice)
    hidden = make_todo(bob)
    file_service.upload_files(db, storage, alice, mine.id, [_pdf("mine.pdf")])
    file_service.upload_files(db, storage, bob, assigned.id, [_pdf("assigned.pdf")])
    file_service.upload_files(db, storage, bob, hidden.id, [_pdf("hidden.pdf")])

    names = {f.original_name for f in file_service.list_files_for_user(db, alice)}

    assert names == {"mine.pdf", "assigned.pdf"}
    assert [f.original_name for f in file_service.list_files_for_todo(db, alice, assigned.id)] == ["assigned.pdf"]


def test_download_reports_missing_blob(db, storage, make_user, make_todo):
    user = make_user()
    todo = make_todo(user)
    record = file_service.upload_files(db, storage, user, todo.id, [_pdf()])[0]

    file, path = file_service.open_for_download(db, storage, user, record.id)
    assert path.read_bytes() == b"x" * 10

    path.unlink()
    with pytest.raises(StorageInconsistency) as exc:
        file_service.open_for_download(db, storage, user, record.id)
    assert exc.value.status_code == 404


def test_assignee_can_delete_file(db, storage, make_user, make_todo):
    creator = make_user()
    assignee = make_user()
    todo = make_todo(creator, assignee)
    record = file_service.upload_files(db, storage, creator, todo.id, [_pdf()])[0]

    file_service.delete_file(db, storage, assignee, record.id)

    assert db.query(TodoFile).count() == 0
    assert _stored(storage) == []


def test_delete_file_with_missing_blob_still_removes_record(db, storage, make_user, make_todo):
    user = make_user()
    todo = make_todo(user)
    record = file_service.upload_files(db, storage, user, todo.id, [_pdf()])[0]
    storage.resolve(record.filename).unlink()

    file_service.delete_file(db, storage, user, record.id)

    assert db.query(TodoFile).count() == 0


def test_delete_file_survives_storage_error(db, storage, make_user, make_todo, monkeypatch):
    user = make_user()
    todo = make_todo(user)
    record = file_service.upload_files(db, storage, user, todo.id, [_pdf()])[0]

    def broken_delete(name):
        raise PermissionError("read-only filesystem")

    monkeypatch.setattr(storage, "delete", broken_delete)
    file_service.delete_file(db, storage, user, record.id)

    assert db.query(TodoFile).count() == 0


def test_delete_todo_cascades_to_files(db, storage, make_user, make_todo):
    user = make_user()
    todo = make_todo(user)
    file_service.upload_files(db, storage, user, todo.id, [_pdf("a.pdf"), _pdf("b.pdf")])

    todo_service.delete_todo(db, storage, user, todo.id)

    assert db.query(TodoFile).count() == 0
    assert _stored(storage) == []


def test_stranger_cannot_touch_file(db, storage, make_user, make_todo):
    owner = make_user()
    stranger = make_user()
    todo = make_todo(owner)
    record = file_service.upload_files(db, storage, owner, todo.id, [_pdf()])[0]

    with pytest.raises(NotFoundOrForbidden):
        file_service.open_for_download(db, storage, stranger, record.id)
    with pytest.raises(NotFoundOrForbidden):
        file_service.delete_file(db, storage, stranger, record.id)
