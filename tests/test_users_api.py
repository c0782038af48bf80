"""Integration tests for profile and admin account endpoints."""
from app.models.file import TodoFile
from app.models.todo import Todo
from app.models.user import User, UserRole

PASSWORD = "Secret123!"


def test_admin_lists_users_with_todo_counts(client, make_user, make_todo, auth_headers):
    admin = make_user(role=UserRole.ADMIN)
    alice = make_user(name="Alice")
    bob = make_user(name="Bob")
    make_todo(alice, bob)
    make_todo(alice, alice)

    response = client.get("/admin/users", headers=auth_headers(admin))

    assert response.status_code == 200
    by_id = {u["id"]: u for u in response.json()}
    assert by_id[alice.id]["created_todo_count"] == 2
    assert by_id[alice.id]["assigned_todo_count"] == 1
    assert by_id[bob.id]["created_todo_count"] == 0
    assert by_id[bob.id]["assigned_todo_count"] == 1


def test_non_admin_cannot_use_admin_endpoints(client, make_user, auth_headers):
    user = make_user()
    other = make_user()

    assert client.get("/admin/users", headers=auth_headers(user)).status_code == 403
    response = client.patch(
        f"/admin/users/{other.id}/status", json={"status": "DISABLED"}, headers=auth_headers(user)
    )
    assert response.status_code == 403
    assert client.delete(f"/admin/users/{other.id}", headers=auth_headers(user)).status_code == 403


def test_disabled_user_cannot_log_in_until_reenabled(client, make_user, auth_headers):
    admin = make_user(role=UserRole.ADMIN)
    user = make_user()
    login = {"email": user.email, "password": PASSWORD}

    disabled = client.patch(f"/admin/users/{user.id}/status", json={"status": "DISABLED"}, headers=auth_headers(admin))
    assert disabled.status_code == 200
    assert disabled.json()["status"] == "DISABLED"
    assert client.post("/auth/login", json=login).status_code == 403

    client.patch(f"/admin/users/{user.id}/status", json={"status": "ACTIVE"}, headers=auth_headers(admin))
    assert client.post("/auth/login", json=login).status_code == 200


def test_delete_user_removes_their_todos_and_files(client, db, storage, make_user, make_todo, auth_headers):
    admin = make_user(role=UserRole.ADMIN)
    doomed = make_user()
    survivor = make_user()
    created = make_todo(doomed, survivor)
    assigned = make_todo(survivor, doomed)
    untouched = make_todo(survivor, survivor)
    upload = client.post(
        f"/files/upload/{created.id}",
        files=[("files", ("a.txt", b"data", "text/plain"))],
        headers=auth_headers(doomed),
    )
    assert upload.status_code == 201

    response = client.delete(f"/admin/users/{doomed.id}", headers=auth_headers(admin))

    assert response.status_code == 204
    db.expire_all()
    assert db.get(User, doomed.id) is None
    assert {t.id for t in db.query(Todo).all()} == {untouched.id}
    assert db.query(TodoFile).count() == 0
    assert list(storage.root.iterdir()) == []
    assert db.get(Todo, assigned.id) is None


def test_admin_cannot_delete_self(client, make_user, auth_headers):
    admin = make_user(role=UserRole.ADMIN)
    assert client.delete(f"/admin/users/{admin.id}", headers=auth_headers(admin)).status_code == 400


def test_profile_read_and_update(client, make_user, auth_headers):
    user = make_user(name="Old Name")
    other = make_user()

    assert client.get(f"/users/{user.id}", headers=auth_headers(user)).json()["full_name"] == "Old Name"
    assert client.get(f"/users/{other.id}", headers=auth_headers(user)).status_code == 403

    response = client.put(
        f"/users/{user.id}", json={"full_name": "New Name", "email": "new@example.com"}, headers=auth_headers(user)
    )
    assert response.status_code == 200
    assert response.json()["email"] == "new@example.com"

    taken = client.put(f"/users/{user.id}", json={"email": other.email}, headers=auth_headers(user))
    assert taken.status_code == 400


def test_admin_may_view_any_profile(client, make_user, auth_headers):
    admin = make_user(role=UserRole.ADMIN)
    user = make_user()
    assert client.get(f"/users/{user.id}", headers=auth_headers(admin)).status_code == 200


def test_change_password(client, make_user, auth_headers):
    user = make_user()

    wrong = client.put(
        f"/users/{user.id}/password",
        json={"current_password": "Nope1234!", "new_password": "Another123!"},
        headers=auth_headers(user),
    )
    assert wrong.status_code == 400

    ok = client.put(
        f"/users/{user.id}/password",
        json={"current_password": PASSWORD, "new_password": "Another123!"},
        headers=auth_headers(user),
    )
    assert ok.status_code == 200
    assert client.post("/auth/login", json={"email": user.email, "password": "Another123!"}).status_code == 200


def test_profile_picture_upload(client, profile_storage, make_user, auth_headers):
    user = make_user()

    first = client.post(
        f"/users/{user.id}/profile-picture",
        files={"profile_picture": ("me.png", b"\x89PNG", "image/png")},
        headers=auth_headers(user),
    )
    assert first.status_code == 200
    assert first.json()["profile_picture"].startswith("/uploads/profiles/")

    second = client.post(
        f"/users/{user.id}/profile-picture",
        files={"profile_picture": ("me.gif", b"GIF89a", "image/gif")},
        headers=auth_headers(user),
    )
    assert second.status_code == 200
    assert [p.name for p in profile_storage.root.iterdir()] == [second.json()["profile_picture"].rsplit("/", 1)[-1]]

    rejected = client.post(
        f"/users/{user.id}/profile-picture",
        files={"profile_picture": ("cv.pdf", b"%PDF", "application/pdf")},
        headers=auth_headers(user),
    )
    assert rejected.status_code == 415


def test_delete_user_removes_profile_picture(client, profile_storage, make_user, auth_headers):
    admin = make_user(role=UserRole.ADMIN)
    doomed = make_user()
    uploaded = client.post(
        f"/users/{doomed.id}/profile-picture",
        files={"profile_picture": ("me.png", b"\x89PNG", "image/png")},
        headers=auth_headers(doomed),
    )
    assert uploaded.status_code == 200
    assert len(list(profile_storage.root.iterdir())) == 1

    response = client.delete(f"/admin/users/{doomed.id}", headers=auth_headers(admin))

    assert response.status_code == 204
    assert list(profile_storage.root.iterdir()) == []
