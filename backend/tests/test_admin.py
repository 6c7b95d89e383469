from conftest import auth_header, upload


def admin_users(client, token):
    return client.get("/api/admin/users", headers=auth_header(token))


def test_admin_endpoints_reject_regular_users(client, alice):
    headers = auth_header(alice["token"])

    for response in (
        client.get("/api/admin/users", headers=headers),
        client.get("/api/admin/stats", headers=headers),
        client.put("/api/admin/users/1/role", json={"role": "admin"}, headers=headers),
        client.delete("/api/admin/users/1", headers=headers),
    ):
        assert response.status_code == 403
        assert response.json() == {"error": "Admin access required"}


def test_admin_endpoints_require_token(client):
    response = client.get("/api/admin/users")

    assert response.status_code == 401
    assert response.json() == {"error": "Access token required"}


def test_list_users_hides_passwords_and_is_newest_first(client, admin_token, alice):
    response = admin_users(client, admin_token)

    assert response.status_code == 200
    users = response.json()
    assert [u["username"] for u in users] == ["alice", "admin"]
    assert all("password" not in u for u in users)
    assert users[1]["role"] == "admin"


def test_promoted_user_gets_admin_access_with_new_token(client, admin_token, alice):
    response = client.put(
        f"/api/admin/users/{alice['user']['id']}/role",
        json={"role": "admin"},
        headers=auth_header(admin_token),
    )
    assert response.status_code == 200
    assert response.json() == {"message": "User role updated successfully"}

    # The old token still carries role=user until it expires
    assert admin_users(client, alice["token"]).status_code == 403

    fresh = client.post("/api/login", json={"username": "alice", "password": "pw1"}).json()
    assert fresh["user"]["role"] == "admin"
    assert admin_users(client, fresh["token"]).status_code == 200


def test_demoted_admin_keeps_access_until_token_expires(client, admin_token, alice):
    client.put(
        f"/api/admin/users/{alice['user']['id']}/role",
        json={"role": "admin"},
        headers=auth_header(admin_token),
    )
    promoted = client.post("/api/login", json={"username": "alice", "password": "pw1"}).json()

    client.put(
        f"/api/admin/users/{alice['user']['id']}/role",
        json={"role": "user"},
        headers=auth_header(admin_token),
    )

    assert admin_users(client, promoted["token"]).status_code == 200


def test_role_update_rejects_unknown_role(client, admin_token, alice):
    for body in ({"role": "superuser"}, {"role": ""}, {}):
        response = client.put(
            f"/api/admin/users/{alice['user']['id']}/role",
            json=body,
            headers=auth_header(admin_token),
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid role"}

    roles = {u["username"]: u["role"] for u in admin_users(client, admin_token).json()}
    assert roles["alice"] == "user"


def test_role_update_for_missing_user_is_not_found(client, admin_token):
    response = client.put(
        "/api/admin/users/999/role", json={"role": "admin"}, headers=auth_header(admin_token)
    )

    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}


def test_admin_cannot_delete_own_account(client, admin_token):
    me = next(u for u in admin_users(client, admin_token).json() if u["username"] == "admin")

    response = client.delete(f"/api/admin/users/{me['id']}", headers=auth_header(admin_token))

    assert response.status_code == 400
    assert response.json() == {"error": "Cannot delete your own account"}
    assert [u["username"] for u in admin_users(client, admin_token).json()] == ["admin"]


def test_delete_missing_user_is_not_found(client, admin_token):
    response = client.delete("/api/admin/users/999", headers=auth_header(admin_token))

    assert response.status_code == 404


def test_deleted_users_content_survives_without_owner(client, admin_token, alice, bob):
    file_id = upload(client, alice["token"]).json()["id"]
    client.post(
        f"/api/files/{file_id}/comments",
        json={"content": "mine"},
        headers=auth_header(alice["token"]),
    )

    response = client.delete(f"/api/admin/users/{alice['user']['id']}", headers=auth_header(admin_token))
    assert response.status_code == 200
    assert response.json() == {"message": "User deleted successfully"}

    file_record = client.get(f"/api/files/{file_id}").json()
    assert file_record["uploaded_by"] is None
    assert file_record["uploader_name"] is None

    comments = client.get(f"/api/files/{file_id}/comments").json()
    assert len(comments) == 1
    assert comments[0]["user_id"] is None
    assert comments[0]["username"] is None

    # With no owner left, only an admin may remove the file
    forbidden = client.delete(f"/api/files/{file_id}", headers=auth_header(bob["token"]))
    assert forbidden.status_code == 403
    allowed = client.delete(f"/api/files/{file_id}", headers=auth_header(admin_token))
    assert allowed.status_code == 200


def test_stats_counts_everything(client, admin_token, alice, bob):
    file_id = upload(client, alice["token"]).json()["id"]
    upload(client, bob["token"])
    client.post(
        f"/api/files/{file_id}/comments",
        json={"content": "hi"},
        headers=auth_header(bob["token"]),
    )

    response = client.get("/api/admin/stats", headers=auth_header(admin_token))

    assert response.status_code == 200
    assert response.json() == {"total_users": 3, "total_files": 2, "total_comments": 1}
