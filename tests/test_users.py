from __future__ import annotations

from conftest import API


def test_update_user_requires_name_and_email(client, make_user):
    user = make_user()

    response = client.patch(f"{API}/users/updateUser", json={"name": "Only Name"}, headers=user.headers)

    assert response.status_code == 400
    assert response.get_json()["msg"] == "Please provide all values"


def test_update_user_profile(client, make_user):
    user = make_user(name="Before Name")

    response = client.patch(
        f"{API}/users/updateUser",
        json={
            "name": "After Name",
            "email": user.email,
            "bio": "Backend tinkerer",
            "skills": ["Python", "Flask"],
            "experience": "advanced",
            "workStyle": "backend",
            "github": "https://github.com/after",
        },
        headers=user.headers,
    )

    assert response.status_code == 200
    assert response.get_json()["user"] == {
        "name": "After Name",
        "userId": user.id,
        "role": "user",
        "email": user.email,
    }

    profile = client.get(f"{API}/users/{user.id}", headers=user.headers).get_json()["user"]
    assert profile["skills"] == ["Python", "Flask"]
    assert profile["workStyle"] == "backend"
    assert profile["experience"] == "advanced"


def test_update_user_rejects_invalid_enum(client, make_user):
    user = make_user()

    response = client.patch(
        f"{API}/users/updateUser",
        json={"name": "Valid Name", "email": user.email, "experience": "wizard"},
        headers=user.headers,
    )

    assert response.status_code == 400


def test_update_user_duplicate_email(client, make_user):
    first = make_user()
    second = make_user()

    response = client.patch(
        f"{API}/users/updateUser",
        json={"name": "Second User", "email": first.email},
        headers=second.headers,
    )

    assert response.status_code == 400
    assert response.get_json()["msg"] == "Email already exists"


def test_update_password(client, make_user):
    user = make_user()

    wrong = client.patch(
        f"{API}/users/updateUserPassword",
        json={"oldPassword": "not-it", "newPassword": "another-one"},
        headers=user.headers,
    )
    assert wrong.status_code == 401

    numeric = client.patch(
        f"{API}/users/updateUserPassword",
        json={"oldPassword": 123456, "newPassword": "another-one"},
        headers=user.headers,
    )
    assert numeric.status_code == 401

    missing = client.patch(f"{API}/users/updateUserPassword", json={}, headers=user.headers)
    assert missing.status_code == 400

    ok = client.patch(
        f"{API}/users/updateUserPassword",
        json={"oldPassword": "secret123", "newPassword": "another-one"},
        headers=user.headers,
    )
    assert ok.status_code == 200
    assert ok.get_json()["msg"] == "Success! Password Updated."


def test_get_single_user_permissions(client, make_user, admin):
    owner = make_user()
    other = make_user()

    assert client.get(f"{API}/users/{owner.id}", headers=owner.headers).status_code == 200
    assert client.get(f"{API}/users/{owner.id}", headers=admin.headers).status_code == 200

    forbidden = client.get(f"{API}/users/{owner.id}", headers=other.headers)
    assert forbidden.status_code == 403

    missing = client.get(f"{API}/users/does-not-exist", headers=admin.headers)
    assert missing.status_code == 404


def test_list_users_is_admin_only(client, make_user, admin):
    user = make_user()

    assert client.get(f"{API}/users", headers=user.headers).status_code == 403

    response = client.get(f"{API}/users", headers=admin.headers)
    assert response.status_code == 200
    roles = {item["role"] for item in response.get_json()["users"]}
    assert roles == {"user"}


def test_search_users(client, make_user):
    searcher = make_user()
    make_user(name="Python Pro", skills=["Python", "Django"], experience="advanced")
    make_user(name="Design Dana", skills=["Figma"], bio="Loves python scripting too")
    make_user(name="Hidden Mod", skills=["Python"], role="moderator")

    by_skill = client.get(f"{API}/users/search?skills=python,go", headers=searcher.headers).get_json()
    assert [u["name"] for u in by_skill["users"]] == ["Python Pro"]

    by_query = client.get(f"{API}/users/search?query=PYTHON", headers=searcher.headers).get_json()
    assert {u["name"] for u in by_query["users"]} == {"Python Pro", "Design Dana"}
    assert by_query["count"] == 2

    by_level = client.get(f"{API}/users/search?experience=advanced", headers=searcher.headers).get_json()
    assert [u["name"] for u in by_level["users"]] == ["Python Pro"]


def test_search_is_capped(client, make_user):
    searcher = make_user()
    for index in range(22):
        make_user(name=f"Member {index:02d}")

    response = client.get(f"{API}/users/search?query=Member", headers=searcher.headers)

    assert response.get_json()["count"] == 20
