"""Tests for the 2025 calendar routes."""

import pytest

from helpers import legacy_headers
from reconstruct.models import CalendarTask


def entry(**overrides):
    body = {
        "user_name": "Ann",
        "email": "ann@example.com",
        "task_date": "2025-03-01",
        "task_type": 2,
        "task_description": "Yoga",
        "color_code": "selected-color-2",
        "theme": "animal",
    }
    body.update(overrides)
    return body


def test_save_creates_then_updates_by_date_and_theme(client, fetch_rows):
    created = client.post("/api/calendar/save", json=entry(), headers=legacy_headers())
    assert created.status_code == 201
    assert created.json()["action"] == "created"

    updated = client.post("/api/calendar/save", json=entry(task_description="Swim"), headers=legacy_headers())
    assert updated.status_code == 200
    assert updated.json()["id"] == created.json()["id"]

    row, = fetch_rows(CalendarTask)
    assert row.task_description == "Swim"


def test_save_missing_fields_on_create(client):
    response = client.post(
        "/api/calendar/save", json=entry(color_code=None, task_description=""), headers=legacy_headers()
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Missing required fields: task_description, color_code"


def test_save_for_another_user_forbidden(client):
    response = client.post("/api/calendar/save", json=entry(email="bob@example.com"), headers=legacy_headers())
    assert response.status_code == 403
    assert response.json()["message"] == "Authorization mismatch: Cannot save calendar tasks for another user"


def test_save_by_id_updates_and_deletes(client, fetch_rows):
    task_id = client.post("/api/calendar/save", json=entry(), headers=legacy_headers()).json()["id"]

    updated = client.post(
        "/api/calendar/save",
        json={"user_name": "Ann", "email": "ann@example.com", "id": task_id, "task_description": "Stretch"},
        headers=legacy_headers(),
    )
    assert updated.status_code == 200
    row, = fetch_rows(CalendarTask)
    assert row.task_description == "Stretch"
    assert row.task_type == 2

    deleted = client.post(
        "/api/calendar/save",
        json={"user_name": "Ann", "email": "ann@example.com", "id": task_id, "delete": True},
        headers=legacy_headers(),
    )
    assert deleted.json() == {"success": True, "message": "Calendar task deleted successfully", "id": task_id}
    assert fetch_rows(CalendarTask) == []


def test_save_by_id_of_someone_else_not_found(client):
    bob = legacy_headers("Bob", "bob@example.com")
    task_id = client.post(
        "/api/calendar/save", json=entry(user_name="Bob", email="bob@example.com"), headers=bob
    ).json()["id"]

    response = client.post(
        "/api/calendar/save",
        json={"user_name": "Ann", "email": "ann@example.com", "id": task_id, "delete": True},
        headers=legacy_headers(),
    )
    assert response.status_code == 404
    assert response.json()["message"] == "Calendar task not found or not owned by this user"


def test_load_normalizes_color_and_type(client):
    client.post("/api/calendar/save", json=entry(color_code="selected-color-5", task_type=2), headers=legacy_headers())
    client.post(
        "/api/calendar/save",
        json=entry(task_date="2025-03-02", color_code="blue", task_type=3),
        headers=legacy_headers(),
    )

    response = client.get("/api/calendar/load", params={"theme": "animal"}, headers=legacy_headers())

    assert response.status_code == 200
    tasks = response.json()["tasks"]
    assert [(t["task_date"], t["color_code"], t["task_type"]) for t in tasks] == [
        ("2025-03-01", "selected-color-5", 5),
        ("2025-03-02", "selected-color-3", 3),
    ]


def test_load_requires_theme(client):
    response = client.get("/api/calendar/load", headers=legacy_headers())
    assert response.status_code == 400
    assert response.json()["tasks"] == []


def test_compat_load_defaults_to_animal_theme(client):
    client.post("/api/calendar/save", json=entry(), headers=legacy_headers())
    client.post("/api/calendar/save", json=entry(theme="space"), headers=legacy_headers())

    response = client.get("/calendar2025/tasks", headers=legacy_headers())

    assert [t["theme"] for t in response.json()["tasks"]] == ["animal"]


def test_compat_save_normalizes_before_writing(client, fetch_rows):
    response = client.post(
        "/calendar2025/tasks", json=entry(color_code="selected-color-4", task_type=1), headers=legacy_headers()
    )

    assert response.status_code == 201
    row, = fetch_rows(CalendarTask)
    assert response.json()["task"] == {"id": row.id}
    assert (row.color_code, row.task_type) == ("selected-color-4", 4)


def test_compat_update_type_only_regenerates_color(client, fetch_rows):
    task_id = client.post("/calendar2025/tasks", json=entry(), headers=legacy_headers()).json()["task"]["id"]

    response = client.put(
        f"/calendar2025/tasks/{task_id}",
        json={"user_name": "Ann", "email": "ann@example.com", "task_type": 6},
        headers=legacy_headers(),
    )

    assert response.status_code == 200
    task = response.json()["task"]
    assert (task["color_code"], task["task_type"]) == ("selected-color-6", 6)
    assert fetch_rows(CalendarTask)[0].color_code == "selected-color-6"


def test_compat_update_color_wins_over_type(client):
    task_id = client.post("/calendar2025/tasks", json=entry(), headers=legacy_headers()).json()["task"]["id"]

    response = client.put(
        f"/calendar2025/tasks/{task_id}",
        json={"user_name": "Ann", "email": "ann@example.com", "task_type": 1, "color_code": "selected-color-7"},
        headers=legacy_headers(),
    )

    assert response.json()["task"]["task_type"] == 7


def test_compat_update_without_fields(client):
    task_id = client.post("/calendar2025/tasks", json=entry(), headers=legacy_headers()).json()["task"]["id"]
    response = client.put(
        f"/calendar2025/tasks/{task_id}",
        json={"user_name": "Ann", "email": "ann@example.com"},
        headers=legacy_headers(),
    )
    assert response.status_code == 400
    assert response.json()["message"] == "No fields to update"


def test_compat_update_into_taken_date_rejected(client):
    client.post("/calendar2025/tasks", json=entry(), headers=legacy_headers())
    task_id = client.post(
        "/calendar2025/tasks", json=entry(task_date="2025-03-02"), headers=legacy_headers()
    ).json()["task"]["id"]

    response = client.put(
        f"/calendar2025/tasks/{task_id}",
        json={"user_name": "Ann", "email": "ann@example.com", "task_date": "2025-03-01"},
        headers=legacy_headers(),
    )
    assert response.status_code == 400


@pytest.mark.parametrize("method", ["put", "delete"])
def test_compat_mutations_scoped_to_owner(client, fetch_rows, method):
    task_id = client.post("/calendar2025/tasks", json=entry(), headers=legacy_headers()).json()["task"]["id"]
    bob = legacy_headers("Bob", "bob@example.com")

    if method == "put":
        response = client.put(
            f"/calendar2025/tasks/{task_id}",
            json={"user_name": "Bob", "email": "bob@example.com", "task_description": "mine now"},
            headers=bob,
        )
    else:
        response = client.delete(f"/calendar2025/tasks/{task_id}", headers=bob)

    assert response.status_code == 404
    row, = fetch_rows(CalendarTask)
    assert row.task_description == "Yoga"


def test_compat_delete(client, fetch_rows):
    task_id = client.post("/calendar2025/tasks", json=entry(), headers=legacy_headers()).json()["task"]["id"]
    response = client.delete(f"/calendar2025/tasks/{task_id}", headers=legacy_headers())
    assert response.status_code == 200
    assert fetch_rows(CalendarTask) == []


@pytest.mark.parametrize(
    "method,path",
    [("post", "/api/calendar/save"), ("post", "/calendar2025/tasks"), ("put", "/calendar2025/tasks/1")],
)
@pytest.mark.parametrize(
    "bad_fields",
    [{"task_date": "not-a-date"}, {"task_type": "seven"}, {"id": [1]}, {"delete": {"yes": 1}}],
)
def test_foreign_identity_rejected_before_field_validation(client, method, path, bad_fields):
    body = entry(email="bob@example.com", **bad_fields)
    response = getattr(client, method)(path, json=body, headers=legacy_headers())
    assert response.status_code == 403


@pytest.mark.parametrize(
    "method,path",
    [("post", "/api/calendar/save"), ("post", "/calendar2025/tasks"), ("put", "/calendar2025/tasks/1")],
)
def test_malformed_fields_from_owner_rejected(client, fetch_rows, method, path):
    response = getattr(client, method)(path, json=entry(task_date="not-a-date"), headers=legacy_headers())
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid request"
    assert response.json()["error"].startswith("task_date:")
    assert fetch_rows(CalendarTask) == []
