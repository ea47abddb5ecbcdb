from fastapi.testclient import TestClient


def test_no_follows_means_nothing_new(client: TestClient, register, make_post):
    user = register("quiet")
    make_post(user, "talking to myself")

    response = client.get("/api/notifications/check", headers=user.headers)

    assert response.status_code == 200
    assert response.json() == {"has_new": False}


def test_followed_post_is_new_until_marked_seen(client: TestClient, register, make_post):
    reader = register("reader")
    writer = register("writer")
    client.post(f"/api/follow/{writer.id}", headers=reader.headers)

    make_post(writer, "fresh")
    assert client.get("/api/notifications/check", headers=reader.headers).json() == {"has_new": True}

    marked = client.post("/api/notifications/mark-seen", headers=reader.headers)
    assert marked.status_code == 200
    assert marked.json()["success"] is True
    assert marked.json()["last_seen"]

    assert client.get("/api/notifications/check", headers=reader.headers).json() == {"has_new": False}

    make_post(writer, "fresher")
    assert client.get("/api/notifications/check", headers=reader.headers).json() == {"has_new": True}


def test_mark_seen_twice(client: TestClient, register):
    user = register("repeat")

    first = client.post("/api/notifications/mark-seen", headers=user.headers)
    second = client.post("/api/notifications/mark-seen", headers=user.headers)

    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json()["last_seen"] >= first.json()["last_seen"]


def test_unfollowed_authors_do_not_notify(client: TestClient, register, make_post):
    reader = register("reader")
    stranger = register("stranger")

    make_post(stranger, "not for you")

    assert client.get("/api/notifications/check", headers=reader.headers).json() == {"has_new": False}
