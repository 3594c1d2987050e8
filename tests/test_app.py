import io

import pytest

import app as app_module


@pytest.fixture
def client(tmp_path, monkeypatch):
    base = tmp_path.resolve()
    monkeypatch.setattr(app_module, "BASE_DIR", base)
    monkeypatch.setattr(app_module, "UPLOAD_DIR", base / "data" / "uploads")
    app_module.COUNT_CACHE.clear()
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as test_client:
        yield test_client
    app_module.COUNT_CACHE.clear()


def test_index(client):
    response = client.get("/")
    assert response.status_code == 200
    assert b"Tag Cloud Generator" in response.data


def test_generate_from_text(client):
    response = client.post(
        "/api/generate",
        json={"text": "the cat sat on the mat the cat ran", "count": 3, "returnHtml": True},
    )
    assert response.status_code == 200
    body = response.get_json()
    assert [word["text"] for word in body["words"]] == ["cat", "mat", "the"]
    assert [word["size"] for word in body["words"]] == [29, 11, 48]
    assert body["summary"]["distinctWords"] == 6
    assert body["summary"]["totalWords"] == 9
    assert "Top 3 words in request" in body["html"]


def test_generate_from_path_uses_cache(client, tmp_path):
    (tmp_path / "notes.txt").write_text("go go go", encoding="utf-8")
    for _ in range(2):
        response = client.post("/api/generate", json={"textPath": "notes.txt", "count": 5})
        assert response.status_code == 200
        assert response.get_json()["words"] == [{"text": "go", "count": 3, "size": 11, "class": "f11"}]
    if app_module.CACHE_ENABLED:
        assert len(app_module.COUNT_CACHE) == 1


def test_skip_cache(client, tmp_path):
    (tmp_path / "notes.txt").write_text("a b", encoding="utf-8")
    response = client.post("/api/generate", json={"textPath": "notes.txt", "skipCache": True})
    assert response.status_code == 200
    assert len(app_module.COUNT_CACHE) == 0


def test_missing_file(client):
    response = client.post("/api/generate", json={"textPath": "nope.txt"})
    assert response.status_code == 404


def test_path_outside_project(client):
    response = client.post("/api/generate", json={"textPath": "../../etc/passwd"})
    assert response.status_code == 400


@pytest.mark.parametrize("payload", [{"text": "a", "count": 0}, {"text": "a", "count": "x"}, {"count": 3}])
def test_bad_requests(client, payload):
    response = client.post("/api/generate", json=payload)
    assert response.status_code == 400


def test_upload_then_generate(client):
    response = client.post(
        "/api/upload",
        data={"file": (io.BytesIO(b"red green red"), "colours.txt")},
        content_type="multipart/form-data",
    )
    assert response.status_code == 200
    text_path = response.get_json()["textPath"]
    assert text_path.endswith("colours.txt")

    response = client.post("/api/generate", json={"textPath": text_path, "count": 2})
    words = response.get_json()["words"]
    assert [(word["text"], word["count"]) for word in words] == [("green", 1), ("red", 2)]


def test_upload_without_file(client):
    response = client.post("/api/upload", data={}, content_type="multipart/form-data")
    assert response.status_code == 400
