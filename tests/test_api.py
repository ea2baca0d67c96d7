"""API tests with TestClient: health, projects, files, settings, changes, sync."""

import pytest
from fastapi.testclient import TestClient

from editorstore.identity import file_id, project_id
from editorstore.main import app


@pytest.fixture
def client(tmp_path, monkeypatch):
    """TestClient for the FastAPI app on a fresh database. Used as context manager so lifespan runs."""
    monkeypatch.setenv("EDITORSTORE_DB_PATH", str(tmp_path / "api.db"))
    with TestClient(app) as c:
        yield c


def _project(client: TestClient, name: str = "a1") -> str:
    r = client.post("/api/projects", json={"name": name})
    assert r.status_code == 201
    return r.json()["id"]


def test_health(client: TestClient) -> None:
    """GET /health returns 200 and status ok."""
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_create_project_and_duplicate(client: TestClient) -> None:
    """POST /api/projects creates; the same name again is 409."""
    pid = _project(client)
    assert pid == project_id("a1")
    r = client.post("/api/projects", json={"name": "a1"})
    assert r.status_code == 409
    assert "already exists" in r.json()["detail"]


def test_missing_project_is_404(client: TestClient) -> None:
    r = client.get(f"/api/projects/{project_id('nope')}")
    assert r.status_code == 404


def test_file_lifecycle(client: TestClient) -> None:
    """Create, read, write, rename, delete a file over HTTP."""
    pid = _project(client)
    r = client.post("/api/files", json={"project_id": pid, "name": "q1/a.c", "contents": "X"})
    assert r.status_code == 201
    fid = r.json()["id"]
    assert fid == file_id(pid, "q1/a.c")
    assert "contents" not in r.json()

    r = client.get(f"/api/files/{fid}")
    assert r.status_code == 200
    assert r.json()["contents"] == "X"

    assert client.put(f"/api/files/{fid}", json={"contents": "Y"}).status_code == 200
    assert client.get(f"/api/files/{fid}").json()["contents"] == "Y"

    assert client.post(f"/api/files/{fid}/rename", json={"name": "q1/b.c"}).status_code == 200
    names = [f["name"] for f in client.get(f"/api/projects/{pid}/files").json()]
    assert names == ["q1/b.c"]

    assert client.delete(f"/api/files/{fid}").status_code == 200
    assert client.get(f"/api/files/{fid}").status_code == 404
    assert client.delete(f"/api/files/{fid}").status_code == 404


def test_run_file_routes(client: TestClient) -> None:
    """Run file is null until set."""
    pid = _project(client)
    client.post("/api/files", json={"project_id": pid, "name": "q1/main.c", "contents": ""})
    assert client.get(f"/api/projects/{pid}/runs/q1").json() == {"question": "q1", "file": None}
    r = client.put(f"/api/projects/{pid}/runs/q1", json={"file": "q1/main.c"})
    assert r.status_code == 200
    assert client.get(f"/api/projects/{pid}/runs/q1").json()["file"] == "q1/main.c"
    assert client.put(f"/api/projects/{pid}/runs/q2", json={"file": "q2/none.c"}).status_code == 404


def test_open_tab_routes(client: TestClient) -> None:
    pid = _project(client)
    fid = client.post("/api/files", json={"project_id": pid, "name": "q1/a.c"}).json()["id"]
    assert client.put(f"/api/files/{fid}/open").status_code == 200
    assert [f["id"] for f in client.get(f"/api/projects/{pid}/open-tabs").json()] == [fid]
    assert client.delete(f"/api/files/{fid}/open").status_code == 200
    assert client.get(f"/api/projects/{pid}/open-tabs").json() == []


def test_settings_routes(client: TestClient) -> None:
    """GET returns defaults; PUT replaces all fields."""
    assert client.get("/api/settings").json()["font"] == "Consolas"
    new = {"editor_mode": 1, "font_size": 15, "font": "Mono", "theme": 0, "space_tab": False, "tab_width": 2}
    assert client.put("/api/settings", json=new).status_code == 200
    assert client.get("/api/settings").json() == new


def test_changes_routes(client: TestClient) -> None:
    """Pending changes are listed newest first with the target under "file"."""
    pid = _project(client)
    fid = client.post("/api/files", json={"project_id": pid, "name": "q1/a.c", "contents": "X"}).json()["id"]
    client.put(f"/api/files/{fid}", json={"contents": "Y"})
    entries = client.get("/api/changes").json()
    assert [e["type"] for e in entries] == ["editFile", "newFile"]
    assert entries[0]["file"] == {"file": "q1/a.c", "project": "a1"}
    assert client.get("/api/changes/count").json() == {"count": 2}
    assert client.get("/api/changes/top").json()["contents"] == "Y"
    assert client.post("/api/changes/pop").json()["type"] == "editFile"
    assert client.delete("/api/changes").status_code == 200
    assert client.get("/api/changes/top").json() is None


def test_sync_apply(client: TestClient) -> None:
    """POST /api/sync/apply replays remote changes and clears the local log."""
    body = {
        "changes": [
            {"type": "newFile", "file": {"file": "q1/f.c", "project": "r1"}, "contents": "v1"},
            {"type": "editFile", "file": {"file": "q1/f.c", "project": "r1"}, "contents": "v2"},
        ],
        "new_projects": ["r1"],
        "deleted_projects": [],
    }
    r = client.post("/api/sync/apply", json=body)
    assert r.status_code == 200
    assert r.json()["applied"] == 2
    fid = file_id(project_id("r1"), "q1/f.c")
    assert client.get(f"/api/files/{fid}").json()["contents"] == "v2"
    assert client.get("/api/changes/count").json() == {"count": 0}


def test_sync_apply_unknown_type_is_422(client: TestClient) -> None:
    """An unknown change type rejects the whole batch."""
    body = {
        "changes": [{"type": "chmod", "file": {"file": "q1/f.c", "project": "r1"}}],
        "new_projects": ["r1"],
    }
    r = client.post("/api/sync/apply", json=body)
    assert r.status_code == 422
    assert client.get("/api/projects").json() == []
