"""End-to-end file operations through the FastAPI app."""

from __future__ import annotations

import hashlib

import pytest
from fastapi.testclient import TestClient

from artoo.runtime import ArtooRuntime

from helpers import SpyStore


def test_list_empty_store(client: TestClient) -> None:
    resp = client.get("/api/files")
    assert resp.status_code == 200
    assert resp.json() == {"files": []}
    assert resp.headers["content-type"] == "application/json"
    assert resp.headers["access-control-allow-origin"] == "*"


def test_list_filters_by_prefix(client: TestClient, store: SpyStore) -> None:
    store.seed("folder1/a.txt", b"a")
    store.seed("folder1/b.txt", b"bb")
    store.seed("folder2/c.txt", b"ccc")

    resp = client.get("/api/files", params={"path": "folder1/"})
    assert resp.status_code == 200
    files = resp.json()["files"]
    assert [entry["name"] for entry in files] == ["folder1/a.txt", "folder1/b.txt"]
    assert files[1]["size"] == 2
    assert files[1]["etag"] == hashlib.md5(b"bb").hexdigest()
    assert files[1]["uploaded"].endswith("Z")
    assert ("list", "folder1/") in store.calls

    assert client.get("/api/files", params={"path": "nothing/"}).json() == {"files": []}
    assert len(client.get("/api/files").json()["files"]) == 3


def test_upload_then_serve_round_trip(client: TestClient, auth_headers: dict) -> None:
    payload = b"hello artoo"
    resp = client.post(
        "/api/files/docs/hello.txt",
        content=payload,
        headers={**auth_headers, "Content-Type": "text/plain"},
    )
    assert resp.status_code == 201
    assert resp.json() == {
        "message": "File uploaded successfully",
        "key": "docs/hello.txt",
        "etag": hashlib.md5(payload).hexdigest(),
    }

    served = client.get("/api/files/docs/hello.txt")
    assert served.status_code == 200
    assert served.content == payload
    assert served.headers["content-type"] == "text/plain"
    assert served.headers["content-length"] == str(len(payload))
    assert served.headers["etag"] == hashlib.md5(payload).hexdigest()
    assert served.headers["last-modified"].endswith("Z")
    assert "content-disposition" not in served.headers
    assert served.headers["access-control-allow-origin"] == "*"


def test_download_sets_attachment_disposition(client: TestClient, store: SpyStore) -> None:
    store.seed("docs/report final.pdf", b"%PDF-1.4", "application/pdf")

    resp = client.get("/api/download/docs/report%20final.pdf")
    assert resp.status_code == 200
    assert resp.content == b"%PDF-1.4"
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.headers["content-disposition"] == 'attachment; filename="report%20final.pdf"'


def test_details_returns_metadata(client: TestClient, store: SpyStore) -> None:
    info = store.seed("notes.md", b"# notes", "text/markdown")

    resp = client.get("/api/details/notes.md")
    assert resp.status_code == 200
    obj = resp.json()["object"]
    assert obj["key"] == "notes.md"
    assert obj["size"] == 7
    assert obj["etag"] == info.etag
    assert obj["contentType"] == "text/markdown"
    assert ("get", "notes.md") not in store.calls


@pytest.mark.parametrize("route", ["/api/details/missing.txt", "/api/download/missing.txt", "/api/files/missing.txt"])
def test_missing_object_is_404(client: TestClient, route: str) -> None:
    resp = client.get(route)
    assert resp.status_code == 404
    assert resp.json() == {"error": "File not found"}
    assert resp.headers["access-control-allow-origin"] == "*"


@pytest.mark.parametrize("route", ["/api/files/", "/api/details/", "/api/download/"])
def test_root_key_answers_with_root_listing(client: TestClient, store: SpyStore, route: str) -> None:
    store.seed("a.txt", b"a")
    resp = client.get(route)
    assert resp.status_code == 200
    assert [entry["name"] for entry in resp.json()["files"]] == ["a.txt"]


def test_served_object_defaults_content_type(client: TestClient, store: SpyStore) -> None:
    store.seed("blob", b"\x00\x01", "")
    resp = client.get("/api/files/blob")
    assert resp.headers["content-type"] == "application/octet-stream"


def test_upload_requires_content_type(client: TestClient, store: SpyStore, auth_headers: dict) -> None:
    resp = client.post("/api/files/raw.bin", content=b"data", headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing content-type header"}
    assert store.mutations() == []


def test_upload_rejects_empty_body(client: TestClient, store: SpyStore, auth_headers: dict) -> None:
    resp = client.post("/api/files/empty.txt", content=b"", headers={**auth_headers, "Content-Type": "text/plain"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Empty file content"}
    assert store.mutations() == []


def test_upload_to_root_key_is_rejected(client: TestClient, store: SpyStore, auth_headers: dict) -> None:
    resp = client.post("/api/files/", content=b"x", headers={**auth_headers, "Content-Type": "text/plain"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "File path is required"}
    assert store.mutations() == []


def test_upload_refused_by_store(client: TestClient, store: SpyStore, auth_headers: dict) -> None:
    store.refuse_put = True
    resp = client.post("/api/files/a.txt", content=b"x", headers={**auth_headers, "Content-Type": "text/plain"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to upload file"}


def test_store_exception_is_not_leaked(client: TestClient, store: SpyStore, auth_headers: dict) -> None:
    store.explode_put = True
    resp = client.post("/api/files/a.txt", content=b"x", headers={**auth_headers, "Content-Type": "text/plain"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal Server Error"}
    assert "secret" not in resp.text
    assert resp.headers["access-control-allow-origin"] == "*"


def test_delete_existing_object(client: TestClient, store: SpyStore, auth_headers: dict) -> None:
    store.seed("old.log", b"log")
    resp = client.delete("/api/files/old.log", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "File deleted successfully", "key": "old.log"}
    assert "old.log" not in store
    assert client.get("/api/details/old.log").status_code == 404


def test_delete_missing_object(client: TestClient, store: SpyStore, auth_headers: dict) -> None:
    resp = client.delete("/api/files/ghost.txt", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json() == {"error": "File not found"}
    assert store.mutations() == []


# Auth gate -------------------------------------------------------------------


MUTATING_REQUESTS = [
    ("POST", "/api/files/a.txt", {"content": b"x", "headers": {"Content-Type": "text/plain"}}),
    ("DELETE", "/api/files/a.txt", {}),
    ("POST", "/api/copy/a.txt", {"json": {"destination": "b.txt"}}),
    ("POST", "/api/move/a.txt", {"json": {"destination": "b.txt"}}),
]


@pytest.mark.parametrize("method, url, kwargs", MUTATING_REQUESTS)
def test_mutations_without_token_are_unauthorized(
    client: TestClient, store: SpyStore, method: str, url: str, kwargs: dict
) -> None:
    store.seed("a.txt", b"original")
    store.calls.clear()

    resp = client.request(method, url, **kwargs)
    assert resp.status_code == 401
    assert resp.json() == {"error": "Missing or invalid authorization header"}
    assert store.calls == []
    assert store.get("a.txt").read() == b"original"


@pytest.mark.parametrize("method, url, kwargs", MUTATING_REQUESTS)
def test_mutations_with_expired_token_are_unauthorized(
    client: TestClient, store: SpyStore, runtime: ArtooRuntime, method: str, url: str, kwargs: dict
) -> None:
    runtime.auth_service.clock = lambda: 10.0
    token = runtime.auth_service.login("alice", "wonderland")
    runtime.auth_service.clock = lambda: 10.0 + 3600
    store.calls.clear()

    headers = {**kwargs.get("headers", {}), "Authorization": f"Bearer {token}"}
    resp = client.request(method, url, **{**kwargs, "headers": headers})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Token expired"}
    assert store.mutations() == []


def test_forged_token_is_unauthorized(client: TestClient, store: SpyStore) -> None:
    resp = client.post(
        "/api/files/a.txt",
        content=b"x",
        headers={"Authorization": "Bearer a.b.c", "Content-Type": "text/plain"},
    )
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid token"}
    assert store.mutations() == []


def test_unauthorized_beats_malformed_body(client: TestClient, store: SpyStore) -> None:
    resp = client.post("/api/move/a.txt", content=b"{oops", headers={"Content-Type": "application/json"})
    assert resp.status_code == 401


# Copy / move -------------------------------------------------------------------


def test_copy_keeps_source(client: TestClient, store: SpyStore, auth_headers: dict) -> None:
    source = store.seed("src/photo.jpg", b"\xff\xd8jpeg", "image/jpeg")

    resp = client.post("/api/copy/src/photo.jpg", json={"destination": "dst/photo.jpg"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json() == {
        "message": "File copied successfully",
        "from": "src/photo.jpg",
        "to": "dst/photo.jpg",
        "etag": source.etag,
    }
    assert store.get("src/photo.jpg").read() == b"\xff\xd8jpeg"
    copied = store.get("dst/photo.jpg")
    assert copied.read() == b"\xff\xd8jpeg"
    assert copied.info.content_type == "image/jpeg"


def test_move_removes_source(client: TestClient, store: SpyStore, auth_headers: dict) -> None:
    store.seed("inbox/a.csv", b"x,y\n1,2\n", "text/csv")

    resp = client.post("/api/move/inbox/a.csv", json={"destination": "/archive/a.csv"}, headers=auth_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "File moved successfully"
    assert body["from"] == "inbox/a.csv"
    assert body["to"] == "archive/a.csv"
    assert "inbox/a.csv" not in store
    moved = store.get("archive/a.csv")
    assert moved.read() == b"x,y\n1,2\n"
    assert moved.info.content_type == "text/csv"

    put_index = store.calls.index(("put", "archive/a.csv"))
    delete_index = store.calls.index(("delete", "inbox/a.csv"))
    assert put_index < delete_index


@pytest.mark.parametrize("operation", ["copy", "move"])
def test_failed_destination_write_keeps_source(
    client: TestClient, store: SpyStore, auth_headers: dict, operation: str
) -> None:
    store.seed("keep.txt", b"precious", "text/plain")
    store.refuse_put = True

    resp = client.post(f"/api/{operation}/keep.txt", json={"destination": "lost.txt"}, headers=auth_headers)
    assert resp.status_code == 500
    assert resp.json() == {"error": f"Failed to {operation} file"}
    assert store.get("keep.txt").read() == b"precious"
    assert "lost.txt" not in store
    assert ("delete", "keep.txt") not in store.calls


def test_move_with_failing_source_delete(client: TestClient, store: SpyStore, auth_headers: dict) -> None:
    store.seed("a.txt", b"data", "text/plain")
    store.fail_delete = True

    resp = client.post("/api/move/a.txt", json={"destination": "b.txt"}, headers=auth_headers)
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to remove source after move"}
    assert "a.txt" in store
    assert store.get("b.txt").read() == b"data"


@pytest.mark.parametrize("operation", ["copy", "move"])
@pytest.mark.parametrize("body", [{}, {"destination": ""}, {"destination": "/"}, None])
def test_transfer_requires_destination(
    client: TestClient, store: SpyStore, auth_headers: dict, operation: str, body
) -> None:
    store.seed("a.txt", b"data")
    store.calls.clear()
    kwargs = {"json": body} if body is not None else {}
    resp = client.post(f"/api/{operation}/a.txt", headers=auth_headers, **kwargs)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Destination is required"}
    assert store.calls == []


@pytest.mark.parametrize("operation", ["copy", "move"])
def test_transfer_of_missing_source(client: TestClient, store: SpyStore, auth_headers: dict, operation: str) -> None:
    resp = client.post(f"/api/{operation}/nope.txt", json={"destination": "b.txt"}, headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json() == {"error": "File not found"}
    assert store.mutations() == []


def test_move_onto_itself_is_rejected(client: TestClient, store: SpyStore, auth_headers: dict) -> None:
    store.seed("a.txt", b"data")
    resp = client.post("/api/move/a.txt", json={"destination": "a.txt"}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Source and destination must differ"}
    assert store.get("a.txt").read() == b"data"


def test_transfer_with_non_object_body(client: TestClient, auth_headers: dict) -> None:
    resp = client.post("/api/copy/a.txt", json=["b.txt"], headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid request body"}
