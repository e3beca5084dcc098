from conftest import JPEG_BYTES


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def register(client, n):
    body = {"name": f"User {n}", "department": "CSE", "registerNumber": f"R{n}", "yearOfStudy": 3,
            "email": f"u{n}@example.com", "password": "secret"}
    r = client.post("/api/auth/register", json=body)
    assert r.status_code == 200
    return r.json()["user"]["id"], {"Authorization": f"Bearer {r.json()['token']}"}


def test_list_request_and_exchange_a_book(client):
    # Register owner and requester
    owner_id, owner = register(client, 1)
    requester_id, requester = register(client, 2)

    # Owner lists a book
    r = client.post("/api/books", headers=owner,
                    data={"title": "Clean Code", "author": "Robert Martin", "category": "Programming", "rate": "100"},
                    files={"image": ("cover.jpg", JPEG_BYTES, "image/jpeg")})
    assert r.status_code == 201
    book = r.json()["book"]
    assert book["status"] == "available"
    assert book["rate"] == 100
    assert book["hasImage"] is True
    book_id = book["id"]

    # Requester sees it
    r = client.get("/api/books/available", headers=requester)
    assert [b["id"] for b in r.json()["books"]] == [book_id]

    # Requester asks for an exchange
    r = client.post(f"/api/books/{book_id}/request", headers=requester,
                    json={"type": "exchange", "message": "Swap for SICP?"})
    assert r.status_code == 201
    request = r.json()["request"]
    assert request["status"] == "pending"
    assert request["owner"]["id"] == owner_id
    assert request["requester"]["id"] == requester_id
    assert client.get("/api/books", headers=owner).json()["books"][0]["status"] == "requested"

    # Owner accepts
    r = client.patch(f"/api/books/requests/{request['id']}/accept", headers=owner)
    assert r.status_code == 200
    assert r.json()["request"]["status"] == "accepted"
    assert r.json()["book"]["status"] == "exchanged"

    # A request can only be settled once
    r = client.patch(f"/api/books/requests/{request['id']}/accept", headers=owner)
    assert r.status_code == 400
    assert r.json()["error"] == "Validation"

    # Image is public and served verbatim
    r = client.get(f"/api/books/{book_id}/image")
    assert r.status_code == 200
    assert r.content == JPEG_BYTES
    assert r.headers["content-type"] == "image/jpeg"


def test_unexpected_errors_are_hidden(client, monkeypatch):
    from fastapi.testclient import TestClient
    from bookswap.main import app
    from bookswap.services import auth_service

    def boom(db, email, password):
        raise RuntimeError("database is on fire")

    monkeypatch.setattr(auth_service, "login", boom)
    quiet = TestClient(app, raise_server_exceptions=False)
    r = quiet.post("/api/auth/login", json={"email": "a@example.com", "password": "x"})
    assert r.status_code == 500
    assert r.json() == {"message": "Server error", "error": "Server"}
