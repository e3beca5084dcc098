"""Python client for the BookSwap API.

The bearer token lives on an explicit :class:`Session` rather than in
module state, so several sessions (e.g. two users in a test) can share one
transport::

    session = Session("http://localhost:5000")
    client = BookSwapClient(session)
    client.login("a@example.com", "secret")
    client.available_books()
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx


@dataclass
class Session:
    base_url: str
    token: Optional[str] = None

    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class BookSwapClient:
    def __init__(self, session: Session, http: Optional[httpx.Client] = None, timeout: float = 10.0):
        self.session = session
        self.http = http or httpx.Client(timeout=timeout)

    def _url(self, path: str) -> str:
        return self.session.base_url.rstrip("/") + path

    def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        response = self.http.request(method, self._url(path), headers=self.session.headers, **kwargs)
        if response.status_code >= 400:
            try:
                message = response.json().get("message", response.text)
            except ValueError:
                message = response.text
            raise ApiError(response.status_code, message)
        return response

    def _json(self, method: str, path: str, **kwargs) -> Any:
        return self._send(method, path, **kwargs).json()

    # -- auth --
    def register(self, name: str, department: str, register_number: str, year_of_study: int, email: str,
                 password: str) -> Dict[str, Any]:
        payload = self._json("POST", "/api/auth/register", json={
            "name": name, "department": department, "registerNumber": register_number,
            "yearOfStudy": year_of_study, "email": email, "password": password,
        })
        self.session.token = payload["token"]
        return payload["user"]

    def login(self, email: str, password: str) -> Dict[str, Any]:
        payload = self._json("POST", "/api/auth/login", json={"email": email, "password": password})
        self.session.token = payload["token"]
        return payload["user"]

    def logout(self) -> None:
        try:
            self._send("POST", "/api/auth/logout")
        finally:
            self.session.token = None

    def me(self) -> Dict[str, Any]:
        return self._json("GET", "/api/auth/me")

    # -- books --
    def add_book(self, fields: Dict[str, Any], image: Optional[bytes] = None,
                 content_type: str = "image/jpeg", filename: str = "cover.jpg") -> Dict[str, Any]:
        files = {"image": (filename, image, content_type)} if image is not None else None
        data = {k: str(v) for k, v in fields.items() if v is not None}
        return self._json("POST", "/api/books", data=data, files=files)["book"]

    def my_books(self) -> list:
        return self._json("GET", "/api/books")["books"]

    def available_books(self) -> list:
        return self._json("GET", "/api/books/available")["books"]

    def get_book(self, book_id: int) -> Dict[str, Any]:
        return self._json("GET", f"/api/books/{book_id}")["book"]

    def update_book(self, book_id: int, fields: Dict[str, Any], image: Optional[bytes] = None,
                    content_type: str = "image/jpeg", filename: str = "cover.jpg") -> Dict[str, Any]:
        files = {"image": (filename, image, content_type)} if image is not None else None
        data = {k: str(v) for k, v in fields.items() if v is not None}
        return self._json("PUT", f"/api/books/{book_id}", data=data, files=files)["book"]

    def delete_book(self, book_id: int) -> None:
        self._send("DELETE", f"/api/books/{book_id}")

    def book_image(self, book_id: int) -> bytes:
        return self._send("GET", f"/api/books/{book_id}/image").content

    # -- requests --
    def request_book(self, book_id: int, request_type: str, message: Optional[str] = None) -> Dict[str, Any]:
        body = {"type": request_type, "message": message}
        return self._json("POST", f"/api/books/{book_id}/request", json=body)["request"]

    def sent_requests(self) -> list:
        return self._json("GET", "/api/books/requests/sent")["requests"]

    def received_requests(self) -> list:
        return self._json("GET", "/api/books/requests/received")["requests"]

    def accept_request(self, request_id: int) -> Dict[str, Any]:
        return self._json("PATCH", f"/api/books/requests/{request_id}/accept")

    def reject_request(self, request_id: int) -> Dict[str, Any]:
        return self._json("PATCH", f"/api/books/requests/{request_id}/reject")["request"]
