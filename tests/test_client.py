import pytest

from bookswap.client import ApiError, BookSwapClient, Session
from conftest import JPEG_BYTES


@pytest.fixture
def connect(client):
    def _connect():
        return BookSwapClient(Session(str(client.base_url)), http=client)
    return _connect


def test_sessions_are_independent(connect):
    owner, buyer = connect(), connect()
    owner.register("Owner", "CSE", "R1", 3, "owner@example.com", "pw")
    buyer.register("Buyer", "ECE", "R2", 1, "buyer@example.com", "pw")
    assert owner.session.token != buyer.session.token
    assert owner.me()["email"] == "owner@example.com"
    assert buyer.me()["email"] == "buyer@example.com"


def test_buy_flow_through_client(connect):
    owner, buyer = connect(), connect()
    owner.register("Owner", "CSE", "R1", 3, "owner@example.com", "pw")
    buyer.register("Buyer", "ECE", "R2", 1, "buyer@example.com", "pw")

    book = owner.add_book({"title": "K&R", "author": "Kernighan", "category": "Programming", "rate": 250},
                          image=JPEG_BYTES)
    assert buyer.book_image(book["id"]) == JPEG_BYTES
    assert [b["id"] for b in buyer.available_books()] == [book["id"]]

    request = buyer.request_book(book["id"], "buy", "Still have it?")
    assert buyer.sent_requests()[0]["id"] == request["id"]
    assert owner.received_requests()[0]["message"] == "Still have it?"

    settled = owner.accept_request(request["id"])
    assert settled["book"]["status"] == "sold"
    assert owner.my_books()[0]["status"] == "sold"
    assert buyer.available_books() == []


def test_errors_and_logout(connect):
    user = connect()
    with pytest.raises(ApiError) as exc:
        user.login("nobody@example.com", "pw")
    assert exc.value.status_code == 401
    assert exc.value.message == "Invalid credentials"

    user.register("Solo", "CSE", "R1", 2, "solo@example.com", "pw")
    user.logout()
    assert user.session.token is None
    with pytest.raises(ApiError) as exc:
        user.me()
    assert exc.value.status_code == 401
