"""Request ledger: offers to buy or exchange another user's book.

A request moves ``pending -> accepted`` or ``pending -> rejected`` and never
leaves those states.  Creating a request marks the book ``requested``;
accepting one marks it ``sold`` (buy) or ``exchanged`` (exchange).  Each of
those pairs of writes is committed as a single transaction.  Rejecting does
not return the book to ``available``.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from bookswap.core.errors import AuthorizationError, NotFoundError, ValidationError
from bookswap.models.models import Book, BookStatus, Request, RequestStatus, RequestType

logger = logging.getLogger("bookswap.ledger")

OUTCOME_FOR_TYPE = {
    RequestType.BUY: BookStatus.SOLD,
    RequestType.EXCHANGE: BookStatus.EXCHANGED,
}


def _parse_type(value: Optional[str]) -> RequestType:
    try:
        return RequestType(value)
    except ValueError:
        raise ValidationError("Invalid request type")


def _ledger_query(db: Session):
    return db.query(Request).options(
        joinedload(Request.book).defer(Book.image_data),
        joinedload(Request.book).joinedload(Book.owner),
        joinedload(Request.requester),
        joinedload(Request.owner),
    )


def _pending_request_for_owner(db: Session, request_id: int, caller_id: int) -> Request:
    request = db.query(Request).filter(Request.id == request_id).first()
    if not request:
        raise NotFoundError("Request not found")
    if request.owner_id != caller_id:
        raise AuthorizationError("Not authorized")
    if request.status != RequestStatus.PENDING:
        raise ValidationError(f"Request already {request.status.value}")
    return request


def create_request(db: Session, book_id: int, requester_id: int, request_type: Optional[str],
                   message: Optional[str] = None) -> Request:
    kind = _parse_type(request_type)
    book = db.query(Book).filter(Book.id == book_id).first()
    if not book:
        raise NotFoundError("Book not found")
    if book.owner_id == requester_id:
        raise ValidationError("You cannot request your own book")
    if book.status != BookStatus.AVAILABLE:
        raise ValidationError(f"Book is not available (status: {book.status.value})")

    request = Request(
        book_id=book.id,
        requester_id=requester_id,
        owner_id=book.owner_id,
        type=kind,
        message=message,
        status=RequestStatus.PENDING,
    )
    book.status = BookStatus.REQUESTED
    db.add(request)
    db.add(book)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(request)
    logger.info(f"User {requester_id} requested book {book.id} ({kind.value}) request {request.id}")
    return request


def list_sent(db: Session, requester_id: int) -> List[Request]:
    return (_ledger_query(db).filter(Request.requester_id == requester_id)
            .order_by(Request.created_at.desc()).all())


def list_received(db: Session, owner_id: int) -> List[Request]:
    return (_ledger_query(db).filter(Request.owner_id == owner_id)
            .order_by(Request.created_at.desc()).all())


def accept(db: Session, request_id: int, caller_id: int) -> Tuple[Request, Optional[Book]]:
    """Accept a pending request and settle its book.

    The book may have been deleted since the request was made; the request
    is still accepted and ``None`` is returned for the book.  A book that is
    no longer ``requested`` (reopened and settled by another request) cannot
    be settled again.
    """
    request = _pending_request_for_owner(db, request_id, caller_id)
    request.status = RequestStatus.ACCEPTED
    db.add(request)

    book = db.query(Book).filter(Book.id == request.book_id).first() if request.book_id else None
    if book and book.status != BookStatus.REQUESTED:
        # the owner reopened the book and another request may already have settled it
        message = f"Book is no longer requested (status: {book.status.value})"
        db.rollback()
        raise ValidationError(message)
    if book:
        book.status = OUTCOME_FOR_TYPE[request.type]
        db.add(book)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(request)
    if book:
        db.refresh(book)
    logger.info(f"Request {request.id} accepted; book {request.book_id} -> "
                f"{book.status.value if book else 'missing'}")
    return request, book


def reject(db: Session, request_id: int, caller_id: int) -> Request:
    request = _pending_request_for_owner(db, request_id, caller_id)
    request.status = RequestStatus.REJECTED
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info(f"Request {request.id} rejected")
    return request
