"""Book catalog: listings owned by users, with an optional stored cover image."""
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session, defer, joinedload

from bookswap.core.config import settings
from bookswap.core.errors import AuthorizationError, NotFoundError, ValidationError
from bookswap.models.models import Book, BookStatus, Category, Request

logger = logging.getLogger("bookswap.catalog")

TEXT_FIELDS = ("title", "author", "description", "edition", "isbn", "condition", "department", "image_url")


@dataclass
class ImageUpload:
    data: bytes
    content_type: str


def _parse_category(value: str) -> Category:
    try:
        return Category(value)
    except ValueError:
        raise ValidationError("Invalid category")


def _parse_status(value: Optional[str]) -> Optional[BookStatus]:
    try:
        return BookStatus(value)
    except ValueError:
        return None


def _parse_number(value: Any, field: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"{field} must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"{field} must be a finite number")
    return number


def _parse_int(value: Any, field: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(_parse_number(value, field))


def _parse_rate(value: Any) -> float:
    if value is None or value == "":
        return 0
    rate = _parse_number(value, "rate")
    if rate < 0:
        raise ValidationError("rate must be >= 0")
    return rate


def _check_image(image: Optional[ImageUpload]) -> None:
    if image is None:
        return
    if not (image.content_type or "").startswith("image/"):
        raise ValidationError("Image must be an image file")
    if len(image.data) > settings.MAX_IMAGE_SIZE:
        raise ValidationError("Image too large")


def _listing_query(db: Session):
    # raw image bytes are served by get_image only
    return db.query(Book).options(defer(Book.image_data), joinedload(Book.owner))


def _owned_book(db: Session, book_id: int, caller_id: int) -> Book:
    book = db.query(Book).filter(Book.id == book_id).first()
    if not book:
        raise NotFoundError("Book not found")
    if book.owner_id != caller_id:
        raise AuthorizationError("Not authorized")
    return book


def add_book(db: Session, owner_id: int, fields: Dict[str, Any], image: Optional[ImageUpload] = None) -> Book:
    """Create a listing for ``owner_id``.

    ``fields`` holds raw form values keyed by column name. Title, author and
    a known category are required; an absent or unknown status falls back to
    ``available`` and an absent rate to 0.
    """
    if not fields.get("title") or not fields.get("author") or not fields.get("category"):
        raise ValidationError("Title, author and category are required")
    category = _parse_category(fields["category"])
    _check_image(image)

    book = Book(
        owner_id=owner_id,
        category=category,
        year_of_publication=_parse_int(fields.get("year_of_publication"), "yearOfPublication"),
        rate=_parse_rate(fields.get("rate")),
        status=_parse_status(fields.get("status")) or BookStatus.AVAILABLE,
        **{k: fields.get(k) for k in TEXT_FIELDS},
    )
    if image is not None:
        book.image_data = image.data
        book.image_content_type = image.content_type
    db.add(book)
    db.commit()
    db.refresh(book)
    logger.info(f"Created book id={book.id} title={book.title} owner={owner_id}")
    return book


def list_available(db: Session, excluding_owner_id: int) -> List[Book]:
    return (_listing_query(db)
            .filter(Book.status == BookStatus.AVAILABLE, Book.owner_id != excluding_owner_id)
            .order_by(Book.created_at.desc())
            .all())


def list_mine(db: Session, owner_id: int) -> List[Book]:
    return _listing_query(db).filter(Book.owner_id == owner_id).order_by(Book.created_at.desc()).all()


def get_book(db: Session, book_id: int) -> Book:
    book = _listing_query(db).filter(Book.id == book_id).first()
    if not book:
        raise NotFoundError("Book not found")
    return book


def update_book(db: Session, book_id: int, caller_id: int, patch: Dict[str, Any],
                image: Optional[ImageUpload] = None) -> Book:
    """Apply the fields present in ``patch``; numeric fields are coerced from text."""
    book = _owned_book(db, book_id, caller_id)

    # validate everything before touching the record
    changes: Dict[str, Any] = {k: patch[k] for k in TEXT_FIELDS if patch.get(k) is not None}
    if patch.get("category") is not None:
        changes["category"] = _parse_category(patch["category"])
    if patch.get("status") is not None:
        status = _parse_status(patch["status"])
        if status is None:
            raise ValidationError("Invalid status")
        changes["status"] = status
    if patch.get("year_of_publication") is not None:
        changes["year_of_publication"] = _parse_int(patch["year_of_publication"], "yearOfPublication")
    if patch.get("rate") is not None:
        changes["rate"] = _parse_rate(patch["rate"])
    for field in ("title", "author"):
        if field in changes and not changes[field]:
            raise ValidationError(f"{field} cannot be empty")
    _check_image(image)

    for k, v in changes.items():
        setattr(book, k, v)
    if image is not None:
        book.image_data = image.data
        book.image_content_type = image.content_type
    db.add(book)
    db.commit()
    db.refresh(book)
    logger.info(f"Updated book id={book.id} fields={sorted(changes)}")
    return book


def delete_book(db: Session, book_id: int, caller_id: int) -> None:
    book = _owned_book(db, book_id, caller_id)
    # detach requests first; SQLite neither enforces ON DELETE nor avoids reusing the id
    db.query(Request).filter(Request.book_id == book_id).update({Request.book_id: None}, synchronize_session=False)
    db.delete(book)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info(f"Deleted book id={book_id}")


def get_image(db: Session, book_id: int) -> Tuple[bytes, str]:
    book = db.query(Book).filter(Book.id == book_id).first()
    if not book or book.image_data is None:
        raise NotFoundError("Image not found")
    return book.image_data, book.image_content_type or "application/octet-stream"
