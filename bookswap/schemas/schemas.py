from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import List, Optional

from bookswap.models.models import BookStatus, Category, RequestStatus, RequestType, UserRole


class CamelModel(BaseModel):
    # the mobile client speaks camelCase
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# -----------------------------
# Users & auth
# -----------------------------
class RegisterIn(CamelModel):
    name: Optional[str] = None
    department: Optional[str] = None
    register_number: Optional[str] = None
    year_of_study: Optional[int] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginIn(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserPublic(CamelModel):
    id: int
    name: str
    email: str


class UserSummary(CamelModel):
    id: int
    name: str


class OwnerOut(UserSummary):
    department: str
    year_of_study: int


class UserOut(CamelModel):
    id: int
    name: str
    department: str
    register_number: str
    year_of_study: int
    email: str
    role: UserRole
    created_at: datetime
    updated_at: Optional[datetime] = None


class AuthOut(CamelModel):
    token: str
    user: UserPublic


class MessageOut(CamelModel):
    message: str


# -----------------------------
# Books
# -----------------------------
class BookForm(CamelModel):
    """Multipart form fields of a book; everything arrives as text."""
    title: Optional[str] = None
    author: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    edition: Optional[str] = None
    isbn: Optional[str] = None
    condition: Optional[str] = None
    department: Optional[str] = None
    year_of_publication: Optional[str] = None
    rate: Optional[str] = None
    status: Optional[str] = None
    image_url: Optional[str] = None


class BookOut(CamelModel):
    id: int
    owner: Optional[OwnerOut] = None
    title: str
    author: str
    category: Category
    description: Optional[str] = None
    edition: Optional[str] = None
    isbn: Optional[str] = None
    condition: Optional[str] = None
    year_of_publication: Optional[int] = None
    department: Optional[str] = None
    rate: float
    status: BookStatus
    image_url: Optional[str] = None
    has_image: bool
    created_at: datetime


class BookEnvelope(CamelModel):
    message: str
    book: BookOut


class BookDetail(CamelModel):
    book: BookOut


class BookList(CamelModel):
    books: List[BookOut]


# -----------------------------
# Requests
# -----------------------------
class RequestCreate(CamelModel):
    type: Optional[str] = None
    message: Optional[str] = None


class RequestOut(CamelModel):
    id: int
    book: Optional[BookOut] = None
    requester: UserSummary
    owner: UserSummary
    type: RequestType
    message: Optional[str] = None
    status: RequestStatus
    created_at: datetime
    updated_at: Optional[datetime] = None


class RequestEnvelope(CamelModel):
    message: str
    request: RequestOut


class RequestList(CamelModel):
    requests: List[RequestOut]


class AcceptOut(CamelModel):
    request: RequestOut
    book: Optional[BookOut] = None


class RejectOut(CamelModel):
    request: RequestOut
