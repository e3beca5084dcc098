from sqlalchemy import (Column, Integer, String, Float, Text, DateTime, LargeBinary, ForeignKey, Enum,
                        Index)
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from bookswap.core.database import Base


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class Category(str, enum.Enum):
    PROGRAMMING = "Programming"
    NETWORKING = "Networking"
    DBMS = "DBMS"
    AI = "AI"
    MATHS = "Maths"
    OS = "OS"
    DEEP_LEARNING = "Deep Learning"
    OTHER = "Other"


class BookStatus(str, enum.Enum):
    AVAILABLE = "available"
    REQUESTED = "requested"
    EXCHANGED = "exchanged"
    SOLD = "sold"


class RequestType(str, enum.Enum):
    BUY = "buy"
    EXCHANGE = "exchange"


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


def _values(enum_cls):
    return [member.value for member in enum_cls]


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    department = Column(String, nullable=False)
    register_number = Column(String, unique=True, nullable=False, index=True)
    year_of_study = Column(Integer, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(Enum(UserRole, values_callable=_values), nullable=False, default=UserRole.USER)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    books = relationship("Book", back_populates="owner")


class Book(Base):
    __tablename__ = "books"
    # never hand a deleted book's id to a new listing
    __table_args__ = {"sqlite_autoincrement": True}
    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    author = Column(String, nullable=False)
    category = Column(Enum(Category, values_callable=_values), nullable=False)
    description = Column(Text, nullable=True)
    edition = Column(String, nullable=True)
    isbn = Column(String, nullable=True)
    condition = Column(String, nullable=True)
    year_of_publication = Column(Integer, nullable=True)
    department = Column(String, nullable=True)
    image_data = Column(LargeBinary, nullable=True)
    image_content_type = Column(String, nullable=True)
    image_url = Column(String, nullable=True)
    rate = Column(Float, nullable=False, default=0)
    status = Column(Enum(BookStatus, values_callable=_values), nullable=False, default=BookStatus.AVAILABLE,
                    index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    owner = relationship("User", back_populates="books")

    @property
    def has_image(self) -> bool:
        # image_data is deferred on listings; the content type is always set alongside it
        return self.image_content_type is not None


Index('ix_books_status_owner', Book.status, Book.owner_id)


class Request(Base):
    __tablename__ = "requests"
    id = Column(Integer, primary_key=True, index=True)
    # no cascade: a deleted book leaves its requests behind
    book_id = Column(Integer, ForeignKey("books.id", ondelete="SET NULL"), nullable=True, index=True)
    requester_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(Enum(RequestType, values_callable=_values), nullable=False)
    message = Column(Text, nullable=True)
    status = Column(Enum(RequestStatus, values_callable=_values), nullable=False, default=RequestStatus.PENDING,
                    index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    book = relationship("Book")
    requester = relationship("User", foreign_keys=[requester_id])
    owner = relationship("User", foreign_keys=[owner_id])
