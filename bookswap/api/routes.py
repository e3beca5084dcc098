from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import Any, Dict, Optional

from bookswap.core.database import get_db
from bookswap.core.security import authenticate
from bookswap.schemas import schemas
from bookswap.services import auth_service, book_service, request_service

router = APIRouter(prefix="/api")

Identity = Dict[str, Any]


def book_form(
    title: Optional[str] = Form(None),
    author: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    edition: Optional[str] = Form(None),
    isbn: Optional[str] = Form(None),
    condition: Optional[str] = Form(None),
    department: Optional[str] = Form(None),
    year_of_publication: Optional[str] = Form(None, alias="yearOfPublication"),
    rate: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    image_url: Optional[str] = Form(None, alias="imageUrl"),
) -> schemas.BookForm:
    return schemas.BookForm(
        title=title, author=author, category=category, description=description, edition=edition, isbn=isbn,
        condition=condition, department=department, year_of_publication=year_of_publication, rate=rate,
        status=status, image_url=image_url,
    )


async def read_image(image: Optional[UploadFile]) -> Optional[book_service.ImageUpload]:
    # browsers send an empty part when no file was picked
    if image is None or not image.filename:
        return None
    data = await image.read()
    return book_service.ImageUpload(data=data, content_type=image.content_type or "")


# -----------------------------
# Auth
# -----------------------------
@router.post("/auth/register", response_model=schemas.AuthOut)
def register(body: schemas.RegisterIn, db: Session = Depends(get_db)):
    return auth_service.register(
        db, name=body.name, department=body.department, register_number=body.register_number,
        year_of_study=body.year_of_study, email=body.email, password=body.password,
    )


@router.post("/auth/login", response_model=schemas.AuthOut)
def login(body: schemas.LoginIn, db: Session = Depends(get_db)):
    return auth_service.login(db, body.email, body.password)


@router.post("/auth/logout", response_model=schemas.MessageOut)
def logout(identity: Identity = Depends(authenticate)):
    return auth_service.logout()


@router.get("/auth/me", response_model=schemas.UserOut)
def me(identity: Identity = Depends(authenticate), db: Session = Depends(get_db)):
    return auth_service.me(db, identity)


# -----------------------------
# Requests (registered before /books/{book_id} so "requests" is never taken for an id)
# -----------------------------
@router.get("/books/requests/sent", response_model=schemas.RequestList)
def list_sent_requests(identity: Identity = Depends(authenticate), db: Session = Depends(get_db)):
    return {"requests": request_service.list_sent(db, identity["id"])}


@router.get("/books/requests/received", response_model=schemas.RequestList)
def list_received_requests(identity: Identity = Depends(authenticate), db: Session = Depends(get_db)):
    return {"requests": request_service.list_received(db, identity["id"])}


@router.patch("/books/requests/{request_id}/accept", response_model=schemas.AcceptOut)
def accept_request(request_id: int, identity: Identity = Depends(authenticate), db: Session = Depends(get_db)):
    request, book = request_service.accept(db, request_id, identity["id"])
    return {"request": request, "book": book}


@router.patch("/books/requests/{request_id}/reject", response_model=schemas.RejectOut)
def reject_request(request_id: int, identity: Identity = Depends(authenticate), db: Session = Depends(get_db)):
    return {"request": request_service.reject(db, request_id, identity["id"])}


# -----------------------------
# Books
# -----------------------------
@router.post("/books", response_model=schemas.BookEnvelope, status_code=201)
async def add_book(form: schemas.BookForm = Depends(book_form), image: Optional[UploadFile] = File(None),
                   identity: Identity = Depends(authenticate), db: Session = Depends(get_db)):
    upload = await read_image(image)
    book = book_service.add_book(db, identity["id"], form.model_dump(), upload)
    return {"message": "Book added successfully", "book": book}


@router.get("/books", response_model=schemas.BookList)
def list_my_books(identity: Identity = Depends(authenticate), db: Session = Depends(get_db)):
    return {"books": book_service.list_mine(db, identity["id"])}


@router.get("/books/available", response_model=schemas.BookList)
def list_available_books(identity: Identity = Depends(authenticate), db: Session = Depends(get_db)):
    return {"books": book_service.list_available(db, identity["id"])}


@router.get("/books/{book_id}", response_model=schemas.BookDetail)
def read_book(book_id: int, identity: Identity = Depends(authenticate), db: Session = Depends(get_db)):
    return {"book": book_service.get_book(db, book_id)}


@router.put("/books/{book_id}", response_model=schemas.BookEnvelope)
async def update_book(book_id: int, form: schemas.BookForm = Depends(book_form),
                      image: Optional[UploadFile] = File(None),
                      identity: Identity = Depends(authenticate), db: Session = Depends(get_db)):
    upload = await read_image(image)
    patch = form.model_dump(exclude_none=True)
    book = book_service.update_book(db, book_id, identity["id"], patch, upload)
    return {"message": "Book updated successfully", "book": book}


@router.delete("/books/{book_id}", response_model=schemas.MessageOut)
def delete_book(book_id: int, identity: Identity = Depends(authenticate), db: Session = Depends(get_db)):
    book_service.delete_book(db, book_id, identity["id"])
    return {"message": "Book deleted successfully"}


@router.get("/books/{book_id}/image")
def book_image(book_id: int, db: Session = Depends(get_db)):
    # unauthenticated so clients can use the URL directly as an image source
    data, content_type = book_service.get_image(db, book_id)
    return Response(content=data, media_type=content_type)


@router.post("/books/{book_id}/request", response_model=schemas.RequestEnvelope, status_code=201)
def request_book(book_id: int, body: schemas.RequestCreate, identity: Identity = Depends(authenticate),
                 db: Session = Depends(get_db)):
    request = request_service.create_request(db, book_id, identity["id"], body.type, body.message)
    return {"message": "Request sent successfully", "request": request}


@router.get("/health")
def health():
    return {"ok": True}
