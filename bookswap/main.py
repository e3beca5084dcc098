import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bookswap.core.config import settings
from bookswap.core.database import Base, engine
from bookswap.core.errors import BookSwapError, ValidationError
from bookswap.api import routes

logging.basicConfig(level=settings.LOG_LEVEL,
                    format="%(asctime)s %(levelname)s %(name)s - %(message)s")
logger = logging.getLogger("bookswap")

Base.metadata.create_all(bind=engine)
app = FastAPI(title="BookSwap API", description="Peer-to-peer book exchange", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(status_code: int, message: str, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, "error": error})


@app.exception_handler(BookSwapError)
async def domain_error_handler(request: Request, exc: BookSwapError):
    return error_response(exc.status_code, exc.message, exc.name)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path"))
        problems.append(f"{field}: {err.get('msg')}" if field else err.get("msg", "Invalid input"))
    return error_response(ValidationError.status_code, "; ".join(problems) or "Invalid input", "Validation")


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(500, "Server error", "Server")


app.include_router(routes.router)
