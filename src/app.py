"""Main FastAPI application module.

This module initializes the FastAPI application, registers all route
handlers, and turns every failure into a ``{"success": false, "message": ...}``
JSON body.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.routes import auth, contact, items
from config import (
    API_HOST,
    API_PORT,
    CORS_ALLOWED_ORIGINS,
    STATIC_DIR,
)
from core.database import init_db
from core.exceptions import ShopError, StorageUnavailableError
from core.logging_config import setup_logging

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

# Initialize FastAPI application
app = FastAPI(
    title="Sports Shop API",
    description="Backend API for the sports shop: accounts, catalogue, and purchases.",
    version="1.0.0",
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register route handlers
app.include_router(auth.router)
app.include_router(items.router)
app.include_router(contact.router)


def _failure(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
        headers=headers,
    )


@app.exception_handler(StarletteHTTPException)
def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = "Route not found."
    return _failure(exc.status_code, str(message), getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if not errors or any(err.get("type") == "missing" for err in errors):
        return _failure(status.HTTP_400_BAD_REQUEST, "All fields are required.")
    first = errors[0]
    field = first.get("loc", ("",))[-1]
    return _failure(
        status.HTTP_400_BAD_REQUEST, f"Invalid value for '{field}': {first.get('msg')}"
    )


@app.exception_handler(ShopError)
def shop_error_handler(request: Request, exc: ShopError) -> JSONResponse:
    return _failure(exc.status_code, exc.message)


@app.exception_handler(SQLAlchemyError)
def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    error = StorageUnavailableError()
    return _failure(error.status_code, error.message)


@app.on_event("startup")
def startup_tasks() -> None:
    """Create missing tables before serving requests."""
    init_db()


@app.get("/api/health", summary="Health check", tags=["Health"])
def health() -> dict:
    """Health check endpoint.

    Returns:
        Dictionary with status "ok".
    """
    return {"status": "ok"}


# Serve the browser client last so API routes take precedence
if STATIC_DIR.is_dir():
    app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")


# --- Startup code for direct execution ---
if __name__ == "__main__":
    import uvicorn

    server_url = f"http://{API_HOST}:{API_PORT}"
    logger.info("Server running at %s", server_url)
    logger.info("API docs: %s/docs", server_url)
    uvicorn.run("app:app", host=API_HOST, port=API_PORT, reload=True)
