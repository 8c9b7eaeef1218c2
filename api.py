import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from catalog import Catalog, CatalogError, ValidationError
from config import configure_logging, settings

logger = logging.getLogger(__name__)


# --- Models ---
class BookModel(BaseModel):
    id: str
    title: str
    author: str
    genre: str
    isBorrowed: bool = False
    borrowerId: Optional[str] = None
    dueDate: Optional[str] = None
    penalty: Optional[int] = None


class BookCreateModel(BaseModel):
    # Optional here so that missing fields reach the catalog's own validation
    title: Optional[str] = None
    author: Optional[str] = None
    genre: Optional[str] = None


class BorrowerModel(BaseModel):
    borrowerId: Optional[str] = None


class MessageModel(BaseModel):
    message: str


# --- Dependencies ---
def get_catalog(request: Request) -> Catalog:
    """Catalog owned by the running application."""
    return request.app.state.catalog


def _require_borrower(payload: BorrowerModel) -> str:
    if not payload.borrowerId or not payload.borrowerId.strip():
        raise ValidationError("borrowerId is required")
    return payload.borrowerId.strip()


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


router = APIRouter()


# --- Health ---
@router.get("/health")
def health_check(catalog: Catalog = Depends(get_catalog)):
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "total_books": len(catalog),
    }


# --- Books ---
@router.get("/books", response_model=List[BookModel], response_model_exclude_none=True)
def get_books(catalog: Catalog = Depends(get_catalog)):
    """List every book in the catalog."""
    return [BookModel(**b.to_dict()) for b in catalog.list_all()]


# Fixed paths must be registered ahead of /books/{book_id}
@router.get("/books/recommendations", response_model=List[BookModel], response_model_exclude_none=True)
def get_recommendations(catalog: Catalog = Depends(get_catalog)):
    """Up to three recommended books."""
    return [BookModel(**b.to_dict()) for b in catalog.recommend()]


@router.get("/books/popular", response_model=List[BookModel], response_model_exclude_none=True)
def get_popular_books(catalog: Catalog = Depends(get_catalog)):
    """Books from the most borrowed genres."""
    return [BookModel(**b.to_dict()) for b in catalog.popular_by_genre()]


@router.get("/books/{book_id}", response_model=BookModel, response_model_exclude_none=True)
def get_book(book_id: str, catalog: Catalog = Depends(get_catalog)):
    return BookModel(**catalog.get(book_id).to_dict())


@router.post("/books", response_model=BookModel, response_model_exclude_none=True, status_code=201)
def add_book(payload: BookCreateModel, catalog: Catalog = Depends(get_catalog)):
    """Add a new book; title, author and genre are required."""
    book = catalog.add(payload.title, payload.author, payload.genre)
    return BookModel(**book.to_dict())


@router.put("/books/{book_id}", response_model=BookModel, response_model_exclude_none=True)
def update_book(book_id: str, fields: Dict[str, Any] = Body(...), catalog: Catalog = Depends(get_catalog)):
    """Update a book's title, author or genre. Loan fields and the id cannot be changed here."""
    return BookModel(**catalog.update(book_id, fields).to_dict())


@router.patch("/books/{book_id}", response_model=BookModel, response_model_exclude_none=True)
def patch_book(book_id: str, fields: Dict[str, Any] = Body(...), catalog: Catalog = Depends(get_catalog)):
    return BookModel(**catalog.update(book_id, fields).to_dict())


@router.delete("/books/{book_id}", response_model=MessageModel)
def delete_book(book_id: str, catalog: Catalog = Depends(get_catalog)):
    if not catalog.delete(book_id):
        raise HTTPException(status_code=404, detail="Book not found")
    return MessageModel(message="Book deleted")


# --- Circulation ---
@router.post("/books/{book_id}/borrow", response_model=BookModel, response_model_exclude_none=True)
def borrow_book(book_id: str, payload: BorrowerModel, catalog: Catalog = Depends(get_catalog)):
    """Lend a book; the body carries ``borrowerId``."""
    catalog.get(book_id)
    book = catalog.borrow(book_id, _require_borrower(payload))
    return BookModel(**book.to_dict())


@router.post("/books/{book_id}/return", response_model=BookModel, response_model_exclude_none=True)
def return_book(book_id: str, payload: BorrowerModel, catalog: Catalog = Depends(get_catalog)):
    """Return a borrowed book. ``penalty`` is included only when the return was late."""
    catalog.get(book_id)
    result = catalog.return_book(book_id, _require_borrower(payload))
    return BookModel(**result.to_dict())


def create_app(catalog: Optional[Catalog] = None) -> FastAPI:
    """Build the API around ``catalog`` (a freshly seeded one by default)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        logger.info(f"{settings.app_name} started with {len(app.state.catalog)} books")
        yield
        logger.info(f"{settings.app_name} shutting down")

    app = FastAPI(title=settings.app_name, version=settings.app_version, debug=settings.debug,
                  lifespan=lifespan)
    app.state.catalog = catalog if catalog is not None else Catalog()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        return response

    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.include_router(router)
    return app


app = create_app()
