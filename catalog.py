import logging
import math
import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from book import Book
from config import settings

logger = logging.getLogger(__name__)

# Records present when a fresh catalog starts up
SEED_BOOKS: List[Dict[str, str]] = [
    {"id": "1", "title": "The Great Gatsby", "author": "F. Scott Fitzgerald", "genre": "Fiction"},
    {"id": "2", "title": "1984", "author": "George Orwell", "genre": "Dystopian"},
    {"id": "3", "title": "To Kill a Mockingbird", "author": "Harper Lee", "genre": "Classic"},
]

# Stand-in for real circulation statistics
MOCK_GENRE_BORROW_COUNTS: Dict[str, int] = {
    "Fiction": 42,
    "Dystopian": 35,
    "Classic": 28,
    "Science Fiction": 21,
    "Fantasy": 17,
    "Mystery": 12,
}

UPDATABLE_FIELDS = ("title", "author", "genre")
# Only borrow/return may touch these; camelCase spellings come straight from request bodies
PROTECTED_FIELDS = frozenset({
    "id", "is_borrowed", "borrower_id", "due_date",
    "isBorrowed", "borrowerId", "dueDate",
})


class CatalogError(Exception):
    """Base class for catalog failures. ``status_code`` is the HTTP mapping."""

    status_code = 400


class ValidationError(CatalogError):
    status_code = 400


class NotFoundError(CatalogError, LookupError):
    status_code = 404


class AlreadyBorrowedError(CatalogError):
    status_code = 404


class NotBorrowedError(CatalogError):
    status_code = 404


class WrongBorrowerError(CatalogError):
    status_code = 403


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a trailing ``Z``."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReturnResult:
    """Outcome of a return: the now-available book and any late penalty."""

    def __init__(self, book: Book, penalty: int = 0) -> None:
        self.book = book
        self.penalty = penalty

    def to_dict(self) -> dict:
        data = self.book.to_dict()
        if self.penalty > 0:
            data["penalty"] = self.penalty
        return data


class Catalog:
    """Owns the collection of books and the borrow/return workflow."""

    def __init__(self, seed: bool = True, clock: Optional[Callable[[], datetime]] = None,
                 loan_days: Optional[int] = None, penalty_grace_days: Optional[int] = None,
                 penalty_per_day: Optional[int] = None) -> None:
        self._books: Dict[str, Book] = {}
        self._lock = threading.RLock()
        self._clock = clock or _utcnow
        self.loan_days = settings.loan_days if loan_days is None else loan_days
        self.penalty_grace_days = settings.penalty_grace_days if penalty_grace_days is None else penalty_grace_days
        self.penalty_per_day = settings.penalty_per_day if penalty_per_day is None else penalty_per_day
        if seed:
            for entry in SEED_BOOKS:
                book = Book.from_dict(entry)
                self._books[book.id] = book
            logger.info(f"Catalog seeded with {len(self._books)} books")

    def __len__(self) -> int:
        return len(self._books)

    # ------------------------- Core operations ------------------------- #
    def list_all(self) -> List[Book]:
        with self._lock:
            return list(self._books.values())

    def get(self, book_id: str) -> Book:
        book = self._books.get(book_id)
        if book is None:
            raise NotFoundError(f"Book with ID {book_id} not found")
        return book

    def add(self, title: Optional[str], author: Optional[str], genre: Optional[str]) -> Book:
        """Create a book. Title, author and genre are all required."""
        missing = [name for name, value in (("title", title), ("author", author), ("genre", genre))
                   if not value or not str(value).strip()]
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)} (title, author, and genre are required)"
            )

        with self._lock:
            book_id = self._new_id()
            book = Book(id=book_id, title=title, author=author, genre=genre)
            self._books[book_id] = book
        logger.info(f"Added book {book.id}: {book.title!r} by {book.author}")
        return book

    def update(self, book_id: str, fields: Mapping[str, Any]) -> Book:
        """Merge ``fields`` into a book.

        Protected loan fields and the id are dropped silently, as are unknown
        keys, ``None`` values and blank strings.
        """
        with self._lock:
            book = self.get(book_id)
            ignored = sorted(k for k in fields if k in PROTECTED_FIELDS)
            if ignored:
                logger.debug(f"Ignoring protected fields on update of {book_id}: {ignored}")
            for name in UPDATABLE_FIELDS:
                value = fields.get(name)
                if value is None:
                    continue
                value = str(value).strip()
                if value:
                    setattr(book, name, value)
        logger.info(f"Updated book {book_id}")
        return book

    def delete(self, book_id: str) -> bool:
        with self._lock:
            removed = self._books.pop(book_id, None)
        if removed is None:
            return False
        logger.info(f"Deleted book {book_id}")
        return True

    # ------------------------- Circulation ------------------------- #
    def borrow(self, book_id: str, borrower_id: Optional[str]) -> Book:
        """Lend a book to ``borrower_id``; due back after ``loan_days``."""
        with self._lock:
            book = self.get(book_id)
            if not borrower_id or not str(borrower_id).strip():
                raise ValidationError("borrowerId is required")
            if book.is_borrowed:
                raise AlreadyBorrowedError(f"Book with ID {book_id} is already borrowed")

            book.is_borrowed = True
            book.borrower_id = str(borrower_id).strip()
            book.due_date = format_timestamp(self._clock() + timedelta(days=self.loan_days))
        logger.info(f"Book {book_id} borrowed by {book.borrower_id}, due {book.due_date}")
        return book

    def return_book(self, book_id: str, borrower_id: Optional[str]) -> ReturnResult:
        """Take a book back from its borrower and assess any late penalty."""
        with self._lock:
            book = self.get(book_id)
            if not book.is_borrowed:
                raise NotBorrowedError(f"Book with ID {book_id} is not currently borrowed")
            if book.borrower_id != borrower_id:
                raise WrongBorrowerError(f"Book with ID {book_id} was not borrowed by this user")

            penalty = 0
            if book.due_date:
                penalty = self.penalty_for(self.days_late(book.due_date))
            book.clear_loan()

        if penalty > 0:
            logger.info(f"Book {book_id} returned late by {borrower_id}, penalty {penalty}")
        else:
            logger.info(f"Book {book_id} returned by {borrower_id}")
        return ReturnResult(book, penalty)

    def days_late(self, due_date: str) -> int:
        """Whole days past ``due_date``, rounded up; zero or negative when on time."""
        elapsed = self._clock() - parse_timestamp(due_date)
        return math.ceil(elapsed.total_seconds() / timedelta(days=1).total_seconds())

    def penalty_for(self, days_late: int) -> int:
        if days_late > self.penalty_grace_days:
            return (days_late - self.penalty_grace_days) * self.penalty_per_day
        return 0

    # ------------------------- Recommendations ------------------------- #
    def recommend(self, limit: Optional[int] = None) -> List[Book]:
        """Placeholder recommendations: the first books in insertion order."""
        limit = settings.recommendation_limit if limit is None else limit
        return self.list_all()[:max(0, limit)]

    def popular_by_genre(self, genre_count: Optional[int] = None,
                         per_genre: Optional[int] = None) -> List[Book]:
        """Books from the most borrowed genres, grouped in genre-rank order."""
        genre_count = settings.popular_genre_count if genre_count is None else genre_count
        per_genre = settings.popular_books_per_genre if per_genre is None else per_genre

        ranked = sorted(MOCK_GENRE_BORROW_COUNTS.items(), key=lambda x: x[1], reverse=True)
        top_genres = [genre for genre, _ in ranked[:genre_count]]
        logger.debug(f"Top genres: {top_genres}")

        books = self.list_all()
        result: List[Book] = []
        for genre in top_genres:
            wanted = genre.casefold()
            matches = [b for b in books if b.genre.casefold() == wanted]
            result.extend(matches[:per_genre])
        return result

    # ------------------------- Utilities ------------------------- #
    def _new_id(self) -> str:
        book_id = uuid.uuid4().hex
        while book_id in self._books:  # pragma: no cover - uuid4 collisions
            book_id = uuid.uuid4().hex
        return book_id
