from __future__ import annotations


class Book:
    """A single book record in the catalog."""

    def __init__(self, id: str, title: str, author: str, genre: str, is_borrowed: bool = False,
                 borrower_id: str | None = None, due_date: str | None = None) -> None:
        self.id = id
        self.title = title.strip()
        self.author = author.strip()
        self.genre = genre.strip()
        # Loan fields, only set while the book is out
        self.is_borrowed = is_borrowed
        self.borrower_id = borrower_id
        self.due_date = due_date

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author} ({self.genre})"

    def __repr__(self) -> str:  # pragma: no cover
        return f"Book(id={self.id!r}, title={self.title!r}, is_borrowed={self.is_borrowed!r})"

    def clear_loan(self) -> None:
        self.is_borrowed = False
        self.borrower_id = None
        self.due_date = None

    def to_dict(self) -> dict:
        """Serialize using the wire names; loan fields are omitted when the book is available."""
        data = {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "genre": self.genre,
            "isBorrowed": self.is_borrowed,
        }
        if self.borrower_id is not None:
            data["borrowerId"] = self.borrower_id
        if self.due_date is not None:
            data["dueDate"] = self.due_date
        return data

    @staticmethod
    def from_dict(data: dict) -> "Book":
        # Accept both the wire names and the attribute names
        return Book(
            id=str(data["id"]),
            title=data["title"],
            author=data["author"],
            genre=data["genre"],
            is_borrowed=bool(data.get("isBorrowed", data.get("is_borrowed", False))),
            borrower_id=data.get("borrowerId", data.get("borrower_id")),
            due_date=data.get("dueDate", data.get("due_date")),
        )
