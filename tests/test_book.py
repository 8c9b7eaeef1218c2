from book import Book


def test_to_dict_omits_loan_fields_when_available():
    book = Book("1", " Emma ", "Jane Austen", "Classic")
    assert book.to_dict() == {
        "id": "1",
        "title": "Emma",
        "author": "Jane Austen",
        "genre": "Classic",
        "isBorrowed": False,
    }


def test_to_dict_includes_loan_fields_when_borrowed():
    book = Book("1", "Emma", "Jane Austen", "Classic", is_borrowed=True,
                borrower_id="reader-1", due_date="2024-01-15T12:00:00.000Z")
    data = book.to_dict()
    assert data["isBorrowed"] is True
    assert data["borrowerId"] == "reader-1"
    assert data["dueDate"] == "2024-01-15T12:00:00.000Z"


def test_from_dict_accepts_wire_names():
    book = Book.from_dict({
        "id": 7,
        "title": "Emma",
        "author": "Jane Austen",
        "genre": "Classic",
        "isBorrowed": True,
        "borrowerId": "reader-1",
        "dueDate": "2024-01-15T12:00:00.000Z",
    })
    assert book.id == "7"
    assert book.is_borrowed is True
    assert book.borrower_id == "reader-1"


def test_clear_loan():
    book = Book("1", "Emma", "Jane Austen", "Classic", is_borrowed=True,
                borrower_id="reader-1", due_date="2024-01-15T12:00:00.000Z")
    book.clear_loan()
    assert (book.is_borrowed, book.borrower_id, book.due_date) == (False, None, None)
