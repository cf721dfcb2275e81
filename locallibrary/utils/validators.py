"""Form validation for the catalog handlers.

Validators never raise on bad input. Each returns ``(data, errors)`` where
``data`` holds the trimmed (and, where possible, converted) values and
``errors`` is a list of :class:`FieldError`, empty when the form is valid.
"""
from collections import namedtuple
from datetime import date
import re

from locallibrary.models.bookinstance import BOOKINSTANCE_STATUSES, DEFAULT_STATUS
from locallibrary.models.genre import GENRE_NAME_MAX_LENGTH, GENRE_NAME_MIN_LENGTH

FieldError = namedtuple('FieldError', ['field', 'message'])

ISO_DATE_RE = re.compile(
    r'(\d{4}-\d{2}-\d{2})'
    r'(T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?)?'
)


def parse_iso_date(value):
    """Parse an ISO-8601 date (or date-time) string, returning the date or None"""
    match = ISO_DATE_RE.fullmatch(value or '')
    if not match:
        return None
    try:
        return date.fromisoformat(match.group(1))
    except ValueError:
        return None


def validate_genre_form(form):
    name = form.get('name', '').strip()
    errors = []

    if not name:
        errors.append(FieldError('name', 'Genre name required'))
    elif len(name) < GENRE_NAME_MIN_LENGTH:
        errors.append(FieldError('name', f'Genre name must be at least {GENRE_NAME_MIN_LENGTH} characters'))
    elif len(name) > GENRE_NAME_MAX_LENGTH:
        errors.append(FieldError('name', f'Genre name must be at most {GENRE_NAME_MAX_LENGTH} characters'))

    return {'name': name}, errors


def validate_bookinstance_form(form, books):
    """Validate a book copy submission against the list of books it may reference"""
    book_id = form.get('book', '').strip()
    imprint = form.get('imprint', '').strip()
    status = form.get('status', '').strip() or DEFAULT_STATUS
    due_back_str = form.get('due_back', '').strip()

    errors = []

    if not book_id:
        errors.append(FieldError('book', 'Book must be specified'))
    elif book_id not in {str(book.id) for book in books}:
        errors.append(FieldError('book', 'Book not found'))

    if not imprint:
        errors.append(FieldError('imprint', 'Imprint must be specified'))

    if status not in BOOKINSTANCE_STATUSES:
        errors.append(FieldError('status', 'Invalid status'))

    due_back = None
    if due_back_str:
        due_back = parse_iso_date(due_back_str)
        if due_back is None:
            errors.append(FieldError('due_back', 'Invalid date'))
            # keep what the user typed so the form can show it back
            due_back = due_back_str

    data = {
        'book_id': book_id,
        'imprint': imprint,
        'status': status,
        'due_back': due_back,
    }
    return data, errors
