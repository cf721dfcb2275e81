from locallibrary.utils.parallel import fetch_parallel
from locallibrary.utils.repositories import get_repositories
from locallibrary.utils.validators import FieldError, validate_bookinstance_form, validate_genre_form

__all__ = [
    'fetch_parallel',
    'get_repositories',
    'FieldError',
    'validate_bookinstance_form',
    'validate_genre_form'
]
