from collections import namedtuple
from flask import current_app

Repositories = namedtuple('Repositories', ['genres', 'books', 'authors', 'instances'])


def get_repositories():
    """Repository set for the configured backend (DynamoDB when USE_AWS is on)"""
    if current_app.config.get('USE_AWS'):
        from locallibrary.utils import dynamo_repo as backend
    else:
        from locallibrary.utils import sql_repo as backend

    return Repositories(
        genres=backend.GenreRepository(),
        books=backend.BookRepository(),
        authors=backend.AuthorRepository(),
        instances=backend.BookInstanceRepository(),
    )
