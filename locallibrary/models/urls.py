"""Canonical reference paths for catalog records.

Every path is derived from the record identifier alone, so it can be computed
for a SQL row, a DynamoDB item or a bare id without touching the store.
"""
from locallibrary import CATALOG_PREFIX


def genre_url(genre_id):
    return f'{CATALOG_PREFIX}/genre/{genre_id}'


def bookinstance_url(bookinstance_id):
    return f'{CATALOG_PREFIX}/bookinstance/{bookinstance_id}'


def book_url(book_id):
    return f'{CATALOG_PREFIX}/book/{book_id}'


def author_url(author_id):
    return f'{CATALOG_PREFIX}/author/{author_id}'
