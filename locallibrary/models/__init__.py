from locallibrary.models.author import Author
from locallibrary.models.genre import Genre
from locallibrary.models.book import Book, book_genres
from locallibrary.models.bookinstance import BookInstance, BOOKINSTANCE_STATUSES, DEFAULT_STATUS

__all__ = ['Author', 'Genre', 'Book', 'book_genres', 'BookInstance',
           'BOOKINSTANCE_STATUSES', 'DEFAULT_STATUS']
