"""Flask-SQLAlchemy backed repositories.

Every query eager-loads the relationships its pages display, so records
fetched on a worker thread (see ``fetch_parallel``) remain readable after the
worker's session has been closed.
"""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload, selectinload

from locallibrary import db
from locallibrary.errors import DuplicateGenreName, GenreInUse
from locallibrary.models import Author, Book, BookInstance, Genre

logger = logging.getLogger(__name__)


def _coerce_id(item_id):
    """Integer primary key for ``item_id``, or None if it can't be one"""
    try:
        return int(item_id)
    except (TypeError, ValueError):
        return None


class SqlRepository:
    model = None

    def _order_by(self):
        return None

    def _query(self):
        return self.model.query

    def get_all(self):
        query = self._query()
        order_by = self._order_by()
        if order_by is not None:
            query = query.order_by(order_by)
        return query.all()

    def get_by_id(self, item_id):
        pk = _coerce_id(item_id)
        if pk is None:
            return None
        return self._query().filter(self.model.id == pk).first()

    def count(self):
        return self.model.query.count()


class GenreRepository(SqlRepository):
    model = Genre

    def _order_by(self):
        return Genre.name

    def get_by_name(self, name):
        return Genre.query.filter_by(name=name).first()

    def create(self, name):
        genre = Genre(name=name)
        db.session.add(genre)
        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            existing = self.get_by_name(name)
            if existing is None:
                raise
            logger.info('Genre "%s" was created concurrently (id=%s)', name, existing.id)
            raise DuplicateGenreName(existing) from e
        logger.info('Created genre %s "%s"', genre.id, name)
        return genre

    def update(self, genre_id, name):
        genre = self.get_by_id(genre_id)
        if genre is None:
            return None
        genre.name = name
        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            existing = self.get_by_name(name)
            if existing is None:
                raise
            raise DuplicateGenreName(existing) from e
        return genre

    def delete(self, genre_id):
        """Delete by id. Returns False if no such genre, raises GenreInUse if books reference it."""
        pk = _coerce_id(genre_id)
        if pk is None:
            return False
        try:
            result = db.session.execute(db.delete(Genre).where(Genre.id == pk))
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            raise GenreInUse(genre_id) from e
        return result.rowcount > 0


class AuthorRepository(SqlRepository):
    model = Author

    def _order_by(self):
        return Author.family_name


class BookRepository(SqlRepository):
    model = Book

    def _order_by(self):
        return Book.title

    def _query(self):
        return Book.query.options(
            joinedload(Book.author),
            selectinload(Book.genres),
        )

    def get_by_genre(self, genre_id):
        pk = _coerce_id(genre_id)
        if pk is None:
            return []
        return self._query().filter(Book.genres.any(Genre.id == pk)).order_by(Book.title).all()

    def get_by_author(self, author_id):
        pk = _coerce_id(author_id)
        if pk is None:
            return []
        return self._query().filter(Book.author_id == pk).order_by(Book.title).all()


class BookInstanceRepository(SqlRepository):
    model = BookInstance

    def _query(self):
        return BookInstance.query.options(joinedload(BookInstance.book))

    def get_all(self):
        return self._query().order_by(BookInstance.id).all()

    def get_by_book(self, book_id):
        pk = _coerce_id(book_id)
        if pk is None:
            return []
        return self._query().filter(BookInstance.book_id == pk).order_by(BookInstance.id).all()

    def count_available(self):
        return BookInstance.query.filter_by(status='Available').count()

    def create(self, data):
        bookinstance = BookInstance(
            book_id=int(data['book_id']),
            imprint=data['imprint'],
            status=data['status'],
            due_back=data['due_back'],
        )
        db.session.add(bookinstance)
        db.session.commit()
        logger.info('Created book copy %s of book %s', bookinstance.id, bookinstance.book_id)
        return bookinstance

    def update(self, bookinstance_id, data):
        bookinstance = self.get_by_id(bookinstance_id)
        if bookinstance is None:
            return None
        bookinstance.book_id = int(data['book_id'])
        bookinstance.imprint = data['imprint']
        bookinstance.status = data['status']
        bookinstance.due_back = data['due_back']
        db.session.commit()
        return bookinstance

    def delete(self, bookinstance_id):
        pk = _coerce_id(bookinstance_id)
        if pk is None:
            return False
        result = db.session.execute(db.delete(BookInstance).where(BookInstance.id == pk))
        db.session.commit()
        return result.rowcount > 0
