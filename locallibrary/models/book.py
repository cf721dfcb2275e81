from locallibrary import db
from locallibrary.models.urls import book_url
from datetime import datetime


book_genres = db.Table(
    'book_genres',
    db.Column('book_id', db.Integer, db.ForeignKey('books.id', ondelete='CASCADE'), primary_key=True),
    # A genre can't be removed while a book still points at it
    db.Column('genre_id', db.Integer, db.ForeignKey('genres.id', ondelete='RESTRICT'), primary_key=True),
)


class Book(db.Model):
    __tablename__ = 'books'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    summary = db.Column(db.Text, nullable=True)
    isbn = db.Column(db.String(20), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Foreign keys
    author_id = db.Column(db.Integer, db.ForeignKey('authors.id'), nullable=False)

    # Relationships
    author = db.relationship('Author', back_populates='books')
    genres = db.relationship('Genre', secondary=book_genres, back_populates='books')
    instances = db.relationship('BookInstance', back_populates='book',
                                cascade='all, delete-orphan')

    @property
    def url(self):
        return book_url(self.id)

    def __repr__(self):
        return f'<Book {self.title}>'
