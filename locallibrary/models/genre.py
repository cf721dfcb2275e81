from locallibrary import db
from locallibrary.models.urls import genre_url
from datetime import datetime

GENRE_NAME_MIN_LENGTH = 3
GENRE_NAME_MAX_LENGTH = 100


class Genre(db.Model):
    __tablename__ = 'genres'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(GENRE_NAME_MAX_LENGTH), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    books = db.relationship('Book', secondary='book_genres', back_populates='genres')

    @property
    def url(self):
        return genre_url(self.id)

    def __repr__(self):
        return f'<Genre {self.name}>'
