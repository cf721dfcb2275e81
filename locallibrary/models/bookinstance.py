from locallibrary import db
from locallibrary.models.urls import bookinstance_url
from datetime import datetime

BOOKINSTANCE_STATUSES = ('Available', 'Maintenance', 'Loaned', 'Reserved')
DEFAULT_STATUS = 'Maintenance'


class BookInstance(db.Model):
    """A physical copy of a book"""
    __tablename__ = 'book_instances'

    id = db.Column(db.Integer, primary_key=True)
    imprint = db.Column(db.String(200), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=DEFAULT_STATUS)
    due_back = db.Column(db.Date, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Foreign keys
    book_id = db.Column(db.Integer, db.ForeignKey('books.id', ondelete='CASCADE'), nullable=False)

    # Relationships
    book = db.relationship('Book', back_populates='instances')

    @property
    def due_back_formatted(self):
        if not self.due_back:
            return ''
        return self.due_back.strftime('%b %d, %Y')

    @property
    def url(self):
        return bookinstance_url(self.id)

    def __repr__(self):
        return f'<BookInstance {self.id} ({self.status})>'
