from locallibrary import db
from locallibrary.models.urls import author_url


class Author(db.Model):
    __tablename__ = 'authors'

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    family_name = db.Column(db.String(100), nullable=False)
    date_of_birth = db.Column(db.Date, nullable=True)
    date_of_death = db.Column(db.Date, nullable=True)

    # Relationships
    books = db.relationship('Book', back_populates='author')

    @property
    def name(self):
        """Full name, family name first"""
        if self.first_name and self.family_name:
            return f'{self.family_name}, {self.first_name}'
        return self.family_name or self.first_name or ''

    @property
    def lifespan(self):
        born = self.date_of_birth.year if self.date_of_birth else ''
        died = self.date_of_death.year if self.date_of_death else ''
        if not born and not died:
            return ''
        return f'{born} - {died}'

    @property
    def url(self):
        return author_url(self.id)

    def __repr__(self):
        return f'<Author {self.name}>'
