"""Script to add sample authors, genres, books and copies to the catalog"""
from datetime import date

from dotenv import load_dotenv
load_dotenv()

from locallibrary import create_app, db
from locallibrary.errors import DuplicateGenreName

app = create_app()

SAMPLE_AUTHORS = [
    {'first_name': 'Patrick', 'family_name': 'Rothfuss', 'date_of_birth': date(1973, 6, 6)},
    {'first_name': 'Ben', 'family_name': 'Bova', 'date_of_birth': date(1932, 11, 8)},
    {'first_name': 'Isaac', 'family_name': 'Asimov', 'date_of_birth': date(1920, 1, 2),
     'date_of_death': date(1992, 4, 6)},
    {'first_name': 'Bob', 'family_name': 'Billings'},
]

SAMPLE_GENRES = ['Fantasy', 'Science Fiction', 'French Poetry']

SAMPLE_BOOKS = [
    {'title': 'The Name of the Wind (The Kingkiller Chronicle, #1)', 'author': 'Rothfuss',
     'isbn': '9781473211896', 'genres': ['Fantasy'],
     'summary': 'I have stolen princesses back from sleeping barrow kings.'},
    {'title': "The Wise Man's Fear (The Kingkiller Chronicle, #2)", 'author': 'Rothfuss',
     'isbn': '9788401352836', 'genres': ['Fantasy'],
     'summary': 'Picking up the tale of Kvothe Kingkiller once again.'},
    {'title': 'Apes and Angels', 'author': 'Bova',
     'isbn': '9780765379528', 'genres': ['Science Fiction'],
     'summary': 'Humankind headed out to the stars not for conquest, nor exploration.'},
    {'title': 'Test Book 1', 'author': 'Billings', 'isbn': 'ISBN111111', 'genres': [],
     'summary': 'Summary of test book 1'},
]

SAMPLE_COPIES = [
    {'book': 'The Name of the Wind (The Kingkiller Chronicle, #1)', 'imprint': 'London Gollancz, 2014.',
     'status': 'Available'},
    {'book': "The Wise Man's Fear (The Kingkiller Chronicle, #2)", 'imprint': 'Gollancz, 2011.',
     'status': 'Loaned', 'due_back': date(2026, 11, 1)},
    {'book': 'Apes and Angels', 'imprint': 'New York Tom Doherty Associates, 2016.',
     'status': 'Maintenance'},
    {'book': 'Test Book 1', 'imprint': 'Imprint XXX2', 'status': 'Reserved'},
]


def seed_sql():
    from locallibrary.models import Author, Book, BookInstance, Genre

    authors = {}
    for data in SAMPLE_AUTHORS:
        author = Author.query.filter_by(family_name=data['family_name']).first()
        if not author:
            author = Author(**data)
            db.session.add(author)
            print(f"Added author: {data['family_name']}")
        authors[data['family_name']] = author

    genres = {}
    for name in SAMPLE_GENRES:
        genre = Genre.query.filter_by(name=name).first()
        if not genre:
            genre = Genre(name=name)
            db.session.add(genre)
            print(f"Added genre: {name}")
        genres[name] = genre

    books = {}
    for data in SAMPLE_BOOKS:
        book = Book.query.filter_by(title=data['title']).first()
        if not book:
            book = Book(
                title=data['title'],
                summary=data['summary'],
                isbn=data['isbn'],
                author=authors[data['author']],
                genres=[genres[name] for name in data['genres']]
            )
            db.session.add(book)
            print(f"Added book: {data['title']}")
        books[data['title']] = book

    if BookInstance.query.count() == 0:
        for data in SAMPLE_COPIES:
            db.session.add(BookInstance(
                book=books[data['book']],
                imprint=data['imprint'],
                status=data['status'],
                due_back=data.get('due_back')
            ))
        print(f"Added {len(SAMPLE_COPIES)} book copies")

    db.session.commit()


def seed_dynamo():
    from locallibrary.utils.dynamo_repo import (AuthorRepository, BookInstanceRepository,
                                                BookRepository, GenreRepository)

    author_repo = AuthorRepository()
    authors = {}
    for data in SAMPLE_AUTHORS:
        item = {key: value.isoformat() if isinstance(value, date) else value for key, value in data.items()}
        authors[data['family_name']] = author_repo.save(item)['id']

    genre_repo = GenreRepository()
    genres = {}
    for name in SAMPLE_GENRES:
        try:
            genres[name] = genre_repo.create(name).id
        except DuplicateGenreName as e:
            genres[name] = e.existing.id

    book_repo = BookRepository()
    books = {}
    for data in SAMPLE_BOOKS:
        item = book_repo.save({
            'title': data['title'],
            'summary': data['summary'],
            'isbn': data['isbn'],
            'author_id': authors[data['author']],
            'genre_ids': [genres[name] for name in data['genres']]
        })
        books[data['title']] = item['id']

    instance_repo = BookInstanceRepository()
    for data in SAMPLE_COPIES:
        instance_repo.create({
            'book_id': books[data['book']],
            'imprint': data['imprint'],
            'status': data['status'],
            'due_back': data.get('due_back')
        })


with app.app_context():
    if app.config.get('USE_AWS'):
        seed_dynamo()
    else:
        seed_sql()
    print("\nSample data added successfully!")
