import datetime
import pytest
from flask import template_rendered
from locallibrary import create_app, db
from locallibrary.models import Author, Book, BookInstance, Genre


@pytest.fixture
def app(tmp_path):
    app = create_app('testing', {
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'catalog.db'}",
        'PARALLEL_FETCH_WORKERS': 2,
    })
    yield app
    with app.app_context():
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def captured_templates(app):
    recorded = []

    def record(sender, template, context, **extra):
        recorded.append((template.name, context))

    template_rendered.connect(record, app)
    yield recorded
    template_rendered.disconnect(record, app)


@pytest.fixture
def catalog(app):
    """A small catalog: one author, two genres (only Fantasy in use), two books, two copies"""
    with app.app_context():
        author = Author(first_name="Patrick", family_name="Rothfuss",
                        date_of_birth=datetime.date(1973, 6, 6))
        fantasy = Genre(name="Fantasy")
        poetry = Genre(name="French Poetry")
        wind = Book(title="The Name of the Wind", summary="Kvothe's story.", isbn="9781473211896",
                    author=author, genres=[fantasy])
        fear = Book(title="The Wise Man's Fear", summary="Day two.", isbn="9788401352836",
                    author=author, genres=[fantasy])
        available = BookInstance(book=wind, imprint="Gollancz, 2014.", status="Available")
        loaned = BookInstance(book=fear, imprint="Gollancz, 2011.", status="Loaned",
                              due_back=datetime.date(2026, 11, 1))
        db.session.add_all([author, fantasy, poetry, wind, fear, available, loaned])
        db.session.commit()
        return {
            "author": author.id,
            "fantasy": fantasy.id,
            "poetry": poetry.id,
            "wind": wind.id,
            "fear": fear.id,
            "available": available.id,
            "loaned": loaned.id,
        }


@pytest.fixture
def rendered(captured_templates):
    """Look up the context of the most recent render of a template by name"""
    def context_for(name):
        for template_name, context in reversed(captured_templates):
            if template_name == name:
                return context
        raise AssertionError(f"{name} was not rendered")
    return context_for
