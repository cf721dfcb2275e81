from flask import Blueprint, render_template, abort
from locallibrary.utils import fetch_parallel, get_repositories

catalog_bp = Blueprint('catalog', __name__)


@catalog_bp.route('/')
def index():
    """Catalog home page with record counts"""
    # boto3 resources are not thread-safe, so every task gets its own repositories
    counts = fetch_parallel(
        book_count=lambda: get_repositories().books.count(),
        book_instance_count=lambda: get_repositories().instances.count(),
        book_instance_available_count=lambda: get_repositories().instances.count_available(),
        author_count=lambda: get_repositories().authors.count(),
        genre_count=lambda: get_repositories().genres.count(),
    )
    return render_template('catalog/index.html', title='Local Library Home', data=counts)


@catalog_bp.route('/books')
def book_list():
    books = get_repositories().books.get_all()
    return render_template('catalog/book_list.html', title='Book List', book_list=books)


@catalog_bp.route('/book/<book_id>')
def book_detail(book_id):
    """Book with its author, genres and copies"""
    repos = get_repositories()
    results = fetch_parallel(
        book=lambda: repos.books.get_by_id(book_id),
        book_instances=lambda: repos.instances.get_by_book(book_id),
    )
    if results['book'] is None:
        abort(404, description='Book not found')

    return render_template('catalog/book_detail.html', title=results['book'].title,
                           book=results['book'], book_instances=results['book_instances'])


@catalog_bp.route('/authors')
def author_list():
    authors = get_repositories().authors.get_all()
    return render_template('catalog/author_list.html', title='Author List', author_list=authors)


@catalog_bp.route('/author/<author_id>')
def author_detail(author_id):
    repos = get_repositories()
    results = fetch_parallel(
        author=lambda: repos.authors.get_by_id(author_id),
        author_books=lambda: repos.books.get_by_author(author_id),
    )
    if results['author'] is None:
        abort(404, description='Author not found')

    return render_template('catalog/author_detail.html', title='Author Detail',
                           author=results['author'], author_books=results['author_books'])
