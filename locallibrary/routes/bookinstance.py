from flask import Blueprint, render_template, redirect, url_for, flash, request, abort
from flask import current_app
from locallibrary.models import BOOKINSTANCE_STATUSES
from locallibrary.utils import fetch_parallel, get_repositories, validate_bookinstance_form

bookinstance_bp = Blueprint('bookinstance', __name__)


def _render_form(title, book_list, bookinstance=None, selected_book=None, errors=None):
    return render_template('bookinstance/form.html',
                           title=title,
                           book_list=book_list,
                           bookinstance=bookinstance,
                           selected_book=str(selected_book) if selected_book else None,
                           statuses=BOOKINSTANCE_STATUSES,
                           errors=errors or [])


@bookinstance_bp.route('/bookinstances')
def bookinstance_list():
    """Display list of all book copies"""
    instances = get_repositories().instances.get_all()
    return render_template('bookinstance/list.html', title='Book Instance List',
                           bookinstance_list=instances)


@bookinstance_bp.route('/bookinstance/<bookinstance_id>')
def bookinstance_detail(bookinstance_id):
    bookinstance = get_repositories().instances.get_by_id(bookinstance_id)
    if bookinstance is None:
        abort(404, description='Book copy not found')

    title = bookinstance.book.title if bookinstance.book else bookinstance.imprint
    return render_template('bookinstance/detail.html', title=f'Copy: {title}',
                           bookinstance=bookinstance)


@bookinstance_bp.route('/bookinstance/create', methods=['GET', 'POST'])
def bookinstance_create():
    """Add a copy of an existing book"""
    repos = get_repositories()
    books = repos.books.get_all()

    if request.method == 'POST':
        data, errors = validate_bookinstance_form(request.form, books)
        if errors:
            return _render_form('Create BookInstance', books, bookinstance=data,
                                selected_book=data['book_id'], errors=errors)

        bookinstance = repos.instances.create(data)
        current_app.logger.info('Created book copy %s', bookinstance.id)
        flash('Book copy created.', 'success')
        return redirect(bookinstance.url)

    return _render_form('Create BookInstance', books)


@bookinstance_bp.route('/bookinstance/<bookinstance_id>/delete', methods=['GET', 'POST'])
def bookinstance_delete(bookinstance_id):
    if request.method == 'POST':
        bookinstance_id = request.form.get('bookinstanceid') or bookinstance_id

    instances = get_repositories().instances
    bookinstance = instances.get_by_id(bookinstance_id)
    if bookinstance is None:
        abort(404, description='Book copy not found')

    if request.method == 'POST':
        if not instances.delete(bookinstance_id):
            abort(404, description='Book copy not found')
        current_app.logger.info('Deleted book copy %s', bookinstance_id)
        flash('Book copy deleted.', 'success')
        return redirect(url_for('bookinstance.bookinstance_list'))

    return render_template('bookinstance/delete.html', title='Delete BookInstance',
                           bookinstance=bookinstance)


@bookinstance_bp.route('/bookinstance/<bookinstance_id>/update', methods=['GET', 'POST'])
def bookinstance_update(bookinstance_id):
    """Overwrite every field of a book copy"""
    repos = get_repositories()
    results = fetch_parallel(
        bookinstance=lambda: repos.instances.get_by_id(bookinstance_id),
        book_list=repos.books.get_all,
    )
    bookinstance = results['bookinstance']
    books = results['book_list']
    if bookinstance is None:
        abort(404, description='Book copy not found')

    if request.method == 'POST':
        data, errors = validate_bookinstance_form(request.form, books)
        if errors:
            data['id'] = bookinstance_id
            return _render_form('Update BookInstance', books, bookinstance=data,
                                selected_book=data['book_id'], errors=errors)

        updated = repos.instances.update(bookinstance_id, data)
        if updated is None:
            abort(404, description='Book copy not found')
        current_app.logger.info('Updated book copy %s', bookinstance_id)
        flash('Book copy updated.', 'success')
        return redirect(updated.url)

    return _render_form('Update BookInstance', books, bookinstance=bookinstance,
                        selected_book=bookinstance.book_id)
