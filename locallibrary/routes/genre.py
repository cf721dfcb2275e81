from flask import Blueprint, render_template, redirect, url_for, flash, request, abort
from flask import current_app
from locallibrary.errors import DuplicateGenreName, GenreInUse
from locallibrary.utils import FieldError, fetch_parallel, get_repositories, validate_genre_form

genre_bp = Blueprint('genre', __name__)


@genre_bp.route('/genres')
def genre_list():
    """Display list of all genres"""
    genres = get_repositories().genres.get_all()
    return render_template('genre/list.html', title='Genre List', genre_list=genres)


@genre_bp.route('/genre/<genre_id>')
def genre_detail(genre_id):
    """Genre with the books filed under it"""
    repos = get_repositories()
    results = fetch_parallel(
        genre=lambda: repos.genres.get_by_id(genre_id),
        genre_books=lambda: repos.books.get_by_genre(genre_id),
    )
    if results['genre'] is None:
        abort(404, description='Genre not found')

    return render_template('genre/detail.html', title='Genre Detail',
                           genre=results['genre'], genre_books=results['genre_books'])


@genre_bp.route('/genre/create', methods=['GET', 'POST'])
def genre_create():
    """Create a genre, or redirect to the one that already has this name"""
    if request.method == 'POST':
        data, errors = validate_genre_form(request.form)
        if errors:
            return render_template('genre/form.html', title='Create Genre', genre=data, errors=errors)

        genres = get_repositories().genres
        existing = genres.get_by_name(data['name'])
        if existing is not None:
            current_app.logger.info('Genre "%s" already exists, redirecting to %s', data['name'], existing.url)
            return redirect(existing.url)

        try:
            genre = genres.create(data['name'])
        except DuplicateGenreName as e:
            return redirect(e.existing.url)

        flash(f'Genre "{genre.name}" created.', 'success')
        return redirect(genre.url)

    return render_template('genre/form.html', title='Create Genre', genre=None, errors=[])


@genre_bp.route('/genre/<genre_id>/delete', methods=['GET', 'POST'])
def genre_delete(genre_id):
    """Delete a genre unless books still reference it"""
    if request.method == 'POST':
        genre_id = request.form.get('genreid') or genre_id

    repos = get_repositories()
    results = fetch_parallel(
        genre=lambda: repos.genres.get_by_id(genre_id),
        genre_books=lambda: repos.books.get_by_genre(genre_id),
    )
    genre = results['genre']
    genre_books = results['genre_books']
    if genre is None:
        abort(404, description='Genre not found')

    if request.method == 'POST':
        if not genre_books:
            try:
                deleted = repos.genres.delete(genre_id)
            except GenreInUse:
                # A book picked this genre up after the check above
                genre_books = repos.books.get_by_genre(genre_id)
            else:
                if not deleted:
                    abort(404, description='Genre not found')
                current_app.logger.info('Deleted genre %s "%s"', genre_id, genre.name)
                flash(f'Genre "{genre.name}" deleted.', 'success')
                return redirect(url_for('genre.genre_list'))

        current_app.logger.info('Refused to delete genre %s: %d book(s) reference it',
                                genre_id, len(genre_books))
        flash(f'Cannot delete genre "{genre.name}" - it has books assigned.', 'danger')

    return render_template('genre/delete.html', title='Delete Genre',
                           genre=genre, genre_books=genre_books)


@genre_bp.route('/genre/<genre_id>/update', methods=['GET', 'POST'])
def genre_update(genre_id):
    """Rename a genre"""
    genres = get_repositories().genres
    genre = genres.get_by_id(genre_id)
    if genre is None:
        abort(404, description='Genre not found')

    if request.method == 'POST':
        data, errors = validate_genre_form(request.form)

        # Check for duplicate
        if not errors:
            existing = genres.get_by_name(data['name'])
            if existing is not None and str(existing.id) != str(genre.id):
                errors.append(FieldError('name', 'Genre name already exists'))

        if not errors:
            try:
                updated = genres.update(genre_id, data['name'])
            except DuplicateGenreName:
                errors.append(FieldError('name', 'Genre name already exists'))
            else:
                if updated is None:
                    abort(404, description='Genre not found')
                current_app.logger.info('Updated genre %s to "%s"', genre_id, updated.name)
                flash(f'Genre "{updated.name}" updated.', 'success')
                return redirect(updated.url)

        data['id'] = genre_id
        return render_template('genre/form.html', title='Update Genre', genre=data, errors=errors)

    return render_template('genre/form.html', title='Update Genre', genre=genre, errors=[])
