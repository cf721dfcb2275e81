"""DynamoDB backed repositories (``USE_AWS=True``).

Items come back as session-less model objects so handlers and templates treat
both backends alike. Genre names are kept unique with a claim item in a
separate table, written in the same transaction as the genre itself.
"""
from flask import current_app
from .aws_services import get_dynamodb_resource
from boto3.dynamodb.conditions import Attr
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError
import logging
import uuid
from datetime import date, datetime

from locallibrary.errors import DuplicateGenreName, GenreInUse
from locallibrary.models import Author, Book, BookInstance, Genre
from locallibrary.utils.validators import parse_iso_date

logger = logging.getLogger(__name__)

_serializer = TypeSerializer()


def _serialize(item):
    """Low-level attribute map for client calls such as transact_write_items"""
    return {key: _serializer.serialize(value) for key, value in item.items()}


def _error_code(error):
    return error.response.get('Error', {}).get('Code')


def _date_to_str(value):
    if isinstance(value, date):
        return value.isoformat()
    return value or None


class DynamoRepository:
    model = None
    date_fields = ()

    def __init__(self, table_name):
        self.table_name = table_name
        self.resource = None
        self._table = None

    @property
    def table(self):
        if self._table is None:
            if self.resource is None:
                self.resource = get_dynamodb_resource()
            self._table = self.resource.Table(self.table_name)
        return self._table

    def _scan(self, **kwargs):
        response = self.table.scan(**kwargs)
        items = response.get('Items', [])
        while 'LastEvaluatedKey' in response:
            response = self.table.scan(ExclusiveStartKey=response['LastEvaluatedKey'], **kwargs)
            items.extend(response.get('Items', []))
        return items

    def _transact(self, transact_items):
        self.table.meta.client.transact_write_items(TransactItems=transact_items)

    def to_model(self, item):
        """Reconstruct a model object from a stored item without a DB session"""
        obj = self.model()
        for key, value in item.items():
            if key in self.date_fields:
                value = parse_iso_date(value) if value else None
            setattr(obj, key, value)
        return obj

    def get_all(self):
        return [self.to_model(item) for item in self._scan()]

    def get_item(self, item_id):
        response = self.table.get_item(Key={'id': str(item_id)})
        return response.get('Item')

    def get_by_id(self, item_id):
        item = self.get_item(item_id)
        return self.to_model(item) if item else None

    def save(self, item_data):
        if 'id' not in item_data:
            item_data['id'] = str(uuid.uuid4())
        if 'created_at' not in item_data:
            item_data['created_at'] = datetime.utcnow().isoformat()
        item_data['updated_at'] = datetime.utcnow().isoformat()

        self.table.put_item(Item=item_data)
        return item_data

    def delete(self, item_id):
        try:
            self.table.delete_item(Key={'id': str(item_id)},
                                   ConditionExpression=Attr('id').exists())
        except ClientError as e:
            if _error_code(e) == 'ConditionalCheckFailedException':
                return False
            logger.error('Error deleting %s from %s: %s', item_id, self.table_name, e)
            raise
        return True

    def count(self, **kwargs):
        response = self.table.scan(Select='COUNT', **kwargs)
        total = response.get('Count', 0)
        while 'LastEvaluatedKey' in response:
            response = self.table.scan(Select='COUNT', ExclusiveStartKey=response['LastEvaluatedKey'], **kwargs)
            total += response.get('Count', 0)
        return total


class GenreRepository(DynamoRepository):
    model = Genre

    def __init__(self):
        table_name = current_app.config.get('DYNAMODB_GENRES_TABLE', 'Genres')
        super().__init__(table_name)
        self.names_table_name = current_app.config.get('DYNAMODB_GENRE_NAMES_TABLE', 'GenreNames')
        self._names_table = None

    @property
    def names_table(self):
        if self._names_table is None:
            if self.resource is None:
                self.resource = get_dynamodb_resource()
            self._names_table = self.resource.Table(self.names_table_name)
        return self._names_table

    def _name_claim(self, name, genre_id):
        return {
            'Put': {
                'TableName': self.names_table_name,
                'Item': _serialize({'name': name, 'genre_id': str(genre_id)}),
                'ConditionExpression': 'attribute_not_exists(#name)',
                'ExpressionAttributeNames': {'#name': 'name'},
            }
        }

    def get_all(self):
        return sorted(super().get_all(), key=lambda genre: genre.name)

    def get_by_name(self, name):
        claim = self.names_table.get_item(Key={'name': name}).get('Item')
        if not claim:
            return None
        return self.get_by_id(claim['genre_id'])

    def create(self, name):
        now = datetime.utcnow().isoformat()
        item = {'id': str(uuid.uuid4()), 'name': name, 'created_at': now, 'updated_at': now}
        try:
            self._transact([
                self._name_claim(name, item['id']),
                {'Put': {'TableName': self.table_name, 'Item': _serialize(item)}},
            ])
        except ClientError as e:
            if _error_code(e) == 'TransactionCanceledException':
                existing = self.get_by_name(name)
                if existing is not None:
                    logger.info('Genre "%s" already claimed by %s', name, existing.id)
                    raise DuplicateGenreName(existing) from e
            logger.error('Error creating genre "%s": %s', name, e)
            raise
        logger.info('Created genre %s "%s"', item['id'], name)
        return self.to_model(item)

    def update(self, genre_id, name):
        item = self.get_item(genre_id)
        if item is None:
            return None
        old_name = item['name']
        item['name'] = name
        item['updated_at'] = datetime.utcnow().isoformat()

        if old_name == name:
            try:
                self.table.put_item(Item=item, ConditionExpression=Attr('id').exists())
            except ClientError as e:
                if _error_code(e) == 'ConditionalCheckFailedException':
                    return None
                logger.error('Error updating genre %s: %s', genre_id, e)
                raise
            return self.to_model(item)

        try:
            self._transact([
                self._name_claim(name, genre_id),
                {
                    'Delete': {
                        'TableName': self.names_table_name,
                        'Key': _serialize({'name': old_name}),
                        'ConditionExpression': 'genre_id = :genre_id',
                        'ExpressionAttributeValues': {':genre_id': {'S': str(genre_id)}},
                    }
                },
                {
                    'Put': {
                        'TableName': self.table_name,
                        'Item': _serialize(item),
                        'ConditionExpression': 'attribute_exists(id)',
                    }
                },
            ])
        except ClientError as e:
            if _error_code(e) == 'TransactionCanceledException':
                existing = self.get_by_name(name)
                if existing is not None and str(existing.id) != str(genre_id):
                    raise DuplicateGenreName(existing) from e
                if self.get_item(genre_id) is None:
                    return None
            logger.error('Error renaming genre %s: %s', genre_id, e)
            raise
        return self.to_model(item)

    def delete(self, genre_id):
        item = self.get_item(genre_id)
        if item is None:
            return False
        # No foreign keys here, so the reference check has to be explicit
        if BookRepository().get_by_genre(genre_id):
            raise GenreInUse(genre_id)
        try:
            self._transact([
                {
                    'Delete': {
                        'TableName': self.table_name,
                        'Key': _serialize({'id': str(genre_id)}),
                        'ConditionExpression': 'attribute_exists(id)',
                    }
                },
                {'Delete': {'TableName': self.names_table_name, 'Key': _serialize({'name': item['name']})}},
            ])
        except ClientError as e:
            if _error_code(e) == 'TransactionCanceledException':
                return False
            logger.error('Error deleting genre %s: %s', genre_id, e)
            raise
        return True


class AuthorRepository(DynamoRepository):
    model = Author
    date_fields = ('date_of_birth', 'date_of_death')

    def __init__(self):
        table_name = current_app.config.get('DYNAMODB_AUTHORS_TABLE', 'Authors')
        super().__init__(table_name)

    def get_all(self):
        return sorted(super().get_all(), key=lambda author: author.family_name)


class BookRepository(DynamoRepository):
    model = Book

    def __init__(self):
        table_name = current_app.config.get('DYNAMODB_BOOKS_TABLE', 'Books')
        super().__init__(table_name)

    def _populate(self, book, authors, genres):
        book.author = authors.get(book.author_id)
        book.genres = [genres[genre_id] for genre_id in getattr(book, 'genre_ids', None) or []
                       if genre_id in genres]
        return book

    def get_all(self):
        authors = {author.id: author for author in AuthorRepository().get_all()}
        genres = {genre.id: genre for genre in GenreRepository().get_all()}
        books = [self._populate(self.to_model(item), authors, genres) for item in self._scan()]
        return sorted(books, key=lambda book: book.title)

    def get_by_id(self, item_id):
        book = super().get_by_id(item_id)
        if book is None:
            return None
        author_repo = AuthorRepository()
        genre_repo = GenreRepository()
        author = author_repo.get_by_id(book.author_id) if book.author_id else None
        genres = [genre_repo.get_by_id(genre_id) for genre_id in getattr(book, 'genre_ids', None) or []]
        authors = {author.id: author} if author else {}
        return self._populate(book, authors, {genre.id: genre for genre in genres if genre})

    def get_by_genre(self, genre_id):
        items = self._scan(FilterExpression=Attr('genre_ids').contains(str(genre_id)))
        return sorted((self.to_model(item) for item in items), key=lambda book: book.title)

    def get_by_author(self, author_id):
        items = self._scan(FilterExpression=Attr('author_id').eq(str(author_id)))
        return sorted((self.to_model(item) for item in items), key=lambda book: book.title)


class BookInstanceRepository(DynamoRepository):
    model = BookInstance
    date_fields = ('due_back',)

    def __init__(self):
        table_name = current_app.config.get('DYNAMODB_BOOK_INSTANCES_TABLE', 'BookInstances')
        super().__init__(table_name)

    def _to_item(self, data):
        return {
            'book_id': str(data['book_id']),
            'imprint': data['imprint'],
            'status': data['status'],
            'due_back': _date_to_str(data['due_back']),
        }

    def get_all(self):
        books = BookRepository()
        titles = {item['id']: books.to_model(item) for item in books._scan()}
        instances = []
        for item in sorted(self._scan(), key=lambda x: x.get('created_at', '')):
            bookinstance = self.to_model(item)
            bookinstance.book = titles.get(bookinstance.book_id)
            instances.append(bookinstance)
        return instances

    def get_by_id(self, item_id):
        bookinstance = super().get_by_id(item_id)
        if bookinstance is not None:
            bookinstance.book = BookRepository().get_by_id(bookinstance.book_id)
        return bookinstance

    def get_by_book(self, book_id):
        items = self._scan(FilterExpression=Attr('book_id').eq(str(book_id)))
        return [self.to_model(item) for item in sorted(items, key=lambda x: x.get('created_at', ''))]

    def count_available(self):
        return self.count(FilterExpression=Attr('status').eq('Available'))

    def create(self, data):
        item = self.save(self._to_item(data))
        logger.info('Created book copy %s of book %s', item['id'], item['book_id'])
        return self.to_model(item)

    def update(self, bookinstance_id, data):
        item = self.get_item(bookinstance_id)
        if item is None:
            return None
        item.update(self._to_item(data))
        item['updated_at'] = datetime.utcnow().isoformat()
        try:
            self.table.put_item(Item=item, ConditionExpression=Attr('id').exists())
        except ClientError as e:
            if _error_code(e) == 'ConditionalCheckFailedException':
                return None
            logger.error('Error updating book copy %s: %s', bookinstance_id, e)
            raise
        return self.to_model(item)
