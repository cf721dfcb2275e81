import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///locallibrary.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

    # Worker threads used to fan out independent lookups on detail/delete pages.
    # 0 or 1 runs them inline.
    PARALLEL_FETCH_WORKERS = int(os.environ.get('PARALLEL_FETCH_WORKERS', 4))

    # AWS Settings
    USE_AWS = os.environ.get('USE_AWS', 'False').lower() == 'true'
    AWS_ACCESS_KEY_ID = os.environ.get('AWS_ACCESS_KEY_ID')
    AWS_SECRET_ACCESS_KEY = os.environ.get('AWS_SECRET_ACCESS_KEY')
    AWS_REGION = os.environ.get('AWS_REGION', 'us-east-1')
    DYNAMODB_ENDPOINT_URL = os.environ.get('DYNAMODB_ENDPOINT_URL')

    # DynamoDB Table Names
    DYNAMODB_GENRES_TABLE = os.environ.get('DYNAMODB_GENRES_TABLE', 'Genres')
    DYNAMODB_GENRE_NAMES_TABLE = os.environ.get('DYNAMODB_GENRE_NAMES_TABLE', 'GenreNames')
    DYNAMODB_BOOKS_TABLE = os.environ.get('DYNAMODB_BOOKS_TABLE', 'Books')
    DYNAMODB_AUTHORS_TABLE = os.environ.get('DYNAMODB_AUTHORS_TABLE', 'Authors')
    DYNAMODB_BOOK_INSTANCES_TABLE = os.environ.get('DYNAMODB_BOOK_INSTANCES_TABLE', 'BookInstances')


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG').upper()


class ProductionConfig(Config):
    DEBUG = False


class TestingConfig(Config):
    TESTING = True
    USE_AWS = False
    WTF_CSRF_ENABLED = False
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    PARALLEL_FETCH_WORKERS = 1


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
