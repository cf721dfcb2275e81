import datetime
import pytest
from botocore.exceptions import ClientError
from locallibrary.errors import DuplicateGenreName, GenreInUse
from locallibrary.utils import dynamo_repo, sql_repo
from locallibrary.utils.dynamo_repo import BookInstanceRepository, GenreRepository
from locallibrary.utils.repositories import get_repositories


def client_error(code, operation="TransactWriteItems"):
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


def store(table, items, key="id"):
    """Serve get_item from ``items`` keyed by the table's hash key"""
    table.get_item.side_effect = lambda Key: {"Item": items[Key[key]]} if Key[key] in items else {}


@pytest.fixture
def tables(app, mocker):
    """Mocked DynamoDB tables, looked up by name"""
    created = {}

    def table(name):
        if name not in created:
            created[name] = mocker.MagicMock(name=name)
        return created[name]

    resource = mocker.MagicMock()
    resource.Table.side_effect = table
    mocker.patch.object(dynamo_repo, "get_dynamodb_resource", return_value=resource)
    with app.app_context():
        yield table


class TestScanAndCount:
    def test_genres_sorted_across_pages(self, tables):
        tables("Genres").scan.side_effect = [
            {"Items": [{"id": "2", "name": "Western"}], "LastEvaluatedKey": {"id": "2"}},
            {"Items": [{"id": "1", "name": "Biography"}]},
        ]

        genres = GenreRepository().get_all()

        assert [genre.name for genre in genres] == ["Biography", "Western"]
        assert tables("Genres").scan.call_args.kwargs == {"ExclusiveStartKey": {"id": "2"}}

    def test_count_available_across_pages(self, tables):
        tables("BookInstances").scan.side_effect = [
            {"Count": 2, "LastEvaluatedKey": {"id": "c2"}},
            {"Count": 1},
        ]

        assert BookInstanceRepository().count_available() == 3
        assert tables("BookInstances").scan.call_args.kwargs["Select"] == "COUNT"


class TestGenreCreate:
    def test_claims_name_and_writes_genre_together(self, tables):
        genre = GenreRepository().create("Fantasy")

        transact = tables("Genres").meta.client.transact_write_items
        claim, put = transact.call_args.kwargs["TransactItems"]
        assert claim["Put"]["TableName"] == "GenreNames"
        assert claim["Put"]["Item"]["name"] == {"S": "Fantasy"}
        assert claim["Put"]["Item"]["genre_id"] == {"S": genre.id}
        assert claim["Put"]["ConditionExpression"] == "attribute_not_exists(#name)"
        assert put["Put"]["TableName"] == "Genres"
        assert put["Put"]["Item"]["id"] == {"S": genre.id}
        assert genre.name == "Fantasy"
        assert genre.url == f"/catalog/genre/{genre.id}"

    def test_name_already_claimed(self, tables):
        tables("Genres").meta.client.transact_write_items.side_effect = client_error(
            "TransactionCanceledException")
        store(tables("GenreNames"), {"Fantasy": {"name": "Fantasy", "genre_id": "g1"}}, key="name")
        store(tables("Genres"), {"g1": {"id": "g1", "name": "Fantasy"}})

        with pytest.raises(DuplicateGenreName) as excinfo:
            GenreRepository().create("Fantasy")

        assert excinfo.value.existing.id == "g1"

    def test_other_failures_propagate(self, tables):
        tables("Genres").meta.client.transact_write_items.side_effect = client_error(
            "ProvisionedThroughputExceededException")

        with pytest.raises(ClientError):
            GenreRepository().create("Fantasy")


class TestGenreUpdate:
    def test_missing_genre(self, tables):
        store(tables("Genres"), {})

        assert GenreRepository().update("g9", "Poetry") is None

    def test_same_name_skips_claim(self, tables):
        store(tables("Genres"), {"g1": {"id": "g1", "name": "Fantasy"}})

        genre = GenreRepository().update("g1", "Fantasy")

        assert genre.name == "Fantasy"
        tables("Genres").put_item.assert_called_once()
        assert "ConditionExpression" in tables("Genres").put_item.call_args.kwargs
        tables("Genres").meta.client.transact_write_items.assert_not_called()

    def test_same_name_after_concurrent_delete(self, tables):
        store(tables("Genres"), {"g1": {"id": "g1", "name": "Fantasy"}})
        tables("Genres").put_item.side_effect = client_error("ConditionalCheckFailedException", "PutItem")

        assert GenreRepository().update("g1", "Fantasy") is None

    def test_rename_moves_claim(self, tables):
        store(tables("Genres"), {"g2": {"id": "g2", "name": "French Poetry"}})

        genre = GenreRepository().update("g2", "Poetry")

        transact = tables("Genres").meta.client.transact_write_items
        claim, release, put = transact.call_args.kwargs["TransactItems"]
        assert claim["Put"]["Item"]["name"] == {"S": "Poetry"}
        assert release["Delete"]["Key"] == {"name": {"S": "French Poetry"}}
        assert put["Put"]["ConditionExpression"] == "attribute_exists(id)"
        assert genre.name == "Poetry"

    def test_rename_to_taken_name(self, tables):
        tables("Genres").meta.client.transact_write_items.side_effect = client_error(
            "TransactionCanceledException")
        store(tables("Genres"), {
            "g1": {"id": "g1", "name": "Fantasy"},
            "g2": {"id": "g2", "name": "French Poetry"},
        })
        store(tables("GenreNames"), {"Fantasy": {"name": "Fantasy", "genre_id": "g1"}}, key="name")

        with pytest.raises(DuplicateGenreName) as excinfo:
            GenreRepository().update("g2", "Fantasy")

        assert excinfo.value.existing.id == "g1"


class TestGenreDelete:
    def test_missing_genre(self, tables):
        store(tables("Genres"), {})

        assert GenreRepository().delete("g9") is False
        tables("Genres").meta.client.transact_write_items.assert_not_called()

    def test_genre_with_books(self, tables):
        store(tables("Genres"), {"g1": {"id": "g1", "name": "Fantasy"}})
        tables("Books").scan.return_value = {"Items": [{"id": "b1", "title": "Wind", "genre_ids": ["g1"]}]}

        with pytest.raises(GenreInUse):
            GenreRepository().delete("g1")

        tables("Genres").meta.client.transact_write_items.assert_not_called()

    def test_deletes_genre_and_claim(self, tables):
        store(tables("Genres"), {"g2": {"id": "g2", "name": "French Poetry"}})
        tables("Books").scan.return_value = {"Items": []}

        assert GenreRepository().delete("g2") is True

        transact = tables("Genres").meta.client.transact_write_items
        genre, claim = transact.call_args.kwargs["TransactItems"]
        assert genre["Delete"]["Key"] == {"id": {"S": "g2"}}
        assert claim["Delete"]["TableName"] == "GenreNames"
        assert claim["Delete"]["Key"] == {"name": {"S": "French Poetry"}}

    def test_deleted_concurrently(self, tables):
        store(tables("Genres"), {"g2": {"id": "g2", "name": "French Poetry"}})
        tables("Books").scan.return_value = {"Items": []}
        tables("Genres").meta.client.transact_write_items.side_effect = client_error(
            "TransactionCanceledException")

        assert GenreRepository().delete("g2") is False


class TestBookInstanceRepository:
    @pytest.fixture
    def stored(self, tables):
        store(tables("BookInstances"), {"c1": {
            "id": "c1", "book_id": "b1", "imprint": "Gollancz, 2011.",
            "status": "Loaned", "due_back": "2026-11-01",
        }})
        store(tables("Books"), {"b1": {
            "id": "b1", "title": "The Wise Man's Fear", "author_id": "a1", "genre_ids": ["g1"],
        }})
        store(tables("Authors"), {"a1": {"id": "a1", "first_name": "Patrick", "family_name": "Rothfuss"}})
        store(tables("Genres"), {"g1": {"id": "g1", "name": "Fantasy"}})
        return tables

    def test_get_by_id_resolves_book(self, stored):
        bookinstance = BookInstanceRepository().get_by_id("c1")

        assert bookinstance.due_back == datetime.date(2026, 11, 1)
        assert bookinstance.due_back_formatted == "Nov 01, 2026"
        assert bookinstance.book.title == "The Wise Man's Fear"
        assert bookinstance.book.author.name == "Rothfuss, Patrick"
        assert [genre.name for genre in bookinstance.book.genres] == ["Fantasy"]

    def test_get_missing(self, stored):
        assert BookInstanceRepository().get_by_id("c9") is None

    def test_update_overwrites_fields(self, stored):
        updated = BookInstanceRepository().update("c1", {
            "book_id": "b1",
            "imprint": "Gollancz, 2020.",
            "status": "Available",
            "due_back": None,
        })

        item = stored("BookInstances").put_item.call_args.kwargs["Item"]
        assert item["imprint"] == "Gollancz, 2020."
        assert item["due_back"] is None
        assert updated.status == "Available"

    def test_update_missing(self, stored):
        assert BookInstanceRepository().update("c9", {
            "book_id": "b1", "imprint": "X", "status": "Available", "due_back": None,
        }) is None

    def test_update_deleted_concurrently(self, stored):
        stored("BookInstances").put_item.side_effect = client_error(
            "ConditionalCheckFailedException", "PutItem")

        assert BookInstanceRepository().update("c1", {
            "book_id": "b1", "imprint": "X", "status": "Available", "due_back": None,
        }) is None

    def test_delete_missing(self, stored):
        stored("BookInstances").delete_item.side_effect = client_error(
            "ConditionalCheckFailedException", "DeleteItem")

        assert BookInstanceRepository().delete("c9") is False

    def test_create_stores_iso_date(self, stored):
        created = BookInstanceRepository().create({
            "book_id": "b1",
            "imprint": "Gollancz, 2012.",
            "status": "Reserved",
            "due_back": datetime.date(2026, 12, 1),
        })

        item = stored("BookInstances").put_item.call_args.kwargs["Item"]
        assert item["due_back"] == "2026-12-01"
        assert item["id"] == created.id
        assert created.due_back == datetime.date(2026, 12, 1)


class TestBackendSelection:
    def test_sql_by_default(self, app):
        with app.app_context():
            repos = get_repositories()

        assert isinstance(repos.genres, sql_repo.GenreRepository)
        assert isinstance(repos.instances, sql_repo.BookInstanceRepository)

    def test_dynamodb_when_use_aws(self, app):
        app.config["USE_AWS"] = True
        with app.app_context():
            repos = get_repositories()

        assert isinstance(repos.genres, dynamo_repo.GenreRepository)
        assert isinstance(repos.books, dynamo_repo.BookRepository)
        assert repos.authors.table_name == "Authors"
        assert repos.instances.table_name == "BookInstances"
