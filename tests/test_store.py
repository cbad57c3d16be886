from unittest.mock import MagicMock

import pytest
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

from crm_export.core.errors import StoreQueryError, StoreUnavailableError
from crm_export.db.store import MongoDocumentStore, translate_error


@pytest.fixture()
def mongo():
    client = MagicMock()
    database = MagicMock()
    client.__getitem__.return_value = database
    return client, database


def test_snapshot_reads_through_a_session_and_ends_it(mongo):
    client, database = mongo
    session = client.start_session.return_value
    database.__getitem__.return_value.find.return_value = iter([{"_id": 1}, {"_id": 2}])
    store = MongoDocumentStore("mongodb://example", "crm", client=client)

    with store.snapshot() as reader:
        documents = reader.find("magazzinis", {"nomeMagazzino": "Centrale"})

    assert documents == [{"_id": 1}, {"_id": 2}]
    database.__getitem__.assert_called_with("magazzinis")
    database.__getitem__.return_value.find.assert_called_once_with({"nomeMagazzino": "Centrale"}, session=session)
    session.end_session.assert_called_once()


def test_session_ends_when_the_read_fails(mongo):
    client, database = mongo
    session = client.start_session.return_value
    database.__getitem__.return_value.find.side_effect = OperationFailure("bad stage")
    store = MongoDocumentStore("mongodb://example", "crm", client=client)

    with pytest.raises(StoreQueryError):
        with store.snapshot() as reader:
            reader.find("prodottis")

    session.end_session.assert_called_once()


def test_connection_errors_become_store_unavailable():
    assert isinstance(translate_error(ServerSelectionTimeoutError("no servers")), StoreUnavailableError)
    assert isinstance(translate_error(OperationFailure("type mismatch")), StoreQueryError)


def test_ping_reports_failures_as_false(mongo):
    client, database = mongo
    store = MongoDocumentStore("mongodb://example", "crm", client=client)

    assert store.ping() is True
    database.command.side_effect = ServerSelectionTimeoutError("no servers")
    assert store.ping() is False
