import pytest

from py_colstore.document.collection import Collection
from py_colstore.document.store import Database


@pytest.fixture
def db(tmp_path):
    database = Database(tmp_path / "db")
    yield database
    database.close()


@pytest.fixture
def col_path(tmp_path):
    return tmp_path / "items.col"


@pytest.fixture
def col(col_path):
    collection = Collection("items", col_path)
    yield collection
    collection.close()
