"""
Shared pytest fixtures.

Environment variables are set here, before anything imports shopledger,
so settings and the database engine pick up the test values.
"""
import os
import sys
import tempfile

# Ensure the shopledger package is importable when running pytest from project root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

_tmp_db = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_tmp_db.close()

os.environ["DATABASE_URL"] = f"sqlite:///{_tmp_db.name}"
os.environ["SEED_DEFAULTS"] = "false"
os.environ["LOG_FILE"] = ""
os.environ["DEFAULT_REORDER_LEVEL"] = "10"

import pytest  # noqa: E402

from shopledger.engine.bookkeeper import Bookkeeper  # noqa: E402
from shopledger.models import Party, PartyType, Product  # noqa: E402
from shopledger.store.memory import MemoryRecordStore  # noqa: E402


@pytest.fixture
def store():
    return MemoryRecordStore()


@pytest.fixture
def keeper(store):
    return Bookkeeper(store)


@pytest.fixture
def product(keeper):
    """Product P with no stock on hand."""
    return keeper.catalog.save_product(Product(id="P", name="Product P", price=100, cost=50))


@pytest.fixture
def customer(keeper):
    return keeper.catalog.save_party(Party(id="C1", name="Asha Traders", type=PartyType.CUSTOMER))


@pytest.fixture
def supplier(keeper):
    return keeper.catalog.save_party(Party(id="S1", name="Metro Wholesale", type=PartyType.SUPPLIER))


def pytest_sessionfinish(session, exitstatus):
    try:
        os.unlink(_tmp_db.name)
    except OSError:
        pass
