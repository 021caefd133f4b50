# Tests/Pagination/conftest.py
import pytest

from Tests.Pagination.listing_fakes import ControlledFetcher


@pytest.fixture
def fetcher() -> ControlledFetcher:
    return ControlledFetcher()
