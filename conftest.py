import pytest
from django.core.cache import cache


@pytest.fixture(autouse=True)
def _clear_cache():
    # Canonical node lists are cached per version key across tests.
    cache.clear()
    yield
    cache.clear()
