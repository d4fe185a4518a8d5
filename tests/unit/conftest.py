import pytest

from cayley_dickson import settings


@pytest.fixture
def restored_settings():
    """Snapshot the global settings and put them back after the test"""
    settings(save=True)
    yield
    settings(restore=True)
