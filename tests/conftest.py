import pytest

from helpers import RecordingObserver


@pytest.fixture
def recorder():
    return RecordingObserver()
