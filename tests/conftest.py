import pytest


class FailingStream:
    """Yields some lines, then fails like a broken upload."""

    def __init__(self, lines, error):
        self.lines = lines
        self.error = error
        self.closed = False

    def __iter__(self):
        yield from self.lines
        raise self.error

    def close(self):
        self.closed = True


@pytest.fixture
def failing_stream():
    """Factory for streams that raise after yielding the given lines."""

    def make(lines, error=None):
        return FailingStream(lines, error or OSError("device not ready"))

    return make
