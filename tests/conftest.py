import os

import pytest

from capacity import CapacityGuard
from progress import ProgressReporter


class Recorder:
    """Collects every notification a reporter hands out."""

    def __init__(self):
        self.starts = 0
        self.finishes = 0
        self.events = []
        self.messages = []

    def reporter(self, on_progress=None):
        def progress(event):
            self.events.append(event)
            if on_progress is not None:
                on_progress(event)

        def start():
            self.starts += 1

        def finish():
            self.finishes += 1

        return ProgressReporter(on_start=start, on_progress=progress, on_message=self.messages.append, on_finish=finish)

    @property
    def codes(self):
        return [message.code for message in self.messages]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def guard():
    # plenty of room and a filesystem without a size limit
    return CapacityGuard(free_space_probe=lambda path: 1 << 50, format_probe=lambda path: None)


@pytest.fixture
def make_file(tmp_path):
    def make(name, data):
        path = tmp_path / name
        path.write_bytes(data)
        return str(path)
    return make


@pytest.fixture
def payload():
    def make(size):
        return os.urandom(size)
    return make
