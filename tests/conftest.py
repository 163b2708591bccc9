from datetime import datetime, timedelta
import pytest


class StepClock:
    """Deterministic clock: each call advances by `step` seconds."""

    def __init__(self, start=datetime(2021, 3, 14, 9, 26, 53), step=1):
        self.now = start
        self.step = timedelta(seconds=step)

    def __call__(self):
        t = self.now
        self.now += self.step
        return t


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def frozen_clock():
    return StepClock(step=0)


@pytest.fixture
def profile_paths(tmp_path):
    return tmp_path / 'bookmarks.json', tmp_path / 'bookmarks.key'


@pytest.fixture
def settings_paths(tmp_path):
    return tmp_path / 'config.json', tmp_path / 'ssh-keys'
