"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from adventure import Exercise, Workshop, WorkshopOptions, callback_mode, sync_mode  # noqa: E402
from config import Settings  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


class MemoryStore:
    """In-memory stand-in for the SQLite key-value store that counts writes."""

    def __init__(self, values=None):
        self.values = dict(values or {})
        self.saves = []

    def get(self, key):
        return self.values.get(key)

    def save(self, key, value):
        self.saves.append((key, value))
        self.values[key] = value


class Recorder:
    """Collects reported errors and outcomes."""

    def __init__(self):
        self.errors = []
        self.outcomes = []

    def report(self, message):
        self.errors.append(message)

    def finish(self, outcome):
        self.outcomes.append(outcome)


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def make_store():
    return MemoryStore


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def console():
    """A Rich console writing to a string buffer."""
    return Console(file=StringIO(), width=100, color_system=None, legacy_windows=False)


@pytest.fixture
def settings(tmp_path):
    return Settings(data_dir=tmp_path / "config")


@pytest.fixture
def make_workshop(settings, console, recorder):
    """Factory for workshops backed by in-memory stores."""

    def make(**option_overrides):
        app_store = option_overrides.pop("app_store", None) or MemoryStore()
        global_store = option_overrides.pop("global_store", None) or MemoryStore()
        options = WorkshopOptions(name=option_overrides.pop("name", "testshop"), **option_overrides)
        return Workshop(
            options,
            settings=settings,
            console=console,
            error_reporter=recorder.report,
            exit_handler=recorder.finish,
            app_store=app_store,
            global_store=global_store,
        )

    return make


@pytest.fixture
def workshop(make_workshop):
    return make_workshop()


class VerifyExercise(Exercise):
    """Reports whatever result it was built with."""

    problem = "Write a program that prints HELLO."
    solution = "print('HELLO')"

    def __init__(self, result=(None, True), messages=()):
        self.result = result
        self.messages = messages
        self.cleanups = []

    @callback_mode("verify")
    def verify(self, args, channel, done):
        for event, message in self.messages:
            if event == "pass":
                channel.passed(message)
            else:
                channel.failed(message)
        done(*self.result)

    @callback_mode("run")
    def run(self, args, channel, done):
        done(None, True)

    @sync_mode("show")
    def show(self, args, channel):
        return "Output: " + " ".join(args)

    def end(self, mode, passed, callback):
        self.cleanups.append((mode, passed))
        callback(None)


@pytest.fixture
def verify_exercise_cls():
    return VerifyExercise
