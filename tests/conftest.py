"""Shared fixtures for the MediaHub configuration tests."""

from __future__ import annotations

import pytest

from mediahub.config import (
    InMemoryConfigurationPersistence,
    ServerApplicationPaths,
    ServerConfiguration,
    ServerConfigurationManager,
)


class FakeFileSystem:
    """Filesystem double that records every check it is asked to make."""

    def __init__(self, directories=(), files=(), read_only=()):
        self.directories = set(directories)
        self.files = set(files)
        self.read_only = set(read_only)
        self.calls = []

    def directory_exists(self, path):
        self.calls.append(("directory_exists", path))
        return path in self.directories

    def file_exists(self, path):
        self.calls.append(("file_exists", path))
        return path in self.files

    def ensure_write_access(self, path):
        self.calls.append(("ensure_write_access", path))
        if path in self.read_only:
            raise PermissionError(13, "Permission denied", path)


@pytest.fixture
def file_system():
    return FakeFileSystem()


@pytest.fixture
def app_paths(tmp_path):
    return ServerApplicationPaths(str(tmp_path / "data"))


@pytest.fixture
def persistence():
    return InMemoryConfigurationPersistence()


@pytest.fixture
def make_manager(app_paths, file_system):
    """Build a manager over in-memory persistence with an optional root config."""

    def _make(root: ServerConfiguration | None = None, **kwargs):
        store = kwargs.pop("persistence", None) or InMemoryConfigurationPersistence(root)
        return ServerConfigurationManager(
            app_paths,
            store,
            file_system=kwargs.pop("file_system", file_system),
            **kwargs,
        )

    return _make


@pytest.fixture
def recorder():
    """Callable that appends every event it receives to ``recorder.events``."""

    class Recorder:
        def __init__(self):
            self.events = []

        def __call__(self, event):
            self.events.append(event)

    return Recorder()
