"""
Shared fixtures.
"""

import pytest

from core.interfaces import IGeometrySession


class FakeGeometrySession(IGeometrySession):
    """In-memory stand-in for a GeoGebra applet."""

    def __init__(self, ready=True, failing=(), raising=(), reset_error=None):
        self.ready = ready
        self.failing = set(failing)
        self.raising = set(raising)
        self.evaluated = []
        self.reset_count = 0
        self.reset_error = reset_error

    def is_ready(self):
        return self.ready

    def evaluate(self, command):
        self.evaluated.append(command)
        if command in self.raising:
            raise RuntimeError(f"engine error on {command}")
        return command not in self.failing

    def reset(self):
        self.reset_count += 1
        if self.reset_error is not None:
            raise self.reset_error
        self.evaluated = []


@pytest.fixture
def fake_session():
    return FakeGeometrySession()


@pytest.fixture
def make_session():
    return FakeGeometrySession
