"""Shared fixtures: in-memory store, auth service, fake gateway."""

import pytest

from gateway.errors import NetworkFailureError
from storage.auth import AuthService
from storage.local_store import MemoryStore
from factories import FakeGateway, make_result


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def auth(store):
    return AuthService(store)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def failing_gateway():
    return FakeGateway(
        question_error=NetworkFailureError("connection reset"),
        analysis_error=NetworkFailureError("connection reset"),
    )


@pytest.fixture
def sample_result():
    return make_result()
