import pytest
from rest_framework.test import APIClient

from perfboard.users.models import User
from perfboard.users.tests.factories import UserFactory


@pytest.fixture
def user(db) -> User:
    return UserFactory()


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()
