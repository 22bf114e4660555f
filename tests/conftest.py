from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from modules.accounts.access import Principal
from modules.accounts.constants import ADMIN_ROLE, CLIENT_ROLE
from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

User = get_user_model()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Users & principals
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_user():
    """Factory creating a user with the given roles."""
    repo = UserDjangoRepository()

    def _make(username: str, roles=(CLIENT_ROLE,)):
        return repo.create_user(
            username=username,
            password="testpass123",
            email=f"{username}@example.com",
            roles=roles,
        )

    return _make


@pytest.fixture()
def client_user(make_user):
    return make_user("alice")


@pytest.fixture()
def other_user(make_user):
    return make_user("bob")


@pytest.fixture()
def admin_user(make_user):
    return make_user("admin", roles=(ADMIN_ROLE, CLIENT_ROLE))


@pytest.fixture()
def client_principal(client_user):
    return Principal.from_user(client_user)


@pytest.fixture()
def other_principal(other_user):
    return Principal.from_user(other_user)


@pytest.fixture()
def admin_principal(admin_user):
    return Principal.from_user(admin_user)


@pytest.fixture()
def auth_client(client_user):
    """APIClient authenticated as a client-role user."""
    client = APIClient()
    client.force_authenticate(user=client_user)
    return client


@pytest.fixture()
def other_client(other_user):
    client = APIClient()
    client.force_authenticate(user=other_user)
    return client


@pytest.fixture()
def admin_client(admin_user):
    """APIClient authenticated as an administrator."""
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


# ---------------------------------------------------------------------------
# Catalog & orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_product():
    def _make(name="Widget", price="9.99", stock=10, **extra):
        return Product.objects.create(
            name=name, price=Decimal(price), stock=stock, **extra
        )

    return _make


@pytest.fixture()
def order_service():
    return OrderService(
        order_repository=OrderDjangoRepository(),
        product_repository=ProductDjangoRepository(),
        user_repository=UserDjangoRepository(),
    )
