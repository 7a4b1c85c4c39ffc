import pytest
from unittest.mock import MagicMock
from sqlalchemy.exc import IntegrityError

from app.core.errors import Conflict, InsufficientStock, InvalidArgument, NotFound, Unauthenticated
from app.models.cart_models import CartItem
from app.models.product_models import Product
from app.models.user_models import User
from app.services.cart_services import CartService


@pytest.fixture
def cart_repo():
    repo = MagicMock()
    repo.find_by_user.return_value = []
    repo.get_total_by_user.return_value = 0.0
    return repo


@pytest.fixture
def product_repo():
    return MagicMock()


@pytest.fixture
def uow():
    return MagicMock()


@pytest.fixture
def service(cart_repo, product_repo, uow):
    return CartService(cart_repo, product_repo, uow)


@pytest.fixture
def user():
    return User(id=1, email="alice@example.com", password="x", roles=["ROLE_USER"])


@pytest.fixture
def product():
    return Product(id=10, name="Produit A", price=10.0, stock_quantity=5)


# ==========================================================
# get_cart
# ==========================================================

def test_get_cart_requires_user(service):
    with pytest.raises(Unauthenticated):
        service.get_cart(None)


def test_get_cart_rounds_total(service, cart_repo, user):
    items = [MagicMock(), MagicMock()]
    cart_repo.find_by_user.return_value = items
    cart_repo.get_total_by_user.return_value = 30.004

    snapshot = service.get_cart(user)

    assert snapshot.items == items
    assert snapshot.total_items == 2
    assert snapshot.total_price == 30.0
    cart_repo.find_by_user.assert_called_once_with(1)


# ==========================================================
# add_to_cart
# ==========================================================

def test_add_new_item(service, cart_repo, product_repo, uow, user, product):
    product_repo.get.return_value = product
    cart_repo.find_by_user_and_product.return_value = None
    cart_repo.get_total_by_user.return_value = 30.0

    snapshot, added, qty = service.add_to_cart(user, 10, 3)

    cart_repo.add.assert_called_once()
    item = cart_repo.add.call_args.args[0]
    assert isinstance(item, CartItem)
    assert item.quantity == 3
    assert item.product is product
    assert item.user is user
    assert added is product and qty == 3
    assert snapshot.total_price == 30.0
    uow.commit.assert_called_once()


def test_add_existing_item_increments(service, cart_repo, product_repo, uow, user, product):
    existing = MagicMock(quantity=3)
    product_repo.get.return_value = product
    cart_repo.find_by_user_and_product.return_value = existing

    service.add_to_cart(user, 10, 2)

    cart_repo.increment_quantity.assert_called_once_with(existing, 2)
    cart_repo.add.assert_not_called()
    uow.commit.assert_called_once()


def test_add_checks_combined_quantity(service, cart_repo, product_repo, uow, user, product):
    product_repo.get.return_value = product
    cart_repo.find_by_user_and_product.return_value = MagicMock(quantity=3)

    with pytest.raises(InsufficientStock) as e:
        service.add_to_cart(user, 10, 3)

    assert e.value.available == 5
    assert "Disponible: 5" in e.value.message
    cart_repo.increment_quantity.assert_not_called()
    uow.commit.assert_not_called()


def test_add_more_than_stock(service, product_repo, cart_repo, user, product):
    product_repo.get.return_value = product
    with pytest.raises(InsufficientStock):
        service.add_to_cart(user, 10, 6)
    cart_repo.find_by_user_and_product.assert_not_called()


@pytest.mark.parametrize("quantity", [0, -1])
def test_add_rejects_non_positive_quantity(service, product_repo, user, quantity):
    with pytest.raises(InvalidArgument):
        service.add_to_cart(user, 10, quantity)
    product_repo.get.assert_not_called()


def test_add_rejects_quantity_above_limit(service, product_repo, cart_repo, user):
    product_repo.get.return_value = Product(id=11, name="Vrac", price=1.0, stock_quantity=5000)
    cart_repo.find_by_user_and_product.return_value = None

    with pytest.raises(InvalidArgument) as e:
        service.add_to_cart(user, 11, 1000)

    assert e.value.details[0]["field"] == "quantity"
    cart_repo.add.assert_not_called()


def test_add_product_not_found(service, product_repo, user):
    product_repo.get.return_value = None
    with pytest.raises(NotFound):
        service.add_to_cart(user, 999, 1)


def test_add_requires_user(service):
    with pytest.raises(Unauthenticated):
        service.add_to_cart(None, 10, 1)


def test_add_concurrent_insert_conflict(service, cart_repo, product_repo, uow, user, product):
    product_repo.get.return_value = product
    cart_repo.find_by_user_and_product.return_value = None
    cart_repo.add.side_effect = IntegrityError("INSERT", {}, Exception("unique"))

    with pytest.raises(Conflict):
        service.add_to_cart(user, 10, 1)

    uow.rollback.assert_called_once()
    uow.commit.assert_not_called()


# ==========================================================
# remove_from_cart
# ==========================================================

def test_remove_item(service, cart_repo, product_repo, uow, user, product):
    item = MagicMock()
    product_repo.get.return_value = product
    cart_repo.find_by_user_and_product.return_value = item

    snapshot, removed = service.remove_from_cart(user, 10)

    cart_repo.remove.assert_called_once_with(item)
    uow.commit.assert_called_once()
    assert removed is product
    assert snapshot.total_items == 0


def test_remove_item_not_in_cart(service, cart_repo, product_repo, uow, user, product):
    product_repo.get.return_value = product
    cart_repo.find_by_user_and_product.return_value = None

    with pytest.raises(NotFound) as e:
        service.remove_from_cart(user, 10)

    assert "pas dans votre panier" in e.value.message
    cart_repo.remove.assert_not_called()
    uow.commit.assert_not_called()


def test_remove_unknown_product(service, product_repo, user):
    product_repo.get.return_value = None
    with pytest.raises(NotFound):
        service.remove_from_cart(user, 404)


# ==========================================================
# clear_cart
# ==========================================================

def test_clear_cart_returns_removed_count(service, cart_repo, uow, user):
    cart_repo.clear_by_user.return_value = 3
    assert service.clear_cart(user) == 3
    uow.commit.assert_called_once()


def test_clear_cart_is_idempotent(service, cart_repo, user):
    cart_repo.clear_by_user.return_value = 0
    assert service.clear_cart(user) == 0
    assert service.clear_cart(user) == 0
