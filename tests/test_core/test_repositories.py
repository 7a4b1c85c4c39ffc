import pytest
from sqlalchemy.exc import IntegrityError

from app.models.cart_models import CartItem
from app.models.order_models import Order, OrderItem, OrderStatus
from app.models.product_models import Product
from app.models.user_models import User
from app.repositories.cart_repositories import CartItemRepository
from app.repositories.order_repositories import OrderRepository
from app.repositories.product_repositories import ProductRepository
from app.repositories.user_repositories import UserRepository


def _user(db, email="alice@example.com"):
    user = User(email=email, password="x", roles=["ROLE_USER"])
    db.add(user)
    db.flush()
    return user


def _product(db, name="Clavier", price=10.0, stock=5, category=None):
    product = Product(name=name, price=price, stock_quantity=stock, category=category)
    db.add(product)
    db.flush()
    return product


def _order(db, user, lines, status=OrderStatus.PENDING):
    order = Order(user=user, status=status)
    for product, quantity in lines:
        order.items.append(OrderItem(product=product, quantity=quantity, unit_price=product.price))
    order.update_total()
    db.add(order)
    db.flush()
    return order


# ==========================================================
# UserRepository
# ==========================================================

def test_user_find_by_email_is_exact(db_session):
    repo = UserRepository(db_session)
    user = repo.add(User(email="alice@example.com", password="x"))

    assert repo.find_by_email("alice@example.com") is user
    assert repo.get(user.id) is user
    assert repo.find_by_email("ALICE@example.com") is None


def test_user_email_unique(db_session):
    repo = UserRepository(db_session)
    repo.add(User(email="alice@example.com", password="x"))
    with pytest.raises(IntegrityError):
        repo.add(User(email="alice@example.com", password="y"))


def test_user_default_role(db_session):
    user = UserRepository(db_session).add(User(email="bob@example.com", password="x"))
    assert user.roles == ["ROLE_USER"]


# ==========================================================
# CartItemRepository
# ==========================================================

def test_cart_total_and_count(db_session):
    user = _user(db_session)
    p1 = _product(db_session, price=10.0)
    p2 = _product(db_session, name="Souris", price=2.5)
    repo = CartItemRepository(db_session)
    repo.add(CartItem(user=user, product=p1, quantity=3))
    repo.add(CartItem(user=user, product=p2, quantity=2))

    assert repo.count_by_user(user.id) == 2
    assert repo.get_total_by_user(user.id) == pytest.approx(35.0)


def test_cart_total_empty(db_session):
    user = _user(db_session)
    assert CartItemRepository(db_session).get_total_by_user(user.id) == 0.0


def test_cart_find_by_user_newest_first(db_session):
    user = _user(db_session)
    repo = CartItemRepository(db_session)
    first = repo.add(CartItem(user=user, product=_product(db_session, name="A"), quantity=1))
    second = repo.add(CartItem(user=user, product=_product(db_session, name="B"), quantity=1))

    assert [i.id for i in repo.find_by_user(user.id)] == [second.id, first.id]


def test_cart_find_by_user_and_product(db_session):
    alice = _user(db_session)
    bob = _user(db_session, "bob@example.com")
    product = _product(db_session)
    repo = CartItemRepository(db_session)
    item = repo.add(CartItem(user=alice, product=product, quantity=1))

    assert repo.find_by_user_and_product(alice.id, product.id) is item
    assert repo.find_by_user_and_product(bob.id, product.id) is None


def test_cart_increment_quantity(db_session):
    user = _user(db_session)
    repo = CartItemRepository(db_session)
    item = repo.add(CartItem(user=user, product=_product(db_session), quantity=3))

    repo.increment_quantity(item, 2)

    assert item.quantity == 5


def test_cart_unique_user_product(db_session):
    user = _user(db_session)
    product = _product(db_session)
    repo = CartItemRepository(db_session)
    repo.add(CartItem(user=user, product=product, quantity=1))

    with pytest.raises(IntegrityError):
        repo.add(CartItem(user=user, product=product, quantity=1))


def test_cart_clear_by_user(db_session):
    alice = _user(db_session)
    bob = _user(db_session, "bob@example.com")
    p1 = _product(db_session)
    p2 = _product(db_session, name="Souris")
    repo = CartItemRepository(db_session)
    repo.add(CartItem(user=alice, product=p1, quantity=1))
    repo.add(CartItem(user=alice, product=p2, quantity=1))
    repo.add(CartItem(user=bob, product=p1, quantity=1))

    assert repo.clear_by_user(alice.id) == 2
    assert repo.clear_by_user(alice.id) == 0
    assert repo.count_by_user(bob.id) == 1


# ==========================================================
# OrderRepository
# ==========================================================

def test_order_totals_and_items(db_session):
    user = _user(db_session)
    p1 = _product(db_session, price=10.0)
    p2 = _product(db_session, name="Souris", price=2.5)
    order = _order(db_session, user, [(p1, 3), (p2, 4)])
    repo = OrderRepository(db_session)

    assert order.total == pytest.approx(40.0)
    assert repo.get_items_total(order.id) == pytest.approx(40.0)
    assert repo.count_items(order.id) == 2
    assert [i.product_id for i in repo.find_items(order.id)] == [p1.id, p2.id]
    assert repo.get_total_by_user(user.id) == pytest.approx(40.0)
    assert repo.count_by_user(user.id) == 1


def test_order_scoped_to_owner(db_session):
    alice = _user(db_session)
    bob = _user(db_session, "bob@example.com")
    order = _order(db_session, alice, [(_product(db_session), 1)])
    repo = OrderRepository(db_session)

    assert repo.find_by_user_and_id(alice.id, order.id) is order
    assert repo.find_by_user_and_id(bob.id, order.id) is None
    assert repo.find_by_user(bob.id) == []
    assert repo.get_total_by_user(bob.id) == 0.0


def test_order_by_status_and_recent(db_session):
    user = _user(db_session)
    product = _product(db_session)
    paid = _order(db_session, user, [(product, 1)], status=OrderStatus.PAID)
    _order(db_session, user, [(product, 1)], status=OrderStatus.SHIPPED)
    latest = _order(db_session, user, [(product, 2)], status=OrderStatus.PAID)
    repo = OrderRepository(db_session)

    assert [o.id for o in repo.find_by_user_and_status(user.id, OrderStatus.PAID)] == [latest.id, paid.id]
    assert repo.find_by_user_and_status(user.id, OrderStatus.CANCELLED) == []
    assert [o.id for o in repo.find_recent_by_user(user.id, 2)][0] == latest.id
    assert len(repo.find_recent_by_user(user.id, 2)) == 2


def test_order_status_stored_as_value(db_session):
    user = _user(db_session)
    order = _order(db_session, user, [(_product(db_session), 1)], status=OrderStatus.SHIPPED)
    db_session.commit()
    db_session.expire_all()

    assert OrderRepository(db_session).get(order.id).status == OrderStatus.SHIPPED
    assert OrderStatus.SHIPPED.value == "expédié"


# ==========================================================
# ProductRepository
# ==========================================================

def test_product_filters_and_sort(db_session):
    _product(db_session, name="MacBook", price=1500.0, stock=3, category="laptop")
    _product(db_session, name="Souris", price=20.0, stock=0, category="accessoire")
    _product(db_session, name="Macaron", price=2.0, stock=100, category="food")
    repo = ProductRepository(db_session)

    assert [p.name for p in repo.list(filters={"name": "mac"}, order_by="price", direction="asc")] == [
        "Macaron",
        "MacBook",
    ]
    assert [p.name for p in repo.list(filters={"category": "laptop"})] == ["MacBook"]
    assert [p.name for p in repo.list(filters={"min_price": 10, "max_price": 100})] == ["Souris"]
    assert [p.name for p in repo.list(filters={"max_stock": 5}, order_by="name", direction="asc")] == [
        "MacBook",
        "Souris",
    ]
    assert len(repo.list(skip=1, limit=1)) == 1


def test_product_stats_queries(db_session):
    p1 = _product(db_session, name="A", price=10.0, stock=5)
    p2 = _product(db_session, name="B", price=20.0, stock=0)
    repo = ProductRepository(db_session)

    assert repo.count() == 2
    assert repo.count({"stock_quantity": 0}) == 1
    assert repo.find_in_stock() == [p1]
    assert repo.average_price() == pytest.approx(15.0)
    assert repo.find_recently_created(1) == [p2]


def test_product_average_price_empty(db_session):
    assert ProductRepository(db_session).average_price() == 0.0


def test_product_most_ordered(db_session):
    user = _user(db_session)
    p1 = _product(db_session, name="A")
    p2 = _product(db_session, name="B")
    _product(db_session, name="C")
    _order(db_session, user, [(p1, 1), (p2, 2)])
    _order(db_session, user, [(p2, 3)])

    assert ProductRepository(db_session).most_ordered(5) == [
        {"id": p2.id, "name": "B", "total_quantity": 5},
        {"id": p1.id, "name": "A", "total_quantity": 1},
    ]


def test_product_delete_cascades(db_session):
    user = _user(db_session)
    product = _product(db_session)
    other = _product(db_session, name="Autre")
    CartItemRepository(db_session).add(CartItem(user=user, product=product, quantity=1))
    order = _order(db_session, user, [(product, 1), (other, 1)])
    repo = ProductRepository(db_session)

    repo.delete(product)

    assert repo.get(product.id) is None
    assert CartItemRepository(db_session).count_by_user(user.id) == 0
    assert OrderRepository(db_session).count_items(order.id) == 1


def test_product_find_all_by_id(db_session):
    first = _product(db_session, name="Zèbre", price=5.0)
    second = _product(db_session, name="Abeille", price=50.0)
    third = _product(db_session, name="Mouton", price=1.0)

    assert ProductRepository(db_session).find_all() == [first, second, third]
