# app/data/seed.py
"""Jeu de données de développement : `python -m app.data.seed`."""
from __future__ import annotations

import logging

from app.core.db import SessionLocal, init_db
from app.core.log import setup_logging
from app.models.cart_models import CartItem
from app.models.order_models import Order, OrderItem, OrderStatus
from app.models.product_models import Product
from app.models.user_models import User
from app.security.security import hash_password

logger = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@clickandship.com"
TEST_EMAIL = "test@example.com"

PRODUCTS = [
    ("iPhone 15 Pro", "Le dernier iPhone avec puce A17 Pro, appareil photo professionnel et design en titane.", 1199.99, 25, "iphone15pro.jpg"),
    ("MacBook Air M2", "Ordinateur portable ultra-léger avec puce M2, parfait pour la productivité.", 1299.99, 15, "macbook-air-m2.jpg"),
    ("iPad Air", "Tablette polyvalente avec puce M1, idéale pour le travail et les loisirs.", 699.99, 30, "ipad-air.jpg"),
    ("AirPods Pro", "Écouteurs sans fil avec réduction de bruit active et audio spatial.", 249.99, 50, "airpods-pro.jpg"),
    ("Apple Watch Series 9", "Montre connectée avec suivi santé avancé et design élégant.", 399.99, 20, "apple-watch-series9.jpg"),
    ('iMac 24"', "Ordinateur tout-en-un avec écran Retina 4.5K et puce M1.", 1499.99, 10, "imac-24.jpg"),
    ("Magic Keyboard", "Clavier sans fil avec design minimaliste et touches rétroéclairées.", 99.99, 40, "magic-keyboard.jpg"),
    ("Magic Mouse", "Souris sans fil avec surface tactile et design ergonomique.", 79.99, 35, "magic-mouse.jpg"),
]

# (statut, [(index produit, quantité)])
ORDERS = [
    (OrderStatus.PAID, [(0, 1), (1, 2)]),
    (OrderStatus.SHIPPED, [(2, 1), (3, 1), (4, 3)]),
    (OrderStatus.PENDING, [(5, 1)]),
    (OrderStatus.DELIVERED, [(0, 2), (6, 1)]),
]

CART = [(0, 2), (1, 1), (2, 3)]


def seed() -> None:
    init_db()
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(User).first():
            logger.info("[seed] base déjà initialisée, rien à faire")
            return

        db.add(User(email=ADMIN_EMAIL, password=hash_password("admin123"), roles=["ROLE_ADMIN"]))
        user = User(email=TEST_EMAIL, password=hash_password("password123"), roles=["ROLE_USER"])
        db.add(user)

        products = [
            Product(name=n, description=d, price=p, stock_quantity=s, image_name=img)
            for n, d, p, s, img in PRODUCTS
        ]
        db.add_all(products)

        for status, lines in ORDERS:
            order = Order(user=user, status=status)
            for idx, qty in lines:
                order.items.append(
                    OrderItem(product=products[idx], quantity=qty, unit_price=products[idx].price)
                )
            order.update_total()
            db.add(order)

        for idx, qty in CART:
            db.add(CartItem(user=user, product=products[idx], quantity=qty))

        db.commit()
        logger.info(
            "[seed] données créées",
            extra={"products": len(products), "orders": len(ORDERS), "cart_items": len(CART)},
        )
    finally:
        db.close()


if __name__ == "__main__":
    setup_logging()
    seed()
