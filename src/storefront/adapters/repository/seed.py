"""Initial data for an empty store: the admin account and sample products."""

import logging

from storefront.domain.models import Product, User
from storefront.domain.ports import Storage
from storefront.domain.registration import hash_password, normalize_email

logger = logging.getLogger(__name__)

SAMPLE_PRODUCTS = [
    Product(
        name="Classic Cotton Shirt",
        description="Premium cotton formal shirt",
        price=2999,
        image_url="https://images.unsplash.com/photo-1603347585534-badcc8b973c0",
        category="Formal Wear",
        featured=True,
        stock=10,
        min_stock=5,
    ),
    Product(
        name="Casual Denim Jacket",
        description="Stylish denim jacket for casual occasions",
        price=4999,
        image_url="https://images.unsplash.com/photo-1527905804285-2f67b86e3bf6",
        category="Casual Wear",
        featured=True,
        stock=15,
        min_stock=5,
    ),
]


def seed_storage(
    storage: Storage,
    admin_email: str,
    admin_password: str,
    *,
    with_products: bool = True,
    bcrypt_rounds: int = 10,
) -> None:
    """Create the admin user and sample products if they are missing."""
    email = normalize_email(admin_email)
    if storage.get_user_by_email(email) is None:
        storage.create_user(
            User(
                email=email,
                password_hash=hash_password(admin_password, bcrypt_rounds),
                is_admin=True,
                is_verified=True,
            )
        )
        logger.info("Seeded admin user %s", email)

    if with_products and not storage.list_products():
        for product in SAMPLE_PRODUCTS:
            storage.create_product(product)
        logger.info("Seeded %d sample products", len(SAMPLE_PRODUCTS))
