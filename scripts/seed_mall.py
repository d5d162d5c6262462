"""Seed the console with an admin account and a sample mall.

Idempotent: the admin is skipped if the email is already registered, and
shops, products and offers are skipped if one with the same name (or title)
already exists.

Usage:
    python scripts/seed_mall.py
"""

import asyncio
import sys

from mallconsole.db.session import async_session_factory, engine
from mallconsole.main import build_console, create_tables
from mallconsole.schemas.offer import OfferForm
from mallconsole.schemas.product import ProductForm
from mallconsole.schemas.shop import ShopForm

ADMIN_EMAIL = "admin@supermall.com"
ADMIN_PASSWORD = "admin123"

SHOPS = [
    {"name": "Zara", "floor": "Ground", "category": "Fashion", "location": "G-12",
     "contact": "555-0101", "openingHours": "10:00 - 22:00",
     "description": "Clothing and accessories for women, men and kids"},
    {"name": "Apple Store", "floor": "First", "category": "Electronics", "location": "F-03",
     "contact": "555-0102", "openingHours": "10:00 - 21:00",
     "description": "iPhone, iPad, Mac and accessories"},
    {"name": "Book Nook", "floor": "Second", "category": "Books", "location": "S-21",
     "contact": "555-0103", "openingHours": "09:00 - 21:00",
     "description": "New releases, stationery and a reading corner"},
    {"name": "Spice Route", "floor": "Food Court", "category": "Food", "location": "FC-07",
     "contact": "555-0104", "openingHours": "11:00 - 23:00",
     "description": "Regional curries and street food"},
]

# (shop name, product)
PRODUCTS = [
    ("Zara", {"name": "Slim Fit Jeans", "category": "Fashion", "price": 49.99, "brand": "Zara",
              "features": ["Stretch denim", "Mid rise"]}),
    ("Zara", {"name": "Linen Shirt", "category": "Fashion", "price": 35.5, "brand": "Zara",
              "features": ["100% linen"]}),
    ("Apple Store", {"name": "iPhone 15", "category": "Electronics", "price": 799, "brand": "Apple",
                     "features": ["6.1-inch display", "48MP camera"]}),
    ("Apple Store", {"name": "AirPods Pro", "category": "Electronics", "price": 249, "brand": "Apple",
                     "features": ["Noise cancellation"], "inStock": False}),
    ("Book Nook", {"name": "Reading Lamp", "category": "Books", "price": 24, "brand": "Nook"}),
]

# (shop name, offer)
OFFERS = [
    ("Zara", {"title": "Summer Sale", "discount": 30, "discountType": "percentage",
              "terms": "Selected items only", "validUntil": "2030-08-31"}),
    ("Apple Store", {"title": "Accessory Bundle", "discount": 20, "discountType": "fixed",
                     "terms": "With any iPhone purchase"}),
    ("Spice Route", {"title": "Lunch Combo", "discount": 15, "discountType": "percentage",
                     "validUntil": "2020-12-31", "isActive": False}),
]


async def _existing(console, collection: str, key: str) -> dict:
    """Map of ``key`` value -> document id for a collection."""
    docs = await console.services.shops.store.collection(collection).get_all()
    return {d.get(key): d["id"] for d in docs}


async def seed_mall():
    """Seed the admin account, shops, products and offers."""
    print(f"\n{'='*60}")
    print("  Seeding Super Mall")
    print(f"{'='*60}\n")

    await create_tables(engine)
    console = build_console(async_session_factory)
    services = console.services

    result = await console.register(ADMIN_EMAIL, ADMIN_PASSWORD, "admin")
    if result.success:
        print(f"  Added admin: {ADMIN_EMAIL} / {ADMIN_PASSWORD}")
    else:
        print(f"  Admin '{ADMIN_EMAIL}' skipped: {result.error.message}")

    added = {"shops": 0, "products": 0, "offers": 0}

    shop_ids = await _existing(console, "shops", "name")
    for shop in SHOPS:
        if shop["name"] in shop_ids:
            print(f"  Shop '{shop['name']}' already exists, skipping")
            continue
        result = await services.shops.create(ShopForm.model_validate(shop))
        if not result.success:
            raise RuntimeError(f"Shop '{shop['name']}': {result.error.message}")
        shop_ids[shop["name"]] = result.id
        added["shops"] += 1
        print(f"  Added shop: {shop['name']} ({shop['floor']})")

    product_ids = await _existing(console, "products", "name")
    for shop_name, product in PRODUCTS:
        if product["name"] in product_ids:
            print(f"  Product '{product['name']}' already exists, skipping")
            continue
        form = ProductForm.model_validate({**product, "shopId": shop_ids[shop_name], "shopName": shop_name})
        result = await services.products.create(form)
        if not result.success:
            raise RuntimeError(f"Product '{product['name']}': {result.error.message}")
        added["products"] += 1
        print(f"  Added product: {product['name']} @ {shop_name}")

    offer_ids = await _existing(console, "offers", "title")
    for shop_name, offer in OFFERS:
        if offer["title"] in offer_ids:
            print(f"  Offer '{offer['title']}' already exists, skipping")
            continue
        form = OfferForm.model_validate({**offer, "shopId": shop_ids[shop_name], "shopName": shop_name})
        result = await services.offers.create(form)
        if not result.success:
            raise RuntimeError(f"Offer '{offer['title']}': {result.error.message}")
        added["offers"] += 1
        print(f"  Added offer: {offer['title']} @ {shop_name}")

    await engine.dispose()

    print(f"\n{'='*60}")
    print("  Seeding Complete")
    print(f"{'='*60}")
    for name, count in added.items():
        print(f"  Added: {count} {name}")
    print("\n  Start the console: uvicorn mallconsole.main:app --reload\n")


if __name__ == "__main__":
    try:
        asyncio.run(seed_mall())
    except Exception as e:
        print(f"\n  Seeding failed: {e}")
        print("  Check DATABASE_URL in .env")
        sys.exit(1)
