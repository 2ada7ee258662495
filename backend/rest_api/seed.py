"""
Seed data for development and testing.
Creates one tenant with a restaurant, ten tables, staff users and a menu.
"""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from shared.config.constants import Roles, Stations
from shared.config.logging import get_logger
from shared.security.password import hash_password
from rest_api.models import MenuCategory, MenuItem, Restaurant, Table, Tenant, User

logger = get_logger(__name__)


TENANT_NAME = "Demo Restaurant Group"
DEFAULT_VAT_RATE = Decimal("18.00")
TABLE_COUNT = 10

# (email, name, role, password)
DEMO_USERS = [
    ("admin@demo-restaurant.com", "Admin User", Roles.ADMIN, "admin123"),
    ("chef@demo-restaurant.com", "Şef Ahmet", Roles.CHEF, "chef123"),
    ("waiter@demo-restaurant.com", "Garson Ayşe", Roles.WAITER, "waiter123"),
]

# category -> (station, [(name, description, price)])
DEMO_MENU = {
    "Başlangıçlar": (Stations.HOT, [
        ("Mercimek Çorbası", "Geleneksel mercimek çorbası", "25.00"),
        ("Domates Çorbası", "Taze domates çorbası", "22.00"),
        ("Çıtır Soğan Halkası", "Altın sarısı soğan halkaları", "35.00"),
        ("Mozzarella Stick", "6 adet mozzarella çubukları", "40.00"),
    ]),
    "Ana Yemekler": (Stations.HOT, [
        ("Izgara Köfte", "Özel baharatlarla hazırlanmış köfte", "85.00"),
        ("Tavuk Şiş", "Marine edilmiş tavuk şiş", "75.00"),
        ("Adana Kebap", "Acılı kıyma kebabı", "95.00"),
        ("Karışık Izgara", "Köfte, tavuk, kuzu karışık", "120.00"),
        ("Balık Izgara", "Günün taze balığı", "110.00"),
    ]),
    "Pizza": (Stations.HOT, [
        ("Margherita Pizza", "Domates, mozzarella, fesleğen", "65.00"),
        ("Pepperoni Pizza", "Domates, mozzarella, pepperoni", "75.00"),
        ("Karışık Pizza", "Sucuk, salam, mantar, biber", "85.00"),
        ("Vejeteryan Pizza", "Sebzeli özel pizza", "70.00"),
    ]),
    "İçecekler": (Stations.BAR, [
        ("Çay", "Geleneksel Türk çayı", "8.00"),
        ("Türk Kahvesi", "Orta şekerli Türk kahvesi", "15.00"),
        ("Coca Cola", "330ml kutu", "12.00"),
        ("Su", "500ml şişe su", "5.00"),
        ("Ayran", "Ev yapımı ayran", "10.00"),
        ("Taze Sıkılmış Portakal Suyu", "Taze portakal suyu", "25.00"),
    ]),
    "Tatlılar": (Stations.COLD, [
        ("Baklava", "4 dilim baklava", "45.00"),
        ("Künefe", "Sıcak künefe", "50.00"),
        ("Sütlaç", "Ev yapımı sütlaç", "30.00"),
        ("Tiramisu", "İtalyan tatlısı", "40.00"),
    ]),
}


def seed(db: Session) -> Tenant:
    """
    Insert the demo tenant. Idempotent: returns the existing tenant when
    it has already been seeded.
    """
    existing = db.scalar(select(Tenant).where(Tenant.name == TENANT_NAME))
    if existing is not None:
        logger.info("Database already seeded, skipping", tenant_id=existing.id)
        return existing

    logger.info("Seeding demo data")

    tenant = Tenant(name=TENANT_NAME)
    db.add(tenant)
    db.flush()

    restaurant = Restaurant(
        tenant_id=tenant.id,
        name="Lezzet Durağı",
        address="Kadıköy, İstanbul",
        currency="TRY",
    )
    db.add(restaurant)
    db.flush()

    for email, name, role, password in DEMO_USERS:
        db.add(
            User(
                tenant_id=tenant.id,
                name=name,
                email=email,
                password_hash=hash_password(password),
                role=role,
                is_active=True,
            )
        )

    for i in range(1, TABLE_COUNT + 1):
        db.add(
            Table(
                tenant_id=tenant.id,
                restaurant_id=restaurant.id,
                code=f"T{i:02d}",
                name=f"Masa {i}",
                is_active=True,
            )
        )

    for sort, (category_name, (station, items)) in enumerate(DEMO_MENU.items(), start=1):
        category = MenuCategory(
            tenant_id=tenant.id,
            restaurant_id=restaurant.id,
            name=category_name,
            sort=sort,
        )
        db.add(category)
        db.flush()
        for name, description, price in items:
            db.add(
                MenuItem(
                    tenant_id=tenant.id,
                    restaurant_id=restaurant.id,
                    category_id=category.id,
                    name=name,
                    description=description,
                    price=Decimal(price),
                    vat_rate=DEFAULT_VAT_RATE,
                    station=station,
                )
            )

    db.commit()
    logger.info("Seed complete", tenant_id=tenant.id, restaurant_id=restaurant.id)
    return tenant
