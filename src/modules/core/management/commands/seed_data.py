from __future__ import annotations

import random
from decimal import Decimal

from django.core.management.base import BaseCommand

from modules.accounts.access import Principal
from modules.accounts.constants import ADMIN_ROLE, CLIENT_ROLE, DEFAULT_ROLES
from modules.accounts.models import Role
from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.core.exceptions import DomainError
from modules.orders.constants import OrderStatus
from modules.orders.dtos import PlaceOrderDTO, PlaceOrderItemDTO
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def add_arguments(self, parser):
        parser.add_argument(
            "--orders",
            type=int,
            default=20,
            help="Number of orders to place through the order service.",
        )

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        self._seed_roles()
        users = self._seed_users()
        products = self._seed_products()
        orders_created = self._seed_orders(users, products, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={len(users)}, "
                f"products={len(products)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_roles(self) -> None:
        for name in DEFAULT_ROLES:
            Role.objects.get_or_create(name=name)

    def _seed_users(self) -> list:
        self.stdout.write("Creating users...")
        repo = UserDjangoRepository()
        seed_users = [
            ("admin", "admin12345", "admin@example.com", [ADMIN_ROLE, CLIENT_ROLE]),
            ("alice", "alice12345", "alice@example.com", [CLIENT_ROLE]),
            ("bob", "bob1234567", "bob@example.com", [CLIENT_ROLE]),
            ("carol", "carol12345", "carol@example.com", [CLIENT_ROLE]),
        ]
        users = []
        for username, password, email, roles in seed_users:
            user = repo.get_by_username(username)
            if user is None:
                user = repo.create_user(username, password, email, roles)
            users.append(user)
        self.stdout.write(self.style.SUCCESS("Creating users... Done!"))
        return users

    def _seed_products(self) -> list[Product]:
        self.stdout.write("Creating products...")
        products: list[Product] = []
        catalog = [
            ("Monitor 27\"", "Acme", "Electronics", Decimal("299.90")),
            ("Mechanical Keyboard", "Keyko", "Electronics", Decimal("89.90")),
            ("Gaming Mouse", "Keyko", "Electronics", Decimal("49.90")),
            ("Laptop 14\"", "Acme", "Electronics", Decimal("999.00")),
            ("Headset", "Sonar", "Electronics", Decimal("59.90")),
            ("Office Desk", "Woodly", "Furniture", Decimal("249.00")),
            ("Ergonomic Chair", "Woodly", "Furniture", Decimal("349.00")),
            ("Bookshelf", "Woodly", "Furniture", Decimal("159.00")),
            ("A4 Paper", "Papyr", "Office", Decimal("6.90")),
            ("Blue Pen", "Papyr", "Office", Decimal("0.99")),
            ("Notebook", "Papyr", "Office", Decimal("3.50")),
            ("Desk Lamp", "Lumo", "Office", Decimal("24.90")),
        ]
        for name, brand, category, price in catalog:
            product, _ = Product.objects.get_or_create(
                name=name,
                defaults={
                    "description": f"{brand} {name}",
                    "brand": brand,
                    "category": category,
                    "price": price,
                    "stock": random.randint(20, 200),
                },
            )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_orders(self, users: list, products: list[Product], count: int) -> int:
        self.stdout.write("Creating orders...")
        customers = [user for user in users if user.username != "admin"]
        if not customers or not products:
            self.stdout.write(self.style.WARNING("Skipping orders (no users/products)."))
            return 0

        service = OrderService(
            order_repository=OrderDjangoRepository(),
            product_repository=ProductDjangoRepository(),
            user_repository=UserDjangoRepository(),
        )
        admin = Principal.from_user(users[0])
        statuses = list(OrderStatus.values)
        orders_created = 0

        for i in range(count):
            user = random.choice(customers)
            lines = random.sample(products, k=random.randint(1, 4))
            dto = PlaceOrderDTO(
                address=f"{random.choice(['Main', 'Oak', 'Pine'])} Street",
                number=str(random.randint(1, 999)),
                postal_code=f"{random.randint(10000, 99999)}",
                items=[
                    PlaceOrderItemDTO(product_id=product.id, quantity=random.randint(1, 3))
                    for product in lines
                ],
            )
            try:
                order = service.place_order(Principal.from_user(user), dto)
            except DomainError as exc:
                self.stdout.write(self.style.WARNING(f"Order {i + 1} skipped: {exc}"))
                continue
            new_status = random.choice(statuses)
            if order.can_transition_to(new_status):
                service.update_status(admin, order.id, new_status)
            orders_created += 1

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return orders_created
