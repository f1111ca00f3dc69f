"""
What the services need from a store.

db.crud implements this with module-level functions, so the module object
itself is passed wherever a Repository is expected. Tests may pass any other
object with the same coroutines.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional, Protocol, Type, Union

from db import models

Aggregate = Union[
    models.User,
    models.Customer,
    models.Supplier,
    models.Product,
    models.Order,
    models.Invoice,
]


class Repository(Protocol):
    # users
    async def find_user_by_username(self, username: str) -> Optional[models.User]: ...

    async def find_user_by_id(self, user_id: int) -> Optional[models.User]: ...

    async def find_user_by_email(self, email: str) -> Optional[models.User]: ...

    async def list_users(self) -> List[models.User]: ...

    async def find_users_by_role(self, role: models.Role) -> List[models.User]: ...

    async def count_users(self) -> int: ...

    async def update_last_login(self, user_id: int, when: datetime) -> None: ...

    async def update_password(
        self, user_id: int, password_hash: str, salt: str
    ) -> None: ...

    # orders and invoices
    async def find_order_with_items(self, order_id: int) -> Optional[models.Order]: ...

    async def list_orders(
        self, status: Optional[models.OrderStatus] = None
    ) -> List[models.Order]: ...

    async def find_orders_by_customer(self, customer_pk: int) -> List[models.Order]: ...

    async def find_orders_by_date_range(
        self, start: date, end: date
    ) -> List[models.Order]: ...

    async def find_invoices_by_order(self, order_id: int) -> List[models.Invoice]: ...

    async def find_invoices_by_date_range(
        self, start: date, end: date
    ) -> List[models.Invoice]: ...

    async def find_invoice_with_payments(
        self, invoice_id: int
    ) -> Optional[models.Invoice]: ...

    async def find_invoice_by_number(
        self, invoice_number: str
    ) -> Optional[models.Invoice]: ...

    async def list_invoices(
        self, statuses: Optional[List[models.InvoiceStatus]] = None
    ) -> List[models.Invoice]: ...

    async def find_overdue_invoices(self, today: date) -> List[models.Invoice]: ...

    async def find_payments_by_date_range(
        self, start: date, end: date
    ) -> List[models.Payment]: ...

    async def find_payments_by_method(
        self, payment_method: str
    ) -> List[models.Payment]: ...

    # catalog
    async def find_customer(self, customer_pk: int) -> Optional[models.Customer]: ...

    async def find_customer_by_customer_id(
        self, customer_id: str
    ) -> Optional[models.Customer]: ...

    async def find_customer_with_orders(
        self, customer_pk: int
    ) -> Optional[models.Customer]: ...

    async def find_customer_by_email(self, email: str) -> Optional[models.Customer]: ...

    async def list_customers(self) -> List[models.Customer]: ...

    async def find_customers_by_name(self, name: str) -> List[models.Customer]: ...

    async def list_suppliers(self) -> List[models.Supplier]: ...

    async def find_suppliers_by_name(self, name: str) -> List[models.Supplier]: ...

    async def find_supplier(self, supplier_pk: int) -> Optional[models.Supplier]: ...

    async def find_product(self, product_pk: int) -> Optional[models.Product]: ...

    async def find_product_by_code(
        self, product_code: str
    ) -> Optional[models.Product]: ...

    async def list_products(self) -> List[models.Product]: ...

    async def find_products_by_name(self, name: str) -> List[models.Product]: ...

    async def find_products_by_category(self, category: str) -> List[models.Product]: ...

    async def find_products_by_supplier(
        self, supplier_pk: int
    ) -> List[models.Product]: ...

    async def find_low_stock_products(self, threshold: int) -> List[models.Product]: ...

    # writes
    async def save(self, entity: Aggregate) -> int: ...

    async def delete(self, kind: Type[Aggregate], entity_id: int) -> None: ...
