# src/db/crud.py
from __future__ import annotations

import sqlite3
from collections import defaultdict
from datetime import date, datetime
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Type

import aiosqlite

from db import models
from db.database import connect, transaction
from utils.errors import (
    ConcurrentModification,
    DuplicateRecord,
    NotFound,
    PersistenceError,
    ReferentialConflict,
)
from utils.logger import get_logger
from utils.pure import parse_date, parse_datetime

_logger = get_logger(__name__)

# callbacks applied to the saved objects once the transaction has committed
Pending = List[Callable[[], None]]


def _to_int(val) -> Optional[int]:
    try:
        return int(val)
    except (TypeError, ValueError):
        return None


def _iso(value: Optional[date | datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _placeholders(n: int) -> str:
    return ", ".join("?" * n)


# ---------------------------
# Row mapping
# ---------------------------


def _user_from_row(row) -> models.User:
    return models.User(
        id=row["id"],
        username=row["username"],
        password_hash=row["password_hash"],
        salt=row["salt"],
        full_name=row["full_name"],
        email=row["email"],
        role=models.Role(row["role"]),
        active=bool(row["active"]),
        last_login=parse_datetime(row["last_login"]),
        created_at=parse_datetime(row["created_at"]),
    )


def _customer_from_row(row) -> models.Customer:
    return models.Customer(
        id=row["id"],
        customer_id=row["customer_id"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        email=row["email"],
        phone=row["phone"],
        address=row["address"],
        registration_date=parse_date(row["registration_date"]),
    )


def _supplier_from_row(row) -> models.Supplier:
    return models.Supplier(
        id=row["id"],
        supplier_code=row["supplier_code"],
        name=row["name"],
        contact_person=row["contact_person"],
        email=row["email"],
        phone=row["phone"],
        address=row["address"],
    )


def _product_from_row(row) -> models.Product:
    return models.Product(
        id=row["id"],
        product_code=row["product_code"],
        name=row["name"],
        description=row["description"],
        price=row["price"],
        stock_quantity=int(row["stock_quantity"]),
        category=row["category"],
        supplier_id=row["supplier_id"],
    )


def _item_from_row(row) -> models.OrderItem:
    return models.OrderItem(
        id=row["id"],
        order_id=row["order_id"],
        product_id=row["product_id"],
        quantity=int(row["quantity"]),
        unit_price=row["unit_price"],
    )


def _order_from_row(row, items: List[models.OrderItem]) -> models.Order:
    # total_amount is derived from the items, the stored copy is for reports
    return models.Order(
        id=row["id"],
        order_number=row["order_number"],
        customer_id=row["customer_id"],
        order_date=parse_date(row["order_date"]),
        status=models.OrderStatus(row["status"]),
        payment_method=row["payment_method"],
        items=items,
        version=int(row["version"]),
    )


def _payment_from_row(row) -> models.Payment:
    return models.Payment(
        id=row["id"],
        payment_id=row["payment_id"],
        invoice_id=row["invoice_id"],
        amount=row["amount"],
        payment_date=parse_date(row["payment_date"]),
        payment_method=row["payment_method"],
    )


def _invoice_from_row(row, payments: List[models.Payment]) -> models.Invoice:
    return models.Invoice(
        id=row["id"],
        invoice_number=row["invoice_number"],
        order_id=row["order_id"],
        issue_date=parse_date(row["issue_date"]),
        due_date=parse_date(row["due_date"]),
        amount=row["amount"],
        status=models.InvoiceStatus(row["status"]),
        payments=payments,
        version=int(row["version"]),
    )


async def _fetchall(conn: aiosqlite.Connection, sql: str, params: Tuple = ()) -> list:
    cur = await conn.execute(sql, params)
    rows = await cur.fetchall()
    await cur.close()
    return rows


async def _fetchone(conn: aiosqlite.Connection, sql: str, params: Tuple = ()):
    cur = await conn.execute(sql, params)
    row = await cur.fetchone()
    await cur.close()
    return row


# ---------------------------
# Users
# ---------------------------


async def find_user_by_username(username: str) -> Optional[models.User]:
    async with connect() as conn:
        row = await _fetchone(
            conn, "SELECT * FROM users WHERE username = ?;", (username,)
        )
    return _user_from_row(row) if row else None


async def find_user_by_id(user_id: int) -> Optional[models.User]:
    async with connect() as conn:
        row = await _fetchone(conn, "SELECT * FROM users WHERE id = ?;", (user_id,))
    return _user_from_row(row) if row else None


async def find_user_by_email(email: str) -> Optional[models.User]:
    async with connect() as conn:
        row = await _fetchone(conn, "SELECT * FROM users WHERE email = ?;", (email,))
    return _user_from_row(row) if row else None


async def list_users() -> List[models.User]:
    async with connect() as conn:
        rows = await _fetchall(conn, "SELECT * FROM users ORDER BY username;")
    return [_user_from_row(row) for row in rows]


async def find_users_by_role(role: models.Role) -> List[models.User]:
    async with connect() as conn:
        rows = await _fetchall(
            conn,
            "SELECT * FROM users WHERE role = ? ORDER BY username;",
            (models.Role(role).value,),
        )
    return [_user_from_row(row) for row in rows]


async def count_users() -> int:
    async with connect() as conn:
        row = await _fetchone(conn, "SELECT COUNT(*) FROM users;")
    return int(row[0])


async def update_last_login(user_id: int, when: datetime) -> None:
    async with connect() as conn:
        cur = await conn.execute(
            "UPDATE users SET last_login = ? WHERE id = ?;", (_iso(when), user_id)
        )
        await conn.commit()
        if cur.rowcount == 0:
            raise NotFound("User", user_id)


async def update_password(user_id: int, password_hash: str, salt: str) -> None:
    """Replace hash and salt in a single statement, never one without the other."""
    async with connect() as conn:
        cur = await conn.execute(
            "UPDATE users SET password_hash = ?, salt = ? WHERE id = ?;",
            (password_hash, salt, user_id),
        )
        await conn.commit()
        if cur.rowcount == 0:
            raise NotFound("User", user_id)


# ---------------------------
# Customers, Suppliers, Products
# ---------------------------


async def find_customer(customer_pk: int) -> Optional[models.Customer]:
    async with connect() as conn:
        row = await _fetchone(
            conn, "SELECT * FROM customers WHERE id = ?;", (customer_pk,)
        )
    return _customer_from_row(row) if row else None


async def find_customer_by_customer_id(customer_id: str) -> Optional[models.Customer]:
    async with connect() as conn:
        row = await _fetchone(
            conn, "SELECT * FROM customers WHERE customer_id = ?;", (customer_id,)
        )
    return _customer_from_row(row) if row else None


async def find_customer_with_orders(customer_pk: int) -> Optional[models.Customer]:
    """Customer with its orders (and their items) attached, newest first."""
    async with connect() as conn:
        row = await _fetchone(
            conn, "SELECT * FROM customers WHERE id = ?;", (customer_pk,)
        )
        if not row:
            return None
        orders = await _load_orders(conn, "WHERE customer_id = ?", (customer_pk,))
    customer = _customer_from_row(row)
    for order in orders:
        customer.add_order(order)
    return customer


async def list_customers() -> List[models.Customer]:
    async with connect() as conn:
        rows = await _fetchall(
            conn, "SELECT * FROM customers ORDER BY last_name, first_name, id;"
        )
    return [_customer_from_row(row) for row in rows]


async def find_customers_by_name(name: str) -> List[models.Customer]:
    """Customers whose first, last or full name contains `name`."""
    pattern = f"%{name}%"
    async with connect() as conn:
        rows = await _fetchall(
            conn,
            """
            SELECT * FROM customers
            WHERE first_name LIKE ? OR last_name LIKE ?
               OR first_name || ' ' || last_name LIKE ?
            ORDER BY last_name, first_name, id;
            """,
            (pattern, pattern, pattern),
        )
    return [_customer_from_row(row) for row in rows]


async def find_customer_by_email(email: str) -> Optional[models.Customer]:
    async with connect() as conn:
        row = await _fetchone(
            conn, "SELECT * FROM customers WHERE email = ?;", (email,)
        )
    return _customer_from_row(row) if row else None


async def list_suppliers() -> List[models.Supplier]:
    async with connect() as conn:
        rows = await _fetchall(conn, "SELECT * FROM suppliers ORDER BY name, id;")
    return [_supplier_from_row(row) for row in rows]


async def find_suppliers_by_name(name: str) -> List[models.Supplier]:
    async with connect() as conn:
        rows = await _fetchall(
            conn,
            "SELECT * FROM suppliers WHERE name LIKE ? ORDER BY name, id;",
            (f"%{name}%",),
        )
    return [_supplier_from_row(row) for row in rows]


async def find_supplier(supplier_pk: int) -> Optional[models.Supplier]:
    """Supplier with its products attached."""
    async with connect() as conn:
        row = await _fetchone(
            conn, "SELECT * FROM suppliers WHERE id = ?;", (supplier_pk,)
        )
        if not row:
            return None
        product_rows = await _fetchall(
            conn,
            "SELECT * FROM products WHERE supplier_id = ? ORDER BY id;",
            (supplier_pk,),
        )
    supplier = _supplier_from_row(row)
    for product_row in product_rows:
        supplier.add_product(_product_from_row(product_row))
    return supplier


async def find_product(product_pk: int) -> Optional[models.Product]:
    async with connect() as conn:
        row = await _fetchone(
            conn, "SELECT * FROM products WHERE id = ?;", (product_pk,)
        )
    return _product_from_row(row) if row else None


async def find_product_by_code(product_code: str) -> Optional[models.Product]:
    async with connect() as conn:
        row = await _fetchone(
            conn, "SELECT * FROM products WHERE product_code = ?;", (product_code,)
        )
    return _product_from_row(row) if row else None


async def _find_products(where: str = "", params: Tuple = ()) -> List[models.Product]:
    async with connect() as conn:
        rows = await _fetchall(
            conn, f"SELECT * FROM products {where} ORDER BY name, id;", params
        )
    return [_product_from_row(row) for row in rows]


async def list_products() -> List[models.Product]:
    return await _find_products()


async def find_products_by_name(name: str) -> List[models.Product]:
    return await _find_products("WHERE name LIKE ?", (f"%{name}%",))


async def find_products_by_category(category: str) -> List[models.Product]:
    return await _find_products("WHERE category = ?", (category,))


async def find_products_by_supplier(supplier_pk: int) -> List[models.Product]:
    return await _find_products("WHERE supplier_id = ?", (supplier_pk,))


async def find_low_stock_products(threshold: int) -> List[models.Product]:
    async with connect() as conn:
        rows = await _fetchall(
            conn,
            "SELECT * FROM products WHERE stock_quantity < ? ORDER BY stock_quantity, id;",
            (threshold,),
        )
    return [_product_from_row(row) for row in rows]


# ---------------------------
# Orders
# ---------------------------


async def _load_orders(
    conn: aiosqlite.Connection, where: str = "", params: Tuple = ()
) -> List[models.Order]:
    order_rows = await _fetchall(
        conn,
        f"SELECT * FROM orders {where} ORDER BY order_date DESC, id DESC;",
        params,
    )
    if not order_rows:
        return []
    ids = [row["id"] for row in order_rows]
    item_rows = await _fetchall(
        conn,
        f"""
        SELECT * FROM order_items
        WHERE order_id IN ({_placeholders(len(ids))})
        ORDER BY order_id, line_no;
        """,
        tuple(ids),
    )
    items_by_order: Dict[int, List[models.OrderItem]] = defaultdict(list)
    for row in item_rows:
        items_by_order[row["order_id"]].append(_item_from_row(row))
    return [_order_from_row(row, items_by_order[row["id"]]) for row in order_rows]


async def find_order_with_items(order_id: int) -> Optional[models.Order]:
    async with connect() as conn:
        orders = await _load_orders(conn, "WHERE id = ?", (order_id,))
    return orders[0] if orders else None


async def find_order_by_number(order_number: str) -> Optional[models.Order]:
    async with connect() as conn:
        orders = await _load_orders(conn, "WHERE order_number = ?", (order_number,))
    return orders[0] if orders else None


async def list_orders(
    status: Optional[models.OrderStatus] = None,
) -> List[models.Order]:
    """All orders with their items, newest first."""
    async with connect() as conn:
        if status is None:
            return await _load_orders(conn)
        return await _load_orders(conn, "WHERE status = ?", (status.value,))


async def find_orders_by_customer(customer_pk: int) -> List[models.Order]:
    async with connect() as conn:
        return await _load_orders(conn, "WHERE customer_id = ?", (customer_pk,))


async def find_orders_by_date_range(start: date, end: date) -> List[models.Order]:
    """Orders dated from `start` through `end`, both inclusive."""
    async with connect() as conn:
        return await _load_orders(
            conn, "WHERE order_date BETWEEN ? AND ?", (_iso(start), _iso(end))
        )


# ---------------------------
# Invoices & Payments
# ---------------------------


async def _load_invoices(
    conn: aiosqlite.Connection, where: str = "", params: Tuple = ()
) -> List[models.Invoice]:
    invoice_rows = await _fetchall(
        conn,
        f"SELECT * FROM invoices {where} ORDER BY due_date, id;",
        params,
    )
    if not invoice_rows:
        return []
    ids = [row["id"] for row in invoice_rows]
    payment_rows = await _fetchall(
        conn,
        f"""
        SELECT * FROM payments
        WHERE invoice_id IN ({_placeholders(len(ids))})
        ORDER BY invoice_id, payment_date, id;
        """,
        tuple(ids),
    )
    payments_by_invoice: Dict[int, List[models.Payment]] = defaultdict(list)
    for row in payment_rows:
        payments_by_invoice[row["invoice_id"]].append(_payment_from_row(row))
    return [
        _invoice_from_row(row, payments_by_invoice[row["id"]]) for row in invoice_rows
    ]


async def find_invoice_with_payments(invoice_id: int) -> Optional[models.Invoice]:
    async with connect() as conn:
        invoices = await _load_invoices(conn, "WHERE id = ?", (invoice_id,))
    return invoices[0] if invoices else None


async def find_invoice_by_number(invoice_number: str) -> Optional[models.Invoice]:
    async with connect() as conn:
        invoices = await _load_invoices(
            conn, "WHERE invoice_number = ?", (invoice_number,)
        )
    return invoices[0] if invoices else None


async def find_invoices_by_order(order_id: int) -> List[models.Invoice]:
    async with connect() as conn:
        return await _load_invoices(conn, "WHERE order_id = ?", (order_id,))


async def list_invoices(
    statuses: Optional[Iterable[models.InvoiceStatus]] = None,
) -> List[models.Invoice]:
    async with connect() as conn:
        if statuses is None:
            return await _load_invoices(conn)
        values = tuple(s.value for s in statuses)
        if not values:
            return []
        return await _load_invoices(
            conn, f"WHERE status IN ({_placeholders(len(values))})", values
        )


async def find_invoices_by_date_range(start: date, end: date) -> List[models.Invoice]:
    """Invoices issued from `start` through `end`, both inclusive."""
    async with connect() as conn:
        return await _load_invoices(
            conn, "WHERE issue_date BETWEEN ? AND ?", (_iso(start), _iso(end))
        )


async def _find_payments(where: str, params: Tuple) -> List[models.Payment]:
    async with connect() as conn:
        rows = await _fetchall(
            conn, f"SELECT * FROM payments {where} ORDER BY payment_date, id;", params
        )
    return [_payment_from_row(row) for row in rows]


async def find_payments_by_date_range(start: date, end: date) -> List[models.Payment]:
    return await _find_payments(
        "WHERE payment_date BETWEEN ? AND ?", (_iso(start), _iso(end))
    )


async def find_payments_by_method(payment_method: str) -> List[models.Payment]:
    return await _find_payments("WHERE payment_method = ?", (payment_method,))


async def find_overdue_invoices(today: date) -> List[models.Invoice]:
    """
    Invoices past their due date and not paid in full as of `today`.
    The stored status is not trusted, it may not have been refreshed yet.
    """
    async with connect() as conn:
        candidates = await _load_invoices(
            conn,
            "WHERE due_date < ? AND status NOT IN (?, ?)",
            (
                today.isoformat(),
                models.InvoiceStatus.PAID.value,
                models.InvoiceStatus.CANCELLED.value,
            ),
        )
    return [inv for inv in candidates if inv.is_overdue(today)]


# ---------------------------
# Save
# ---------------------------


async def _stale_or_missing(
    conn: aiosqlite.Connection, table: str, kind: str, key: int, version: int
) -> PersistenceError:
    row = await _fetchone(conn, f"SELECT version FROM {table} WHERE id = ?;", (key,))
    if row is None:
        return NotFound(kind, key)
    return ConcurrentModification(kind, key, version)


async def _upsert(
    conn: aiosqlite.Connection,
    table: str,
    kind: str,
    entity,
    columns: List[str],
    values: Tuple,
    pending: Pending,
) -> int:
    """Insert when the entity has no id yet, otherwise update it in place."""
    if entity.id is None:
        cur = await conn.execute(
            f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({_placeholders(len(columns))});",
            values,
        )
        new_id = cur.lastrowid
        pending.append(lambda: setattr(entity, "id", new_id))
        return new_id

    assignments = ", ".join(f"{c} = ?" for c in columns)
    cur = await conn.execute(
        f"UPDATE {table} SET {assignments} WHERE id = ?;", values + (entity.id,)
    )
    if cur.rowcount == 0:
        raise NotFound(kind, entity.id)
    return entity.id


async def _save_user(conn, user: models.User, pending: Pending) -> int:
    return await _upsert(
        conn,
        "users",
        "User",
        user,
        [
            "username",
            "password_hash",
            "salt",
            "full_name",
            "email",
            "role",
            "active",
            "last_login",
            "created_at",
        ],
        (
            user.username,
            user.password_hash,
            user.salt,
            user.full_name,
            user.email,
            user.role.value,
            int(user.active),
            _iso(user.last_login),
            _iso(user.created_at),
        ),
        pending,
    )


async def _save_customer(conn, customer: models.Customer, pending: Pending) -> int:
    return await _upsert(
        conn,
        "customers",
        "Customer",
        customer,
        [
            "customer_id",
            "first_name",
            "last_name",
            "email",
            "phone",
            "address",
            "registration_date",
        ],
        (
            customer.customer_id,
            customer.first_name,
            customer.last_name,
            customer.email,
            customer.phone,
            customer.address,
            _iso(customer.registration_date),
        ),
        pending,
    )


async def _save_supplier(conn, supplier: models.Supplier, pending: Pending) -> int:
    return await _upsert(
        conn,
        "suppliers",
        "Supplier",
        supplier,
        ["supplier_code", "name", "contact_person", "email", "phone", "address"],
        (
            supplier.supplier_code,
            supplier.name,
            supplier.contact_person,
            supplier.email,
            supplier.phone,
            supplier.address,
        ),
        pending,
    )


async def _save_product(conn, product: models.Product, pending: Pending) -> int:
    return await _upsert(
        conn,
        "products",
        "Product",
        product,
        [
            "product_code",
            "name",
            "description",
            "price",
            "stock_quantity",
            "category",
            "supplier_id",
        ],
        (
            product.product_code,
            product.name,
            product.description,
            str(product.price),
            product.stock_quantity,
            product.category,
            product.supplier_id,
        ),
        pending,
    )


async def _save_versioned(
    conn, table: str, kind: str, entity, columns: List[str], values: Tuple, pending: Pending
) -> int:
    """Like _upsert, but an update only applies to the version that was loaded."""
    if entity.id is None:
        new_id = await _upsert(conn, table, kind, entity, columns, values, pending)
        pending.append(lambda: setattr(entity, "version", 0))
        return new_id

    assignments = ", ".join(f"{c} = ?" for c in columns)
    cur = await conn.execute(
        f"UPDATE {table} SET {assignments}, version = version + 1 WHERE id = ? AND version = ?;",
        values + (entity.id, entity.version),
    )
    if cur.rowcount == 0:
        raise await _stale_or_missing(conn, table, kind, entity.id, entity.version)
    new_version = entity.version + 1
    pending.append(lambda: setattr(entity, "version", new_version))
    return entity.id


async def _adjust_stock(conn, order_id: int, items: List[models.OrderItem]) -> None:
    """Move product stock by the difference between stored and new order lines."""
    rows = await _fetchall(
        conn,
        "SELECT product_id, SUM(quantity) FROM order_items WHERE order_id = ? GROUP BY product_id;",
        (order_id,),
    )
    delta: Dict[int, int] = defaultdict(int)
    for product_id, qty in rows:
        if product_id is not None:
            delta[product_id] -= int(qty)
    for item in items:
        if item.product_id is not None:
            delta[item.product_id] += item.quantity
    for product_id, qty in delta.items():
        if qty:
            await conn.execute(
                "UPDATE products SET stock_quantity = stock_quantity - ? WHERE id = ?;",
                (qty, product_id),
            )


async def _save_order(conn, order: models.Order, pending: Pending) -> int:
    order_id = await _save_versioned(
        conn,
        "orders",
        "Order",
        order,
        [
            "order_number",
            "customer_id",
            "order_date",
            "total_amount",
            "status",
            "payment_method",
        ],
        (
            order.order_number,
            order.customer_id,
            _iso(order.order_date),
            str(order.total_amount),
            order.status.value,
            order.payment_method,
        ),
        pending,
    )
    await _adjust_stock(conn, order_id, order.items)

    # the order owns its lines: rewrite them all, keeping known ids
    await conn.execute("DELETE FROM order_items WHERE order_id = ?;", (order_id,))
    for line_no, item in enumerate(order.items, start=1):
        cur = await conn.execute(
            """
            INSERT INTO order_items(id, order_id, line_no, product_id, quantity, unit_price)
            VALUES (?, ?, ?, ?, ?, ?);
            """,
            (
                item.id,
                order_id,
                line_no,
                item.product_id,
                item.quantity,
                str(item.unit_price),
            ),
        )
        item_id = cur.lastrowid

        def _stamp(item=item, item_id=item_id):
            item.id = item_id
            item.order_id = order_id

        pending.append(_stamp)
    return order_id


async def _save_invoice(conn, invoice: models.Invoice, pending: Pending) -> int:
    invoice_id = await _save_versioned(
        conn,
        "invoices",
        "Invoice",
        invoice,
        ["invoice_number", "order_id", "issue_date", "due_date", "amount", "status"],
        (
            invoice.invoice_number,
            invoice.order_id,
            _iso(invoice.issue_date),
            _iso(invoice.due_date),
            str(invoice.amount),
            invoice.status.value,
        ),
        pending,
    )

    await conn.execute("DELETE FROM payments WHERE invoice_id = ?;", (invoice_id,))
    for payment in invoice.payments:
        cur = await conn.execute(
            """
            INSERT INTO payments(id, payment_id, invoice_id, amount, payment_date, payment_method)
            VALUES (?, ?, ?, ?, ?, ?);
            """,
            (
                payment.id,
                payment.payment_id,
                invoice_id,
                str(payment.amount),
                _iso(payment.payment_date),
                payment.payment_method,
            ),
        )
        payment_pk = cur.lastrowid

        def _stamp(payment=payment, payment_pk=payment_pk):
            payment.id = payment_pk
            payment.invoice_id = invoice_id

        pending.append(_stamp)
    return invoice_id


_SAVERS = {
    models.User: _save_user,
    models.Customer: _save_customer,
    models.Supplier: _save_supplier,
    models.Product: _save_product,
    models.Order: _save_order,
    models.Invoice: _save_invoice,
}


async def save(entity) -> int:
    """
    Insert or update an aggregate (with its owned lines) in one transaction.

    Returns the database id. Ids and versions are written back to the
    objects only after the commit, so a failed save leaves them untouched.
    Order items and payments are saved through their order / invoice.
    """
    saver = _SAVERS.get(type(entity))
    if saver is None:
        raise TypeError(f"cannot save {type(entity).__name__} on its own")

    pending: Pending = []
    kind = type(entity).__name__
    try:
        async with transaction() as conn:
            entity_id = await saver(conn, entity, pending)
    except sqlite3.IntegrityError as exc:
        _logger.warning(f"Saving {kind} failed: {exc}")
        if "UNIQUE" in str(exc):
            raise DuplicateRecord(f"{kind} conflicts with an existing record") from exc
        raise PersistenceError(f"{kind} could not be saved: {exc}") from exc

    for apply in pending:
        apply()
    _logger.debug(f"Saved {kind} {entity_id}")
    return entity_id


# ---------------------------
# Delete
# ---------------------------

_TABLES: Dict[Type, str] = {
    models.User: "users",
    models.Customer: "customers",
    models.Supplier: "suppliers",
    models.Product: "products",
    models.Order: "orders",  # its items go with it
    models.Invoice: "invoices",
}


async def delete(kind: Type, entity_id: int) -> None:
    """
    Delete one record by id.
    Raises NotFound when there is no such row, ReferentialConflict when other
    rows still point at it (an invoice with payments, an ordered product, ...).
    """
    table = _TABLES.get(kind)
    if table is None:
        raise TypeError(f"cannot delete {kind.__name__} on its own")
    try:
        async with transaction() as conn:
            cur = await conn.execute(f"DELETE FROM {table} WHERE id = ?;", (entity_id,))
            deleted = cur.rowcount
    except sqlite3.IntegrityError as exc:
        _logger.info(f"Delete of {kind.__name__} {entity_id} blocked: {exc}")
        raise ReferentialConflict(kind.__name__, entity_id) from exc
    if deleted == 0:
        raise NotFound(kind.__name__, entity_id)
    _logger.debug(f"Deleted {kind.__name__} {entity_id}")
