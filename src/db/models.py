# domain records with their derived-state rules
#
# Child records only keep the id of their parent (order_id, invoice_id, ...);
# owners hold the child lists. Derived values are recomputed by the owner's
# mutation methods, never by assigning fields from the outside.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import StrEnum
from typing import List, Optional

from utils import config
from utils.money import ZERO, MoneyLike, to_money
from utils.pure import days_between


class OrderStatus(StrEnum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class InvoiceStatus(StrEnum):
    DRAFT = "Draft"
    ISSUED = "Issued"
    PAID = "Paid"
    OVERDUE = "Overdue"
    CANCELLED = "Cancelled"


class Role(StrEnum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    STAFF = "STAFF"


@dataclass
class User:
    username: str
    password_hash: str = field(default="", repr=False)  # base64
    salt: str = field(default="", repr=False)  # base64
    full_name: str = ""
    email: str = ""
    role: Role = Role.STAFF
    active: bool = True
    last_login: Optional[datetime] = None
    created_at: datetime = field(default_factory=datetime.now)
    id: Optional[int] = None

    def __post_init__(self):
        self.role = Role(self.role)

    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def is_manager(self) -> bool:
        return self.role == Role.MANAGER

    def update_last_login(self, when: Optional[datetime] = None) -> None:
        self.last_login = when or datetime.now()


@dataclass
class Customer:
    customer_id: str  # external, unique
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    registration_date: date = field(default_factory=date.today)
    id: Optional[int] = None
    orders: List[Order] = field(default_factory=list, repr=False, compare=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def add_order(self, order: Order) -> None:
        self.orders.append(order)
        order.customer_id = self.id


@dataclass
class Supplier:
    supplier_code: str
    name: str
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    id: Optional[int] = None
    products: List[Product] = field(default_factory=list, repr=False, compare=False)

    def add_product(self, product: Product) -> None:
        self.products.append(product)
        product.supplier_id = self.id


@dataclass
class Product:
    product_code: str
    name: str
    price: Decimal = ZERO
    stock_quantity: int = 0  # may go negative when overselling
    description: Optional[str] = None
    category: Optional[str] = None
    supplier_id: Optional[int] = None
    id: Optional[int] = None

    def __post_init__(self):
        self.price = to_money(self.price)

    def update_stock(self, delta: int) -> int:
        self.stock_quantity += delta
        return self.stock_quantity

    def is_in_stock(self) -> bool:
        return self.stock_quantity > 0

    def is_low_stock(self, threshold: Optional[int] = None) -> bool:
        if threshold is None:
            threshold = config.LOW_STOCK_THRESHOLD
        return self.stock_quantity < threshold


@dataclass
class OrderItem:
    product_id: Optional[int]
    quantity: int = 1
    unit_price: Decimal = ZERO  # snapshot taken when the item was created
    id: Optional[int] = None
    order_id: Optional[int] = None

    def __post_init__(self):
        self.unit_price = to_money(self.unit_price)

    @classmethod
    def for_product(cls, product: Product, quantity: int = 1) -> OrderItem:
        return cls(product_id=product.id, quantity=quantity, unit_price=product.price)

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass
class Order:
    order_number: str
    customer_id: Optional[int] = None
    order_date: date = field(default_factory=date.today)
    status: OrderStatus = OrderStatus.PENDING
    payment_method: Optional[str] = None
    items: List[OrderItem] = field(default_factory=list)
    id: Optional[int] = None
    version: int = 0
    # not owned: invoices live in their own aggregate
    invoices: List[Invoice] = field(default_factory=list, repr=False, compare=False)
    total_amount: Decimal = field(default=ZERO, init=False)

    def __post_init__(self):
        self.status = OrderStatus(self.status)
        for item in self.items:
            item.order_id = self.id
        self.recalculate_total()

    def recalculate_total(self) -> Decimal:
        total = ZERO
        for item in self.items:
            total += item.subtotal
        self.total_amount = total
        return total

    def add_order_item(self, item: OrderItem) -> None:
        self.items.append(item)
        item.order_id = self.id
        self.recalculate_total()

    def remove_order_item(self, item: OrderItem) -> bool:
        """Remove this exact item object; returns False if it is not ours."""
        for index, owned in enumerate(self.items):
            if owned is item:
                del self.items[index]
                self.recalculate_total()
                return True
        return False

    def find_item(self, item_id: int) -> Optional[OrderItem]:
        return next((i for i in self.items if i.id == item_id), None)

    def _check_owned(self, item: OrderItem) -> None:
        if not any(owned is item for owned in self.items):
            raise ValueError("item does not belong to this order")

    def set_item_quantity(self, item: OrderItem, quantity: int) -> None:
        self._check_owned(item)
        item.quantity = quantity
        self.recalculate_total()

    def set_item_unit_price(self, item: OrderItem, unit_price: MoneyLike) -> None:
        self._check_owned(item)
        item.unit_price = to_money(unit_price)
        self.recalculate_total()

    def add_invoice(self, invoice: Invoice) -> None:
        self.invoices.append(invoice)
        invoice.order_id = self.id

    @property
    def invoiced_amount(self) -> Decimal:
        return sum((inv.amount for inv in self.invoices), ZERO)

    def is_fully_invoiced(self) -> bool:
        # over-invoicing counts as fully invoiced
        if not self.invoices:
            return False
        return self.invoiced_amount >= self.total_amount


@dataclass
class Payment:
    payment_id: str
    amount: Decimal = ZERO
    payment_method: Optional[str] = None
    payment_date: date = field(default_factory=date.today)
    id: Optional[int] = None
    invoice_id: Optional[int] = None

    def __post_init__(self):
        self.amount = to_money(self.amount)


@dataclass
class Invoice:
    invoice_number: str
    amount: Decimal = ZERO  # may bill only part of the order
    order_id: Optional[int] = None
    issue_date: date = field(default_factory=date.today)
    due_date: Optional[date] = None  # defaults to issue_date + terms
    status: InvoiceStatus = InvoiceStatus.DRAFT
    payments: List[Payment] = field(default_factory=list)
    id: Optional[int] = None
    version: int = 0

    def __post_init__(self):
        self.amount = to_money(self.amount)
        self.status = InvoiceStatus(self.status)
        if self.due_date is None:
            self.due_date = self.issue_date + timedelta(days=config.INVOICE_TERMS_DAYS)
        for payment in self.payments:
            payment.invoice_id = self.id

    @property
    def paid_amount(self) -> Decimal:
        return sum((p.amount for p in self.payments), ZERO)

    @property
    def remaining_balance(self) -> Decimal:
        # negative when overpaid
        return self.amount - self.paid_amount

    def is_fully_paid(self) -> bool:
        return self.paid_amount >= self.amount

    def is_overdue(self, today: Optional[date] = None) -> bool:
        today = today or date.today()
        return today > self.due_date and not self.is_fully_paid()

    def days_overdue(self, today: Optional[date] = None) -> int:
        today = today or date.today()
        if not self.is_overdue(today):
            return 0
        return days_between(self.due_date, today)

    def update_status(self, today: Optional[date] = None) -> InvoiceStatus:
        """
        Re-derive the status from payments and the due date.

        Paid wins over Overdue. A Draft or Cancelled invoice that is neither
        paid in full nor past due keeps its status; it never drifts to Issued.
        """
        if self.is_fully_paid():
            self.status = InvoiceStatus.PAID
        elif self.is_overdue(today):
            self.status = InvoiceStatus.OVERDUE
        elif self.status not in (InvoiceStatus.DRAFT, InvoiceStatus.CANCELLED):
            self.status = InvoiceStatus.ISSUED
        return self.status

    def add_payment(self, payment: Payment, today: Optional[date] = None) -> None:
        self.payments.append(payment)
        payment.invoice_id = self.id
        self.update_status(today)

    def amend_payment(
        self, payment: Payment, amount: MoneyLike, today: Optional[date] = None
    ) -> None:
        if not any(owned is payment for owned in self.payments):
            raise ValueError("payment does not belong to this invoice")
        payment.amount = to_money(amount)
        self.update_status(today)

    def issue(self, today: Optional[date] = None) -> InvoiceStatus:
        if self.status != InvoiceStatus.DRAFT:
            raise ValueError(f"cannot issue an invoice in status {self.status}")
        self.status = InvoiceStatus.ISSUED
        return self.update_status(today)

    def cancel(self) -> None:
        if self.status == InvoiceStatus.PAID:
            raise ValueError("cannot cancel a paid invoice")
        self.status = InvoiceStatus.CANCELLED
