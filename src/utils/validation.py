"""
Field checks for user input.

The validate_* predicates answer yes/no for a single value. The check_*
functions run them over a whole record and return the failures, an empty
list meaning the record is fine.
"""

import re
from datetime import date
from decimal import Decimal
from typing import List, Optional, Union

from db import models
from utils.errors import ValidationFailed

EMAIL_PATTERN = re.compile(r"[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+")
PHONE_PATTERN = re.compile(r"\+?[0-9]{10,15}")
ALPHANUMERIC_PATTERN = re.compile(r"[A-Za-z0-9]+")
NUMBER_PATTERN = re.compile(r"[0-9]+")

MIN_PASSWORD_LENGTH = 6

Number = Union[int, Decimal]


def is_null_or_empty(text: Optional[str]) -> bool:
    return text is None or not text.strip()


def validate_min_length(text: Optional[str], min_length: int) -> bool:
    if is_null_or_empty(text):
        return False
    return len(text) >= min_length


def validate_max_length(text: Optional[str], max_length: int) -> bool:
    # nothing is always short enough
    if is_null_or_empty(text):
        return True
    return len(text) <= max_length


def _matches(pattern: re.Pattern, text: Optional[str]) -> bool:
    if is_null_or_empty(text):
        return False
    return pattern.fullmatch(text) is not None


def validate_email(email: Optional[str]) -> bool:
    return _matches(EMAIL_PATTERN, email)


def validate_phone(phone: Optional[str]) -> bool:
    return _matches(PHONE_PATTERN, phone)


def validate_alphanumeric(text: Optional[str]) -> bool:
    return _matches(ALPHANUMERIC_PATTERN, text)


def validate_numeric(text: Optional[str]) -> bool:
    return _matches(NUMBER_PATTERN, text)


def validate_positive(value: Optional[Number]) -> bool:
    return value is not None and value > 0


def validate_non_negative(value: Optional[Number]) -> bool:
    return value is not None and value >= 0


def validate_not_future(value: Optional[date], today: Optional[date] = None) -> bool:
    if value is None:
        return False
    return value <= (today or date.today())


def validate_not_past(value: Optional[date], today: Optional[date] = None) -> bool:
    if value is None:
        return False
    return value >= (today or date.today())


def validate_date_range(
    value: Optional[date], start: Optional[date], end: Optional[date]
) -> bool:
    """True if value lies in [start, end]; a None bound is open."""
    if value is None:
        return False
    after_start = start is None or value >= start
    before_end = end is None or value <= end
    return after_start and before_end


# ---------------------------
# Record checks
# ---------------------------


def _required(errors: List[ValidationFailed], field: str, text: Optional[str]) -> bool:
    if is_null_or_empty(text):
        errors.append(ValidationFailed(field, f"{field} is required."))
        return False
    return True


def check_customer(customer: models.Customer) -> List[ValidationFailed]:
    errors: List[ValidationFailed] = []
    if _required(errors, "customer_id", customer.customer_id):
        if not validate_alphanumeric(customer.customer_id):
            errors.append(
                ValidationFailed("customer_id", "Customer ID must be alphanumeric.")
            )
    _required(errors, "first_name", customer.first_name)
    _required(errors, "last_name", customer.last_name)
    if not validate_email(customer.email):
        errors.append(ValidationFailed("email", "Email address is not valid."))
    if not is_null_or_empty(customer.phone) and not validate_phone(customer.phone):
        errors.append(ValidationFailed("phone", "Phone number is not valid."))
    if not validate_not_future(customer.registration_date):
        errors.append(
            ValidationFailed(
                "registration_date", "Registration date cannot be in the future."
            )
        )
    return errors


def check_supplier(supplier: models.Supplier) -> List[ValidationFailed]:
    errors: List[ValidationFailed] = []
    _required(errors, "supplier_code", supplier.supplier_code)
    _required(errors, "name", supplier.name)
    if not is_null_or_empty(supplier.email) and not validate_email(supplier.email):
        errors.append(ValidationFailed("email", "Email address is not valid."))
    if not is_null_or_empty(supplier.phone) and not validate_phone(supplier.phone):
        errors.append(ValidationFailed("phone", "Phone number is not valid."))
    return errors


def check_product(product: models.Product) -> List[ValidationFailed]:
    errors: List[ValidationFailed] = []
    _required(errors, "product_code", product.product_code)
    _required(errors, "name", product.name)
    if not validate_non_negative(product.price):
        errors.append(ValidationFailed("price", "Price cannot be negative."))
    return errors


def check_order_item(item: models.OrderItem) -> List[ValidationFailed]:
    errors: List[ValidationFailed] = []
    if item.product_id is None:
        errors.append(ValidationFailed("product_id", "Product is required."))
    if not validate_positive(item.quantity):
        errors.append(ValidationFailed("quantity", "Quantity must be at least 1."))
    if not validate_non_negative(item.unit_price):
        errors.append(ValidationFailed("unit_price", "Unit price cannot be negative."))
    return errors


def check_payment(payment: models.Payment) -> List[ValidationFailed]:
    errors: List[ValidationFailed] = []
    _required(errors, "payment_id", payment.payment_id)
    # zero is allowed, it only re-derives the invoice status
    if not validate_non_negative(payment.amount):
        errors.append(ValidationFailed("amount", "Payment amount cannot be negative."))
    if not validate_not_future(payment.payment_date):
        errors.append(
            ValidationFailed("payment_date", "Payment date cannot be in the future.")
        )
    return errors


def check_user(user: models.User) -> List[ValidationFailed]:
    errors: List[ValidationFailed] = []
    if _required(errors, "username", user.username):
        if not validate_alphanumeric(user.username):
            errors.append(
                ValidationFailed("username", "Username must be letters and digits.")
            )
    _required(errors, "full_name", user.full_name)
    if not validate_email(user.email):
        errors.append(ValidationFailed("email", "Email address is not valid."))
    return errors


def check_password(password: Optional[str]) -> List[ValidationFailed]:
    if not validate_min_length(password, MIN_PASSWORD_LENGTH):
        return [
            ValidationFailed(
                "password",
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters.",
            )
        ]
    return []


_CHECKS = {
    models.Customer: check_customer,
    models.Supplier: check_supplier,
    models.Product: check_product,
    models.OrderItem: check_order_item,
    models.Payment: check_payment,
    models.User: check_user,
}


def check_record(record) -> List[ValidationFailed]:
    check = _CHECKS.get(type(record))
    if check is None:
        raise TypeError(f"no checks for {type(record).__name__}")
    return check(record)
