import support  # noqa: F401  (sets up sys.path)

import unittest
from datetime import date, timedelta
from decimal import Decimal

from db import models
from utils import validation as v
from utils.errors import ValidationFailed


class PredicateTestCase(unittest.TestCase):
    def test_null_or_empty(self):
        self.assertTrue(v.is_null_or_empty(None))
        self.assertTrue(v.is_null_or_empty("   "))
        self.assertFalse(v.is_null_or_empty(" a "))

    def test_lengths(self):
        self.assertFalse(v.validate_min_length(None, 1))
        self.assertFalse(v.validate_min_length("ab", 3))
        self.assertTrue(v.validate_min_length("abc", 3))
        self.assertTrue(v.validate_max_length(None, 2))
        self.assertTrue(v.validate_max_length("ab", 2))
        self.assertFalse(v.validate_max_length("abc", 2))

    def test_email(self):
        self.assertTrue(v.validate_email("jane.doe+shop@example.co.uk"))
        self.assertFalse(v.validate_email("jane@"))
        self.assertFalse(v.validate_email("no-at-sign"))
        self.assertFalse(v.validate_email(None))

    def test_phone(self):
        self.assertTrue(v.validate_phone("0123456789"))
        self.assertTrue(v.validate_phone("+441234567890"))
        self.assertFalse(v.validate_phone("12345"))
        self.assertFalse(v.validate_phone("+1234567890123456"))
        self.assertFalse(v.validate_phone("012-345-6789"))

    def test_alphanumeric_and_numeric(self):
        self.assertTrue(v.validate_alphanumeric("abc123"))
        self.assertFalse(v.validate_alphanumeric("abc 123"))
        self.assertTrue(v.validate_numeric("00123"))
        self.assertFalse(v.validate_numeric("12a"))
        self.assertFalse(v.validate_numeric(""))

    def test_signs(self):
        self.assertTrue(v.validate_positive(1))
        self.assertTrue(v.validate_positive(Decimal("0.01")))
        self.assertFalse(v.validate_positive(0))
        self.assertFalse(v.validate_positive(None))
        self.assertTrue(v.validate_non_negative(Decimal("0")))
        self.assertFalse(v.validate_non_negative(-1))

    def test_dates(self):
        today = date(2025, 3, 10)
        self.assertTrue(v.validate_not_future(today, today))
        self.assertFalse(v.validate_not_future(today + timedelta(days=1), today))
        self.assertTrue(v.validate_not_past(today, today))
        self.assertFalse(v.validate_not_past(today - timedelta(days=1), today))
        self.assertFalse(v.validate_not_future(None, today))

    def test_date_range_bounds(self):
        d = date(2025, 3, 10)
        self.assertTrue(v.validate_date_range(d, None, None))
        self.assertTrue(v.validate_date_range(d, d, d))
        self.assertFalse(v.validate_date_range(d, date(2025, 3, 11), None))
        self.assertFalse(v.validate_date_range(d, None, date(2025, 3, 9)))
        self.assertFalse(v.validate_date_range(None, None, None))


class RecordCheckTestCase(unittest.TestCase):
    def fields(self, errors):
        return [e.field for e in errors]

    def test_valid_customer(self):
        customer = models.Customer("C100", "Ada", "Lovelace", "ada@example.com", phone="+441234567890")
        self.assertEqual(v.check_customer(customer), [])

    def test_invalid_customer(self):
        customer = models.Customer(
            "C-100",
            "",
            "Lovelace",
            "not-an-email",
            phone="12",
            registration_date=date.today() + timedelta(days=3),
        )
        self.assertEqual(
            self.fields(v.check_customer(customer)),
            ["customer_id", "first_name", "email", "phone", "registration_date"],
        )

    def test_product_and_supplier(self):
        self.assertEqual(v.check_product(models.Product("P1", "Pen", "1.00")), [])
        self.assertEqual(
            self.fields(v.check_product(models.Product("", "Pen", "-1"))),
            ["product_code", "price"],
        )
        self.assertEqual(v.check_supplier(models.Supplier("S1", "Acme")), [])
        self.assertEqual(
            self.fields(v.check_supplier(models.Supplier("S1", "Acme", email="bad"))),
            ["email"],
        )

    def test_order_item(self):
        self.assertEqual(v.check_order_item(models.OrderItem(1, 2, "3.00")), [])
        self.assertEqual(
            self.fields(v.check_order_item(models.OrderItem(None, 0, "-1"))),
            ["product_id", "quantity", "unit_price"],
        )

    def test_payment_allows_zero(self):
        self.assertEqual(v.check_payment(models.Payment("PAY-1", "0")), [])
        errors = v.check_payment(models.Payment("", "-5"))
        self.assertEqual(self.fields(errors), ["payment_id", "amount"])
        self.assertIsInstance(errors[0], ValidationFailed)

    def test_user_and_password(self):
        user = models.User("jdoe", full_name="Jane Doe", email="jane@example.com")
        self.assertEqual(v.check_user(user), [])
        self.assertEqual(
            self.fields(v.check_user(models.User("j doe", email="x"))),
            ["username", "full_name", "email"],
        )
        self.assertEqual(v.check_password("123456"), [])
        self.assertEqual(self.fields(v.check_password("123")), ["password"])

    def test_check_record_dispatch(self):
        self.assertEqual(
            self.fields(v.check_record(models.Product("", "Pen"))), ["product_code"]
        )
        with self.assertRaises(TypeError):
            v.check_record(object())


if __name__ == "__main__":
    unittest.main()
