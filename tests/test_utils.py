import support  # noqa: F401  (sets up sys.path)

import unittest
from datetime import date, datetime
from decimal import Decimal

from db import models
from utils import money, pure
from utils.state import Session


class MoneyTestCase(unittest.TestCase):
    def test_to_money(self):
        self.assertEqual(money.to_money(None), Decimal("0"))
        self.assertEqual(money.to_money(9.99), Decimal("9.99"))
        self.assertEqual(money.to_money("1.10"), Decimal("1.10"))
        self.assertEqual(money.to_money(3), Decimal("3"))

    def test_rounding_is_half_up(self):
        self.assertEqual(money.round_currency(Decimal("2.345")), Decimal("2.35"))
        self.assertEqual(money.round_money(Decimal("2.3449"), 3), Decimal("2.345"))
        self.assertEqual(money.round_currency(None), Decimal("0"))

    def test_format_currency(self):
        self.assertEqual(money.format_currency(Decimal("1234.5")), "$1,234.50")
        self.assertEqual(money.format_currency(Decimal("-20"), "€"), "-€20.00")
        self.assertEqual(money.format_currency(None), "")


class PureTestCase(unittest.TestCase):
    def test_generate_markdown_table(self):
        md = pure.generate_markdown_table(["A", "B"], [[1, "x"]], ["l", "r"])
        self.assertEqual(md, "| A | B |\n| :--- | ---: |\n| 1 | x |")

    def test_markdown_table_uses_first_row_as_header(self):
        md = pure.generate_markdown_table(None, [["k", "v"], ["a", "b"]])
        self.assertEqual(md.splitlines()[0], "| k | v |")
        self.assertEqual(md.splitlines()[1], "| :---: | :---: |")

    def test_markdown_table_headers_only(self):
        md = pure.generate_markdown_table(["A"], [])
        self.assertEqual(md, "| A |\n| :---: |")
        self.assertEqual(pure.generate_markdown_table(None, []), "")

    def test_markdown_table_align_mismatch(self):
        with self.assertRaises(ValueError):
            pure.generate_markdown_table(["A", "B"], [], ["l"])

    def test_dates(self):
        self.assertEqual(pure.format_date(date(2025, 2, 3)), "2025-02-03")
        self.assertEqual(pure.format_date(None), "")
        self.assertEqual(pure.parse_date(" 2025-02-03 "), date(2025, 2, 3))
        self.assertIsNone(pure.parse_date("03/02/2025"))
        self.assertIsNone(pure.parse_date(""))
        self.assertEqual(
            pure.parse_datetime("2025-02-03T04:05:06"), datetime(2025, 2, 3, 4, 5, 6)
        )
        self.assertEqual(pure.days_between(date(2025, 1, 1), date(2025, 3, 1)), 59)
        self.assertEqual(pure.days_between(None, date(2025, 3, 1)), 0)
        self.assertEqual(pure.first_day_of_month(date(2024, 2, 17)), date(2024, 2, 1))
        self.assertEqual(pure.last_day_of_month(date(2024, 2, 17)), date(2024, 2, 29))


class SessionTestCase(unittest.TestCase):
    def test_login_logout(self):
        session = Session()
        self.assertFalse(session.is_logged_in)
        self.assertFalse(session.is_admin())

        admin = models.User("root", role=models.Role.ADMIN)
        when = datetime(2025, 5, 1, 9, 0)
        token = session.login(admin, when)
        self.assertTrue(session.is_logged_in)
        self.assertTrue(session.is_admin())
        self.assertFalse(session.is_manager())
        self.assertEqual(session.token, token)
        self.assertEqual(session.started_at, when)

        session.logout()
        self.assertFalse(session.is_logged_in)
        self.assertIsNone(session.token)

    def test_each_login_gets_a_new_token(self):
        session = Session()
        user = models.User("joe")
        first = session.login(user)
        self.assertNotEqual(session.login(user), first)


if __name__ == "__main__":
    unittest.main()
