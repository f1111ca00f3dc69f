# runtime settings, each one overridable through an environment variable

import os

DEBUG = bool(os.getenv("DEBUG"))

DB_PATH = os.getenv("BIZMGR_DB_PATH", "data/bizmgr.sqlite")

# when unset, logs only go to the console
LOG_DIR = os.getenv("BIZMGR_LOG_DIR")

HASH_ITERATIONS = int(os.getenv("BIZMGR_HASH_ITERATIONS", "200000"))

INVOICE_TERMS_DAYS = 30
LOW_STOCK_THRESHOLD = int(os.getenv("BIZMGR_LOW_STOCK_THRESHOLD", "10"))

DEFAULT_ADMIN_USERNAME = "admin"
DEFAULT_ADMIN_PASSWORD = os.getenv("BIZMGR_ADMIN_PASSWORD", "admin123")

CURRENCY_SYMBOL = "$"
