"""site-records: JSON file record stores and the admin API built on them."""

__version__ = "0.1.0"
