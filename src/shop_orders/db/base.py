"""
shop_orders.db.base

SQLAlchemy declarative base.

Responsibilities:
- Provide the shared DeclarativeBase that `orders` and `order_items` register on.
"""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


# --- Module Notes -----------------------------------------------------------
# Alembic's env.py and `init_db` both read `Base.metadata`; import `db.models` first.
