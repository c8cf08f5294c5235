"""
shop_orders.auth

Authentication package.

Responsibilities:
- JWT helpers and validation.
- FastAPI dependencies resolving the caller `Principal` (user or service identity).
"""

# Package marker.
