"""
shop_orders.services

Service-layer package.

Responsibilities:
- Own transaction boundaries and persistence decisions.
- Hold the order facade and the payment event reconciler.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services take an explicit session and principal; nothing here reads global state.
