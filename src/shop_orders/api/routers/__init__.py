"""
shop_orders.api.routers

HTTP routers: health, dev auth, orders, payment webhook.
"""

# Package marker.
