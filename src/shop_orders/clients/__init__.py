"""
shop_orders.clients

HTTP clients for talking to a running order service.
"""

# Package marker.
