"""HTTP surface of the ordering engine."""

from ordering.api.errors import register_error_handlers
from ordering.api.routes import account_router, agent_router, cart_router, order_router, product_router

routers = [account_router, product_router, cart_router, order_router, agent_router]

__all__ = ["register_error_handlers", "routers"]
