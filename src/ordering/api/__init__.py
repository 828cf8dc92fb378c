from ordering.api.routes import order_router

__all__ = ["order_router"]
