from inventory.api.routes import operation_router

__all__ = ["operation_router"]
