from .nocodb_dispatch_repository import NocoDbDispatchRepository

__all__ = [
    "NocoDbDispatchRepository",
]
