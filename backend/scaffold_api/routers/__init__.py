"""
HTTP routing for scaffolded resources.
"""

from .resource import resource_router, controller_factory, build_resource_request, read_payload

__all__ = [
    "resource_router",
    "controller_factory",
    "build_resource_request",
    "read_payload",
]
