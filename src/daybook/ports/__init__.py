"""Ports - interfaces/protocols for external dependencies."""

from .entry_gateway import EntryGateway, GatewayError
from .identity import AuthService, Identity

__all__ = [
    "EntryGateway",
    "GatewayError",
    "AuthService",
    "Identity",
]
