"""
Creator Campaign Service Clients

Clients for calling other microservices.
"""

from .messaging_client import MessagingClient

__all__ = [
    "MessagingClient",
]
