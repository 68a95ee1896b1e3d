"""Async client SDK for storefront frontends: event buffer and redirect flow."""

from lookbook.client.event_buffer import ClientContext, EventBuffer
from lookbook.client.redirect_flow import RedirectFlow, RedirectState
from lookbook.client.transport import DeliveryResult, EventTransport, HttpxEventTransport
from lookbook.client.user_identifier import UserIdentifier

__all__ = [
    "ClientContext",
    "DeliveryResult",
    "EventBuffer",
    "EventTransport",
    "HttpxEventTransport",
    "RedirectFlow",
    "RedirectState",
    "UserIdentifier",
]
