"""Guest notifications"""

from tableside.notifications.email import EmailDispatcher, EmailNotConfigured
from tableside.notifications.templates import RenderedMessage, render_confirmation

__all__ = [
    "EmailDispatcher",
    "EmailNotConfigured",
    "RenderedMessage",
    "render_confirmation",
]
