"""
Notifications to the people working in sandbox spaces.
"""

from .mailer import SMTPOptions, send_mail
from .recipients import list_recipients
from .templates import NOTIFY_TEMPLATE, PURGE_TEMPLATE, render_template

__all__ = [
    "SMTPOptions",
    "send_mail",
    "list_recipients",
    "NOTIFY_TEMPLATE",
    "PURGE_TEMPLATE",
    "render_template",
]
