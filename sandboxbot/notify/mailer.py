"""
SMTP delivery for notification mails.
"""

import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

IMPLICIT_TLS_PORT = 465

# Plaintext login is only allowed against the local machine
LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1"}


@dataclass(frozen=True)
class SMTPOptions:
    """Connection settings for the outgoing mail server."""
    host: str
    port: int = 587
    user: str = ""
    password: str = ""
    cert: Optional[str] = None  # PEM CA bundle used to verify the server

    def __repr__(self) -> str:
        return f"SMTPOptions(host={self.host!r}, port={self.port}, user={self.user!r})"


def build_message(sender: str, subject: str, body: str, recipients: Sequence[str]) -> EmailMessage:
    """Build an HTML mail addressed to every recipient."""
    message = EmailMessage()
    message["From"] = sender
    message["To"] = ", ".join(recipients)
    message["Subject"] = subject
    message.set_content(body, subtype="html")
    return message


def _tls_context(opts: SMTPOptions) -> ssl.SSLContext:
    if opts.cert:
        return ssl.create_default_context(cadata=opts.cert)
    return ssl.create_default_context()


def send_mail(
    opts: SMTPOptions,
    sender: str,
    subject: str,
    body: str,
    recipients: List[str],
) -> None:
    """
    Send an HTML mail via SMTP.

    Does nothing when there are no recipients. Credentials are only sent when
    the server advertises AUTH, and only over TLS unless the server is local.

    Raises:
        smtplib.SMTPException: On protocol or authentication failures, or when
            the server offers no TLS for a login
        OSError: If the server cannot be reached
    """
    if not recipients:
        logger.debug(f"No recipients for '{subject}', skipping")
        return

    message = build_message(sender, subject, body, recipients)
    context = _tls_context(opts)

    if opts.port == IMPLICIT_TLS_PORT:
        smtp = smtplib.SMTP_SSL(opts.host, opts.port, context=context)
        encrypted = True
    else:
        smtp = smtplib.SMTP(opts.host, opts.port)
        encrypted = False

    with smtp:
        smtp.ehlo()
        if not encrypted and smtp.has_extn("starttls"):
            smtp.starttls(context=context)
            smtp.ehlo()
            encrypted = True

        if opts.user:
            if not smtp.has_extn("auth"):
                logger.debug(f"{opts.host} does not offer AUTH, sending without login")
            elif not encrypted and opts.host not in LOCAL_HOSTS:
                raise smtplib.SMTPException(f"STARTTLS required for authentication to {opts.host}")
            else:
                smtp.login(opts.user, opts.password)
        smtp.send_message(message)

    logger.info(f"Sent '{subject}' to {len(recipients)} recipients")
