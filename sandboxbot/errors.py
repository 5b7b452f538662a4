"""
Exception hierarchy for sandboxbot.
"""

from typing import Optional


class SandboxBotError(Exception):
    """Base class for all sandboxbot errors."""


class ConfigError(SandboxBotError):
    """Settings are missing or invalid."""


class MalformedTimestamp(SandboxBotError):
    """A resource carries a creation time that cannot be parsed."""

    def __init__(self, kind: str, guid: str, value: Optional[str]):
        self.kind = kind
        self.guid = guid
        self.value = value
        super().__init__(f"Malformed created_at on {kind} {guid}: {value!r}")


class CloudFoundryError(SandboxBotError):
    """A call against the platform API failed."""

    def __init__(self, description: str, status_code: Optional[int] = None, url: Optional[str] = None):
        self.description = description
        self.status_code = status_code
        self.url = url
        message = description
        if status_code is not None:
            message = f"{description} (HTTP {status_code})"
        if url:
            message = f"{message} [{url}]"
        super().__init__(message)


class UpstreamListError(CloudFoundryError):
    """Listing orgs, spaces, apps, instances or roles failed."""


class DeleteError(CloudFoundryError):
    """Deleting a space or an app failed."""


class CreateError(CloudFoundryError):
    """Re-creating a space failed."""
