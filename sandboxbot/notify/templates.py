"""
HTML templates for notification mails.
"""

from functools import lru_cache
from typing import Any, Mapping

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

NOTIFY_TEMPLATE = "notify.html"
PURGE_TEMPLATE = "purge.html"


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    """Jinja2 environment loading templates shipped with the package."""
    return Environment(
        loader=PackageLoader("sandboxbot.notify", "templates"),
        autoescape=select_autoescape(["html"]),
        undefined=StrictUndefined,
    )


def render_template(name: str, data: Mapping[str, Any]) -> str:
    """
    Render a packaged template to a string.

    Raises:
        jinja2.TemplateError: If the template is missing or references
            data that was not supplied
    """
    return get_environment().get_template(name).render(**data)
