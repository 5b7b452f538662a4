"""
Sweep sandbox organizations: warn owners of aging spaces and reset expired ones.
"""

import logging
import smtplib
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from jinja2 import TemplateError

from .cf.client import CloudFoundryClient
from .cf.models import Org
from .cf.orgs import list_org_resources, list_sandbox_orgs
from .cleanup.lifecycle import list_purge_spaces
from .cleanup.models import SpaceDetails
from .cleanup.purge import purge_space
from .config import Settings
from .errors import SandboxBotError
from .notify.mailer import send_mail
from .notify.recipients import list_recipients
from .notify.templates import NOTIFY_TEMPLATE, PURGE_TEMPLATE, render_template

logger = logging.getLogger(__name__)

# Failures that are recorded against one org or space without stopping the sweep
RECORDED_ERRORS = (SandboxBotError, smtplib.SMTPException, OSError, TemplateError)


@dataclass
class OrgReport:
    """What happened to one organization during a sweep."""
    org: Org
    to_notify: List[SpaceDetails] = field(default_factory=list)
    to_purge: List[SpaceDetails] = field(default_factory=list)
    notified: List[str] = field(default_factory=list)
    purged: List[str] = field(default_factory=list)
    recreated: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "org": {"guid": self.org.guid, "name": self.org.name},
            "to_notify": [_details_dict(d) for d in self.to_notify],
            "to_purge": [_details_dict(d) for d in self.to_purge],
            "notified": self.notified,
            "purged": self.purged,
            "recreated": self.recreated,
            "errors": self.errors,
        }


@dataclass
class SweepReport:
    """Outcome of one sweep across all sandbox organizations."""
    now: datetime
    dry_run: bool = False
    orgs: List[OrgReport] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return any(org.errors for org in self.orgs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "now": self.now.isoformat(),
            "dry_run": self.dry_run,
            "failed": self.failed,
            "orgs": [org.to_dict() for org in self.orgs],
        }


def _details_dict(details: SpaceDetails) -> Dict[str, str]:
    return {
        "guid": details.space.guid,
        "name": details.space.name,
        "timestamp": details.timestamp.isoformat(),
    }


class SandboxSweeper:
    """Runs the notify and purge policy over every sandbox organization."""

    def __init__(
        self,
        client: CloudFoundryClient,
        settings: Settings,
        mailer: Callable[..., None] = send_mail,
        renderer: Callable[[str, Dict[str, Any]], str] = render_template,
    ):
        self.client = client
        self.settings = settings
        self.mailer = mailer
        self.renderer = renderer

    def classify_org(self, org: Org, now: datetime) -> Tuple[List[SpaceDetails], List[SpaceDetails]]:
        """
        Classify the spaces of one organization.

        Returns:
            Tuple of (to_notify, to_purge)
        """
        spaces, apps, instances = list_org_resources(self.client, org)
        return list_purge_spaces(
            spaces,
            apps,
            instances,
            now,
            self.settings.notify_days,
            self.settings.purge_days,
            self.settings.time_starts_at,
        )

    def run(self, now: Optional[datetime] = None, dry_run: bool = False) -> SweepReport:
        """
        Run a sweep.

        Listing the sandbox organizations is the only failure that aborts the
        whole sweep. Anything failing inside an organization is logged and
        recorded in the report, and the sweep moves on.

        Args:
            now: Reference time, defaults to the current UTC time
            dry_run: Classify only; send no mail and delete nothing

        Returns:
            Sweep report
        """
        now = now or datetime.now(timezone.utc)
        report = SweepReport(now=now, dry_run=dry_run)

        for org in list_sandbox_orgs(self.client, self.settings.org_prefix):
            org_report = OrgReport(org=org)
            report.orgs.append(org_report)

            try:
                org_report.to_notify, org_report.to_purge = self.classify_org(org, now)
            except RECORDED_ERRORS as e:
                logger.error(f"Failed to classify spaces of org {org.name}: {e}")
                org_report.errors.append(f"classify: {e}")
                continue

            logger.info(
                f"Org {org.name}: {len(org_report.to_notify)} spaces to notify, "
                f"{len(org_report.to_purge)} spaces to purge"
            )
            if dry_run or not (org_report.to_notify or org_report.to_purge):
                continue

            try:
                user_guids = self.client.list_org_user_guids(org.guid)
            except RECORDED_ERRORS as e:
                logger.error(f"Failed to list users of org {org.name}: {e}")
                org_report.errors.append(f"users: {e}")
                continue

            for details in org_report.to_notify:
                try:
                    self.notify_space(org, details, user_guids)
                    org_report.notified.append(details.space.guid)
                except RECORDED_ERRORS as e:
                    logger.error(f"Failed to notify space {details.space.name}: {e}")
                    org_report.errors.append(f"notify {details.space.guid}: {e}")

            for details in org_report.to_purge:
                try:
                    self.purge(org, details, user_guids, org_report)
                except RECORDED_ERRORS as e:
                    logger.error(f"Failed to purge space {details.space.name}: {e}")
                    org_report.errors.append(f"purge {details.space.guid}: {e}")

        return report

    def notify_space(self, org: Org, details: SpaceDetails, user_guids: Set[str]) -> None:
        """Warn the users of a space that it will be purged."""
        space = details.space
        addresses, _, _ = list_recipients(user_guids, self.client.list_space_roles(space.guid))

        body = self.renderer(NOTIFY_TEMPLATE, {
            "org": org,
            "space": space,
            "date": details.timestamp,
            "purge_days": self.settings.purge_days,
            "purge_date": details.timestamp + timedelta(days=self.settings.purge_days),
        })
        self.mailer(
            self.settings.smtp_options,
            self.settings.smtp_from,
            f'Your sandbox space "{space.name}" will be deleted soon',
            body,
            addresses,
        )
        logger.info(f"Notified {len(addresses)} users of space {space.name} in org {org.name}")

    def purge(self, org: Org, details: SpaceDetails, user_guids: Set[str], org_report: OrgReport) -> None:
        """
        Purge a space, re-create it with its developers and managers, and tell its users.

        Roles are read before the purge since deleting the space drops them.
        """
        space = details.space
        addresses, developers, managers = list_recipients(user_guids, self.client.list_space_roles(space.guid))

        purge_space(self.client, space)
        org_report.purged.append(space.guid)

        if self.settings.recreate_spaces:
            recreated = self.client.create_space(space.name, org.guid, developers, managers)
            org_report.recreated.append(recreated.guid)
            logger.info(
                f"Re-created space {space.name} as {recreated.guid} with "
                f"{len(developers)} developers and {len(managers)} managers"
            )

        body = self.renderer(PURGE_TEMPLATE, {
            "org": org,
            "space": space,
            "date": details.timestamp,
            "purge_days": self.settings.purge_days,
        })
        self.mailer(
            self.settings.smtp_options,
            self.settings.smtp_from,
            f'Your sandbox space "{space.name}" has been reset',
            body,
            addresses,
        )
