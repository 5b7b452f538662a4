"""
Minimal Cloud Foundry v2 API client.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Set, Type

import requests

from ..errors import CloudFoundryError, CreateError, DeleteError, UpstreamListError
from .models import App, Org, ServiceInstance, Space, SpaceRole

logger = logging.getLogger(__name__)


class CloudFoundryClient:
    """Talks to the platform API with a pre-issued bearer token."""

    def __init__(self, api_url: str, token: str, timeout: int = 30, session: Optional[requests.Session] = None):
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        })

    # Organizations

    def list_orgs(self) -> List[Org]:
        """List every organization visible to the token."""
        return [
            Org(guid=r["metadata"]["guid"], name=r["entity"]["name"])
            for r in self._list("/v2/organizations")
        ]

    def list_org_spaces(self, org_guid: str) -> List[Space]:
        """List the spaces of one organization."""
        return [
            self._space(r)
            for r in self._list(f"/v2/organizations/{org_guid}/spaces")
        ]

    def list_org_user_guids(self, org_guid: str) -> Set[str]:
        """Return the ids of all users that are members of an organization."""
        return {
            r["metadata"]["guid"]
            for r in self._list(f"/v2/organizations/{org_guid}/users")
        }

    # Apps and service instances

    def list_apps_by_query(self, query: str) -> List[App]:
        """
        List applications matching a v2 filter such as ``space_guid:<guid>``.

        Args:
            query: Filter passed as the ``q`` parameter

        Returns:
            List of applications
        """
        return [
            App(
                guid=r["metadata"]["guid"],
                name=r["entity"].get("name", ""),
                space_guid=r["entity"]["space_guid"],
                created_at=r["metadata"].get("created_at"),
            )
            for r in self._list("/v2/apps", params={"q": query})
        ]

    def list_apps_by_space(self, space_guid: str) -> List[App]:
        """List the applications inside one space."""
        return self.list_apps_by_query(f"space_guid:{space_guid}")

    def list_service_instances_by_query(self, query: str) -> List[ServiceInstance]:
        """List service instances matching a v2 filter."""
        return [
            ServiceInstance(
                guid=r["metadata"]["guid"],
                name=r["entity"].get("name", ""),
                space_guid=r["entity"]["space_guid"],
                created_at=r["metadata"].get("created_at"),
            )
            for r in self._list("/v2/service_instances", params={"q": query})
        ]

    # Space roles

    def list_space_roles(self, space_guid: str) -> List[SpaceRole]:
        """List users holding a role in a space, with their role names."""
        return [
            SpaceRole(
                guid=r["metadata"]["guid"],
                username=r["entity"].get("username") or "",
                space_roles=list(r["entity"].get("space_roles") or []),
            )
            for r in self._list(f"/v2/spaces/{space_guid}/user_roles")
        ]

    # Mutations

    def delete_space(self, space_guid: str, recursive: bool = True) -> None:
        """Delete a space, and everything in it when ``recursive`` is set."""
        params = {"recursive": str(recursive).lower(), "async": "false"}
        self._request("DELETE", f"/v2/spaces/{space_guid}", DeleteError, params=params)

    def delete_app(self, app_guid: str) -> None:
        """Delete one application."""
        self._request("DELETE", f"/v2/apps/{app_guid}", DeleteError)

    def create_space(
        self,
        name: str,
        org_guid: str,
        developer_guids: Iterable[str] = (),
        manager_guids: Iterable[str] = (),
    ) -> Space:
        """
        Create a space and grant it developers and managers.

        Args:
            name: Space name
            org_guid: Owning organization
            developer_guids: Users to add as space developers
            manager_guids: Users to add as space managers

        Returns:
            The created space
        """
        body = {
            "name": name,
            "organization_guid": org_guid,
            "developer_guids": list(developer_guids),
            "manager_guids": list(manager_guids),
        }
        response = self._request("POST", "/v2/spaces", CreateError, json=body)
        return self._space(self._json(response, CreateError))

    # Plumbing

    def _list(self, path: str, params: Optional[Dict[str, str]] = None) -> List[Dict[str, Any]]:
        """Fetch every page of a v2 list endpoint."""
        resources: List[Dict[str, Any]] = []
        next_path: Optional[str] = path

        while next_path:
            response = self._request("GET", next_path, UpstreamListError, params=params)
            page = self._json(response, UpstreamListError)
            resources.extend(page.get("resources", []))
            next_path = page.get("next_url")
            # next_url already carries the query string
            params = None

        logger.debug(f"Listed {len(resources)} resources from {path}")
        return resources

    def _request(
        self,
        method: str,
        path: str,
        error_cls: Type[CloudFoundryError],
        **kwargs: Any,
    ) -> requests.Response:
        url = f"{self.api_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise error_cls(f"{method} request failed: {e}", url=url) from e

        if response.status_code >= 400:
            raise error_cls(_error_description(response), status_code=response.status_code, url=url)
        return response

    @staticmethod
    def _json(response: requests.Response, error_cls: Type[CloudFoundryError]) -> Dict[str, Any]:
        try:
            return response.json()
        except ValueError as e:
            raise error_cls(f"Unreadable response body: {e}", status_code=response.status_code, url=response.url) from e

    @staticmethod
    def _space(resource: Dict[str, Any]) -> Space:
        return Space(
            guid=resource["metadata"]["guid"],
            name=resource["entity"]["name"],
            org_guid=resource["entity"]["organization_guid"],
        )


def _error_description(response: requests.Response) -> str:
    """Pull the human readable message out of a v2 error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason or "Unknown error"

    if isinstance(body, dict):
        description = body.get("description")
        error_code = body.get("error_code")
        if description and error_code:
            return f"{error_code}: {description}"
        if description:
            return description
    return response.text or "Unknown error"
