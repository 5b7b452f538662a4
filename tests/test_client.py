"""
Tests for the platform API client.
"""

from unittest.mock import Mock, call

import pytest
import requests

from sandboxbot.cf.client import CloudFoundryClient
from sandboxbot.cf.models import Org, Space
from sandboxbot.cf.orgs import list_org_resources, list_sandbox_orgs
from sandboxbot.errors import CreateError, DeleteError, UpstreamListError

API = "https://api.example.com"


def _response(status_code=200, body=None, text=""):
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.reason = "Reason"
    response.url = API
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response


def _page(resources, next_url=None):
    return {"next_url": next_url, "resources": resources}


def _resource(guid, created_at="2020-01-01T00:00:00Z", **entity):
    return {"metadata": {"guid": guid, "created_at": created_at}, "entity": entity}


@pytest.fixture
def session():
    session = Mock()
    session.headers = {}
    return session


@pytest.fixture
def client(session):
    return CloudFoundryClient(API + "/", "token-123", timeout=10, session=session)


class TestClientBasics:
    """Test client construction."""

    def test_sets_auth_header(self, client, session):
        """Test that the bearer token is attached to the session."""
        assert session.headers["Authorization"] == "Bearer token-123"
        assert client.api_url == API


class TestListing:
    """Test list endpoints and pagination."""

    def test_follows_next_url(self, client, session):
        """Test that every page is fetched."""
        session.request.side_effect = [
            _response(body=_page([_resource("o1", name="sandbox-a")], "/v2/organizations?page=2")),
            _response(body=_page([_resource("o2", name="prod")])),
        ]

        orgs = client.list_orgs()

        assert orgs == [Org("o1", "sandbox-a"), Org("o2", "prod")]
        assert session.request.call_args_list == [
            call("GET", f"{API}/v2/organizations", timeout=10, params=None),
            call("GET", f"{API}/v2/organizations?page=2", timeout=10, params=None),
        ]

    def test_query_params_only_on_first_page(self, client, session):
        """Test that the filter is not repeated on pages that already carry it."""
        session.request.side_effect = [
            _response(body=_page([_resource("a1", name="web", space_guid="s1")], "/v2/apps?q=space_guid:s1&page=2")),
            _response(body=_page([_resource("a2", "2020-01-02T00:00:00Z", name="api", space_guid="s1")])),
        ]

        apps = client.list_apps_by_space("s1")

        assert [a.guid for a in apps] == ["a1", "a2"]
        assert apps[1].created_at == "2020-01-02T00:00:00Z"
        first, second = session.request.call_args_list
        assert first.kwargs["params"] == {"q": "space_guid:s1"}
        assert second.kwargs["params"] is None

    def test_service_instances(self, client, session):
        """Test mapping of service instances."""
        session.request.return_value = _response(
            body=_page([_resource("i1", "2019-05-05T10:00:00Z", name="db", space_guid="s2")])
        )

        instances = client.list_service_instances_by_query("organization_guid:o1")

        assert instances[0].guid == "i1"
        assert instances[0].space_guid == "s2"
        assert instances[0].created_at == "2019-05-05T10:00:00Z"

    def test_missing_created_at_is_kept_as_none(self, client, session):
        """Test that a missing creation time is passed through for the resolver to reject."""
        resource = {"metadata": {"guid": "a1"}, "entity": {"name": "web", "space_guid": "s1"}}
        session.request.return_value = _response(body=_page([resource]))

        assert client.list_apps_by_query("space_guid:s1")[0].created_at is None

    def test_space_roles(self, client, session):
        """Test mapping of space role assignments."""
        session.request.return_value = _response(body=_page([
            _resource("u1", username="dev@example.com", space_roles=["space_developer", "space_manager"]),
            _resource("u2", username=None, space_roles=None),
        ]))

        roles = client.list_space_roles("s1")

        assert roles[0].space_roles == ["space_developer", "space_manager"]
        assert roles[1].username == ""
        assert roles[1].space_roles == []

    def test_org_user_guids(self, client, session):
        """Test listing organization members."""
        session.request.return_value = _response(body=_page([_resource("u1"), _resource("u2")]))

        assert client.list_org_user_guids("o1") == {"u1", "u2"}

    def test_http_error(self, client, session):
        """Test that error statuses raise with the API description."""
        session.request.return_value = _response(
            404, body={"description": "Org not found", "error_code": "CF-OrganizationNotFound"}
        )

        with pytest.raises(UpstreamListError) as exc_info:
            client.list_org_spaces("o1")

        assert exc_info.value.status_code == 404
        assert "CF-OrganizationNotFound: Org not found" in str(exc_info.value)

    def test_transport_error(self, client, session):
        """Test that connection failures are wrapped."""
        session.request.side_effect = requests.exceptions.ConnectionError("down")

        with pytest.raises(UpstreamListError) as exc_info:
            client.list_orgs()

        assert isinstance(exc_info.value.__cause__, requests.exceptions.ConnectionError)

    def test_unreadable_body(self, client, session):
        """Test that a non-JSON page is a listing error."""
        session.request.return_value = _response(body=ValueError("no json"))

        with pytest.raises(UpstreamListError, match="Unreadable response body"):
            client.list_orgs()


class TestMutations:
    """Test delete and create calls."""

    def test_delete_space(self, client, session):
        """Test recursive space deletion."""
        session.request.return_value = _response(204)

        client.delete_space("s1", recursive=True)

        session.request.assert_called_once_with(
            "DELETE", f"{API}/v2/spaces/s1", timeout=10,
            params={"recursive": "true", "async": "false"},
        )

    def test_delete_space_failure(self, client, session):
        """Test that a failed space deletion raises DeleteError."""
        session.request.return_value = _response(500, body=ValueError("no json"), text="oops")

        with pytest.raises(DeleteError, match="oops"):
            client.delete_space("s1")

    def test_delete_app_failure(self, client, session):
        """Test that a failed app deletion raises DeleteError."""
        session.request.side_effect = requests.exceptions.Timeout("slow")

        with pytest.raises(DeleteError):
            client.delete_app("a1")

    def test_create_space(self, client, session):
        """Test creating a space with roles."""
        session.request.return_value = _response(
            201, body=_resource("s-new", name="dev", organization_guid="o1")
        )

        space = client.create_space("dev", "o1", ["u1"], ["u2"])

        assert space == Space("s-new", "dev", "o1")
        _, kwargs = session.request.call_args
        assert kwargs["json"] == {
            "name": "dev",
            "organization_guid": "o1",
            "developer_guids": ["u1"],
            "manager_guids": ["u2"],
        }

    def test_create_space_failure(self, client, session):
        """Test that a failed creation raises CreateError."""
        session.request.return_value = _response(400, body={"description": "name taken"})

        with pytest.raises(CreateError, match="name taken"):
            client.create_space("dev", "o1")


class TestOrgs:
    """Test organization discovery helpers."""

    def test_list_sandbox_orgs(self):
        """Test prefix filtering."""
        client = Mock()
        client.list_orgs.return_value = [Org("o1", "sandbox-a"), Org("o2", "prod"), Org("o3", "sandbox-b")]

        orgs = list_sandbox_orgs(client, "sandbox-")

        assert [o.guid for o in orgs] == ["o1", "o3"]

    def test_list_sandbox_orgs_error(self):
        """Test that listing errors propagate unchanged."""
        client = Mock()
        client.list_orgs.side_effect = UpstreamListError("down")

        with pytest.raises(UpstreamListError):
            list_sandbox_orgs(client, "sandbox-")

    def test_list_org_resources(self):
        """Test that resources are queried by organization."""
        client = Mock()
        client.list_org_spaces.return_value = ["spaces"]
        client.list_apps_by_query.return_value = ["apps"]
        client.list_service_instances_by_query.return_value = ["instances"]

        spaces, apps, instances = list_org_resources(client, Org("o1", "sandbox-a"))

        assert (spaces, apps, instances) == (["spaces"], ["apps"], ["instances"])
        client.list_apps_by_query.assert_called_once_with("organization_guid:o1")
        client.list_service_instances_by_query.assert_called_once_with("organization_guid:o1")
        client.list_org_spaces.assert_called_once_with("o1")
