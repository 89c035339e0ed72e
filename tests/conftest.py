"""Pytest configuration and fixtures."""

import pytest
import os
from dotenv import load_dotenv

# Load test environment variables
load_dotenv()

# Set test environment
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "true")

from connector_hub.models.credential import Credential
from connector_hub.models.service import ServiceConfig
from connector_hub.services.ports import AuthenticatedUser


class FakeServiceRepository:
    """In-memory ServiceLookup + ServiceRepository."""

    def __init__(self, services=None, job_templates=None):
        self.services = {s.service_type: s for s in (services or [])}
        # job_template_id -> connection_type
        self.job_templates = dict(job_templates or {})
        self.rows = {}
        self.uses_app_token = {}
        self.lookups = []

    async def get_service_config(self, service_type):
        self.lookups.append(service_type)
        return self.services.get(service_type)

    async def get_connection_type(self, job_template_id):
        return self.job_templates.get(job_template_id)

    async def create_service(self, data):
        row = {"id": f"svc-{len(self.rows) + 1}", **data}
        self.rows[row["id"]] = row
        return row

    async def update_service(self, service_id, data):
        row = {**self.rows.get(service_id, {"id": service_id}), **data}
        self.rows[service_id] = row
        return row

    async def delete_service(self, service_id):
        self.rows.pop(service_id, None)

    async def set_uses_app_token(self, service_id, uses_app_token):
        self.uses_app_token[service_id] = uses_app_token


class FakeCredentialStore:
    """In-memory SecretStore + CredentialWriter that records every lookup."""

    def __init__(self):
        self.app_credentials = {}
        self.owner_credentials = {}
        self.calls = []

    def add_app(self, service_id, credential):
        self.app_credentials[service_id] = credential

    def add_owner(self, service_id, credential):
        key = (service_id, credential.owner_type, credential.owner_id)
        self.owner_credentials[key] = credential

    async def get_app_credential(self, service_id):
        self.calls.append(("app", service_id))
        return self.app_credentials.get(service_id)

    async def get_owner_credential(self, service_id, owner_type, owner_id):
        self.calls.append(("owner", service_id, owner_type, owner_id))
        return self.owner_credentials.get((service_id, owner_type, owner_id))

    async def upsert_owner_credential(self, service_id, credential):
        stored = Credential(
            secret=credential.secret,
            auth_type=credential.auth_type,
            auth_config=credential.auth_config,
            endpoint=credential.endpoint,
            owner_type=credential.owner_type,
            owner_id=credential.owner_id,
            id="tok-1",
            created_at="2024-01-01T00:00:00+00:00",
        )
        self.add_owner(service_id, stored)
        return stored

    async def delete_owner_credential(self, service_id, owner_type, owner_id):
        self.owner_credentials.pop((service_id, owner_type, owner_id), None)

    async def upsert_app_credential(self, service_id, credential):
        stored = Credential(
            secret=credential.secret,
            auth_type=credential.auth_type,
            auth_config=credential.auth_config,
            id="app-tok-1",
            created_at="2024-01-01T00:00:00+00:00",
        )
        self.add_app(service_id, stored)
        return stored

    async def delete_app_credential(self, service_id):
        self.app_credentials.pop(service_id, None)


class FakeMembershipDirectory:
    def __init__(self, team_roles=None, account_roles=None, app_admins=None):
        # (team_id, user_id) -> role
        self.team_roles = dict(team_roles or {})
        self.account_roles = dict(account_roles or {})
        self.app_admins = set(app_admins or [])

    async def get_team_role(self, team_id, user_id):
        return self.team_roles.get((team_id, user_id))

    async def get_account_role(self, account_id, user_id):
        return self.account_roles.get((account_id, user_id))

    async def is_app_admin(self, user_id):
        return user_id in self.app_admins


class FakeConnectionRepository:
    def __init__(self, connections=None, fail_updates=False):
        self.connections = dict(connections or {})
        self.active = {}
        self.fail_updates = fail_updates

    async def get_connection(self, connection_id):
        return self.connections.get(connection_id)

    async def set_connection_active(self, connection_id, is_active):
        if self.fail_updates:
            raise RuntimeError("database unavailable")
        self.active[connection_id] = is_active


class FakeIdentityProvider:
    def __init__(self, tokens=None):
        # access token -> AuthenticatedUser
        self.tokens = dict(tokens or {})

    async def get_user(self, access_token):
        return self.tokens.get(access_token)


@pytest.fixture
def user():
    return AuthenticatedUser(id="user-1", email="user@example.com")


@pytest.fixture
def freshservice():
    """FreshService configuration with one tool and one resource."""
    return ServiceConfig.model_validate({
        "id": "svc-fs",
        "service_type": "freshservice",
        "service_name": "FreshService",
        "endpoint_template": "https://acme.freshservice.com",
        "tools_config": [
            {
                "name": "get_ticket",
                "description": "Get a ticket by id",
                "method": "GET",
                "endpoint": "/api/v2/tickets/{ticketId}",
                "inputSchema": {
                    "type": "object",
                    "properties": {"ticketId": {"type": "number"}},
                    "required": ["ticketId"],
                },
            },
            {
                "name": "create_ticket",
                "method": "POST",
                "endpoint": "/api/v2/tickets",
            },
        ],
        "resources_config": [
            {
                "uriTemplate": "freshservice://tickets/",
                "endpoint": "/api/v2/tickets",
                "name": "Tickets",
            },
        ],
        "uses_app_token": False,
    })


@pytest.fixture
def service_repo(freshservice):
    return FakeServiceRepository(services=[freshservice], job_templates={"job-1": "freshservice"})


@pytest.fixture
def credential_store():
    return FakeCredentialStore()


@pytest.fixture
def memberships():
    return FakeMembershipDirectory()
