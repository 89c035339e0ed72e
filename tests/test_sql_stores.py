"""Unit tests for the SQL store adapters with the session mocked."""

import json
from contextlib import contextmanager
from types import SimpleNamespace

import pytest
from unittest.mock import MagicMock, patch

from connector_hub.adapters.sql_stores import (
    SqlCredentialStore,
    SqlServiceRepository,
    _column_params,
)


def mock_session(row):
    session = MagicMock()
    session.execute.return_value.fetchone.return_value = row

    @contextmanager
    def fake_db_session():
        yield session

    return session, fake_db_session


class TestSqlServiceRepository:
    @pytest.mark.asyncio
    async def test_get_service_config(self):
        row = SimpleNamespace(
            id="5b0c",
            service_type="freshservice",
            service_name="FreshService",
            description=None,
            endpoint_template="https://acme.freshservice.com",
            tools_config=[{"name": "get_ticket", "endpoint": "/api/v2/tickets/{ticketId}"}],
            resources_config=None,
            uses_app_token=True,
        )
        session, fake_db_session = mock_session(row)

        with patch("connector_hub.adapters.sql_stores.get_db_session", fake_db_session):
            service = await SqlServiceRepository().get_service_config("freshservice")

        assert service.id == "5b0c"
        assert service.find_tool("get_ticket").path == "/api/v2/tickets/{ticketId}"
        assert service.resources_config == []
        assert service.uses_app_token is True
        assert session.execute.call_args[0][1] == {"service_type": "freshservice"}

    @pytest.mark.asyncio
    async def test_unknown_service(self):
        _, fake_db_session = mock_session(None)

        with patch("connector_hub.adapters.sql_stores.get_db_session", fake_db_session):
            assert await SqlServiceRepository().get_service_config("nope") is None

    def test_column_params_whitelists_and_encodes_json(self):
        params = _column_params({
            "service_name": "Jira",
            "tools_config": [{"name": "search"}],
            "id": "injected",
        })

        assert params == {"service_name": "Jira", "tools_config": json.dumps([{"name": "search"}])}


class TestSqlCredentialStore:
    @pytest.mark.asyncio
    async def test_get_owner_credential(self):
        row = SimpleNamespace(
            id="tok-1",
            encrypted_token="env://JIRA_KEY",
            auth_type="api_key",
            auth_config=None,
            endpoint="https://other.atlassian.net",
            created_at=None,
        )
        _, fake_db_session = mock_session(row)

        with patch("connector_hub.adapters.sql_stores.get_db_session", fake_db_session):
            credential = await SqlCredentialStore().get_owner_credential("svc", "team", "team-1")

        assert credential.secret == "env://JIRA_KEY"
        assert credential.auth_config == {}
        assert credential.owner_type == "team"
        assert credential.endpoint == "https://other.atlassian.net"
