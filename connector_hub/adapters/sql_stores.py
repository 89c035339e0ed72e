"""SQLAlchemy-backed implementations of the storage ports."""

import json
from typing import Any, Dict, Optional

from sqlalchemy import text

from connector_hub.infra.database import get_db_session
from connector_hub.infra.errors import RecordNotFound
from connector_hub.models.credential import Credential
from connector_hub.models.service import ServiceConfig

# Columns an administrator may set on mcp_services
SERVICE_COLUMNS = (
    "service_name",
    "service_type",
    "description",
    "uses_app_token",
    "endpoint_template",
    "rate_limit_per_minute",
    "retry_delay_sec",
    "max_retries",
    "call_delay_ms",
    "tools_config",
    "resources_config",
)
JSON_COLUMNS = ("tools_config", "resources_config")

SERVICE_SELECT = """
    SELECT id, service_name, service_type, description, uses_app_token, endpoint_template,
           rate_limit_per_minute, retry_delay_sec, max_retries, call_delay_ms,
           tools_config, resources_config, created_at, updated_at
    FROM mcp_services
"""


def _isoformat(value: Any) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _service_row_to_dict(row) -> Dict[str, Any]:
    return {
        "id": str(row.id),
        "service_name": row.service_name,
        "service_type": row.service_type,
        "description": row.description,
        "uses_app_token": row.uses_app_token,
        "endpoint_template": row.endpoint_template,
        "rate_limit_per_minute": row.rate_limit_per_minute,
        "retry_delay_sec": row.retry_delay_sec,
        "max_retries": row.max_retries,
        "call_delay_ms": row.call_delay_ms,
        "tools_config": row.tools_config or [],
        "resources_config": row.resources_config or [],
        "created_at": _isoformat(row.created_at),
        "updated_at": _isoformat(row.updated_at),
    }


def _column_params(data: Dict[str, Any]) -> Dict[str, Any]:
    params = {}
    for column in SERVICE_COLUMNS:
        if column in data:
            value = data[column]
            params[column] = json.dumps(value) if column in JSON_COLUMNS else value
    return params


def _column_value(column: str) -> str:
    return f"CAST(:{column} AS jsonb)" if column in JSON_COLUMNS else f":{column}"


class SqlServiceRepository:
    """ServiceLookup and ServiceRepository over mcp_services, connections and job_templates."""

    async def get_service_config(self, service_type: str) -> Optional[ServiceConfig]:
        with get_db_session() as session:
            row = session.execute(
                text(SERVICE_SELECT + " WHERE service_type = :service_type"),
                {"service_type": service_type}
            ).fetchone()

            if not row:
                return None

            return ServiceConfig(
                id=str(row.id),
                service_type=row.service_type,
                service_name=row.service_name,
                description=row.description,
                endpoint_template=row.endpoint_template or "",
                tools_config=row.tools_config or [],
                resources_config=row.resources_config or [],
                uses_app_token=bool(row.uses_app_token),
            )

    async def get_connection_type(self, job_template_id: str) -> Optional[str]:
        with get_db_session() as session:
            row = session.execute(
                text("""
                    SELECT c.connection_type
                    FROM job_templates jt
                    JOIN connections c ON c.id = jt.job_connection
                    WHERE jt.id = :job_template_id
                """),
                {"job_template_id": job_template_id}
            ).fetchone()

            return row.connection_type if row else None

    async def create_service(self, data: Dict[str, Any]) -> Dict[str, Any]:
        params = _column_params(data)
        columns = list(params)
        with get_db_session() as session:
            row = session.execute(
                text(f"""
                    INSERT INTO mcp_services ({", ".join(columns)})
                    VALUES ({", ".join(_column_value(c) for c in columns)})
                    RETURNING *
                """),
                params
            ).fetchone()
            return _service_row_to_dict(row)

    async def update_service(self, service_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        params = _column_params(data)
        assignments = [f"{column} = {_column_value(column)}" for column in params]
        assignments.append("updated_at = now()")
        params["id"] = service_id
        with get_db_session() as session:
            row = session.execute(
                text(f"""
                    UPDATE mcp_services SET {", ".join(assignments)}
                    WHERE id = :id
                    RETURNING *
                """),
                params
            ).fetchone()

            if not row:
                raise RecordNotFound(f"MCP service {service_id} not found")
            return _service_row_to_dict(row)

    async def delete_service(self, service_id: str) -> None:
        with get_db_session() as session:
            session.execute(text("DELETE FROM mcp_services WHERE id = :id"), {"id": service_id})

    async def set_uses_app_token(self, service_id: str, uses_app_token: bool) -> None:
        with get_db_session() as session:
            session.execute(
                text("""
                    UPDATE mcp_services SET uses_app_token = :uses_app_token, updated_at = now()
                    WHERE id = :id
                """),
                {"id": service_id, "uses_app_token": uses_app_token}
            )


class SqlCredentialStore:
    """SecretStore and CredentialWriter over mcp_service_tokens and connection_tokens."""

    async def get_app_credential(self, service_id: str) -> Optional[Credential]:
        with get_db_session() as session:
            row = session.execute(
                text("""
                    SELECT id, encrypted_token, auth_type, auth_config, created_at
                    FROM mcp_service_tokens
                    WHERE service_id = :service_id
                """),
                {"service_id": service_id}
            ).fetchone()

            if not row:
                return None

            return Credential(
                id=str(row.id),
                secret=row.encrypted_token,
                auth_type=row.auth_type,
                auth_config=row.auth_config or {},
                created_at=_isoformat(row.created_at),
            )

    async def get_owner_credential(self, service_id: str, owner_type: str, owner_id: str) -> Optional[Credential]:
        with get_db_session() as session:
            row = session.execute(
                text("""
                    SELECT id, encrypted_token, auth_type, auth_config, endpoint, created_at
                    FROM connection_tokens
                    WHERE service_id = :service_id
                      AND owner_type = :owner_type
                      AND owner_id = :owner_id
                """),
                {"service_id": service_id, "owner_type": owner_type, "owner_id": owner_id}
            ).fetchone()

            if not row:
                return None

            return Credential(
                id=str(row.id),
                secret=row.encrypted_token,
                auth_type=row.auth_type,
                auth_config=row.auth_config or {},
                endpoint=row.endpoint,
                owner_type=owner_type,
                owner_id=owner_id,
                created_at=_isoformat(row.created_at),
            )

    async def upsert_owner_credential(self, service_id: str, credential: Credential) -> Credential:
        with get_db_session() as session:
            row = session.execute(
                text("""
                    INSERT INTO connection_tokens (
                        service_id, owner_type, owner_id, encrypted_token, auth_type, auth_config, endpoint
                    ) VALUES (
                        :service_id, :owner_type, :owner_id, :encrypted_token, :auth_type,
                        CAST(:auth_config AS jsonb), :endpoint
                    )
                    ON CONFLICT (service_id, owner_type, owner_id) DO UPDATE SET
                        encrypted_token = EXCLUDED.encrypted_token,
                        auth_type = EXCLUDED.auth_type,
                        auth_config = EXCLUDED.auth_config,
                        endpoint = EXCLUDED.endpoint,
                        updated_at = now()
                    RETURNING id, created_at
                """),
                {
                    "service_id": service_id,
                    "owner_type": credential.owner_type,
                    "owner_id": credential.owner_id,
                    "encrypted_token": credential.secret,
                    "auth_type": credential.auth_type,
                    "auth_config": json.dumps(credential.auth_config or {}),
                    "endpoint": credential.endpoint,
                }
            ).fetchone()

            return Credential(
                id=str(row.id),
                secret=credential.secret,
                auth_type=credential.auth_type,
                auth_config=credential.auth_config,
                endpoint=credential.endpoint,
                owner_type=credential.owner_type,
                owner_id=credential.owner_id,
                created_at=_isoformat(row.created_at),
            )

    async def delete_owner_credential(self, service_id: str, owner_type: str, owner_id: str) -> None:
        with get_db_session() as session:
            session.execute(
                text("""
                    DELETE FROM connection_tokens
                    WHERE service_id = :service_id
                      AND owner_type = :owner_type
                      AND owner_id = :owner_id
                """),
                {"service_id": service_id, "owner_type": owner_type, "owner_id": owner_id}
            )

    async def upsert_app_credential(self, service_id: str, credential: Credential) -> Credential:
        with get_db_session() as session:
            row = session.execute(
                text("""
                    INSERT INTO mcp_service_tokens (service_id, encrypted_token, auth_type, auth_config)
                    VALUES (:service_id, :encrypted_token, :auth_type, CAST(:auth_config AS jsonb))
                    ON CONFLICT (service_id) DO UPDATE SET
                        encrypted_token = EXCLUDED.encrypted_token,
                        auth_type = EXCLUDED.auth_type,
                        auth_config = EXCLUDED.auth_config,
                        updated_at = now()
                    RETURNING id, created_at
                """),
                {
                    "service_id": service_id,
                    "encrypted_token": credential.secret,
                    "auth_type": credential.auth_type,
                    "auth_config": json.dumps(credential.auth_config or {}),
                }
            ).fetchone()

            return Credential(
                id=str(row.id),
                secret=credential.secret,
                auth_type=credential.auth_type,
                auth_config=credential.auth_config,
                created_at=_isoformat(row.created_at),
            )

    async def delete_app_credential(self, service_id: str) -> None:
        with get_db_session() as session:
            session.execute(
                text("DELETE FROM mcp_service_tokens WHERE service_id = :service_id"),
                {"service_id": service_id}
            )


class SqlMembershipDirectory:
    """MembershipDirectory over team_members, account_members and user_roles."""

    async def get_team_role(self, team_id: str, user_id: str) -> Optional[str]:
        with get_db_session() as session:
            row = session.execute(
                text("SELECT role FROM team_members WHERE team_id = :team_id AND user_id = :user_id"),
                {"team_id": team_id, "user_id": user_id}
            ).fetchone()
            return row.role if row else None

    async def get_account_role(self, account_id: str, user_id: str) -> Optional[str]:
        with get_db_session() as session:
            row = session.execute(
                text("SELECT role FROM account_members WHERE account_id = :account_id AND user_id = :user_id"),
                {"account_id": account_id, "user_id": user_id}
            ).fetchone()
            return row.role if row else None

    async def is_app_admin(self, user_id: str) -> bool:
        with get_db_session() as session:
            row = session.execute(
                text("SELECT 1 FROM user_roles WHERE user_id = :user_id AND role = 'app_admin'"),
                {"user_id": user_id}
            ).fetchone()
            return row is not None


class SqlConnectionRepository:
    """ConnectionRepository over the connections table."""

    async def get_connection(self, connection_id: str) -> Optional[Dict[str, Any]]:
        with get_db_session() as session:
            row = session.execute(
                text("""
                    SELECT id, name, connection_type, endpoint, auth_type, auth_config, is_active
                    FROM connections
                    WHERE id = :id
                """),
                {"id": connection_id}
            ).fetchone()

            if not row:
                return None

            return {
                "id": str(row.id),
                "name": row.name,
                "connection_type": row.connection_type,
                "endpoint": row.endpoint,
                "auth_type": row.auth_type,
                "auth_config": row.auth_config or {},
                "is_active": row.is_active,
            }

    async def set_connection_active(self, connection_id: str, is_active: bool) -> None:
        with get_db_session() as session:
            session.execute(
                text("UPDATE connections SET is_active = :is_active, updated_at = now() WHERE id = :id"),
                {"id": connection_id, "is_active": is_active}
            )
