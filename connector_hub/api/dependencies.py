"""FastAPI dependency providers wiring services to their stores."""

from typing import Optional
from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials

from connector_hub.adapters.identity import identity_provider
from connector_hub.adapters.sql_stores import (
    SqlConnectionRepository,
    SqlCredentialStore,
    SqlMembershipDirectory,
    SqlServiceRepository,
)
from connector_hub.infra.auth import authenticate, bearer_scheme
from connector_hub.infra.config import config
from connector_hub.services.connection_tester import ConnectionTester
from connector_hub.services.gateway import McpGateway
from connector_hub.services.language_service import LanguageService
from connector_hub.services.ports import (
    AuthenticatedUser,
    ConnectionRepository,
    CredentialWriter,
    IdentityProvider,
    MembershipDirectory,
    SecretStore,
    ServiceLookup,
    ServiceRepository,
)
from connector_hub.services.service_admin import ServiceAdmin
from connector_hub.services.token_service import TokenService

_service_repository = SqlServiceRepository()
_credential_store = SqlCredentialStore()
_membership_directory = SqlMembershipDirectory()
_connection_repository = SqlConnectionRepository()


def get_identity_provider() -> IdentityProvider:
    return identity_provider


def get_service_lookup() -> ServiceLookup:
    return _service_repository


def get_service_repository() -> ServiceRepository:
    return _service_repository


def get_secret_store() -> SecretStore:
    return _credential_store


def get_credential_writer() -> CredentialWriter:
    return _credential_store


def get_membership_directory() -> MembershipDirectory:
    return _membership_directory


def get_connection_repository() -> ConnectionRepository:
    return _connection_repository


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> AuthenticatedUser:
    return await authenticate(credentials, provider)


def get_gateway(
    service_lookup: ServiceLookup = Depends(get_service_lookup),
    secret_store: SecretStore = Depends(get_secret_store),
) -> McpGateway:
    return McpGateway(service_lookup, secret_store)


def get_token_service(
    secret_store: SecretStore = Depends(get_secret_store),
    writer: CredentialWriter = Depends(get_credential_writer),
    memberships: MembershipDirectory = Depends(get_membership_directory),
) -> TokenService:
    return TokenService(secret_store, writer, memberships)


def get_service_admin(
    services: ServiceRepository = Depends(get_service_repository),
    writer: CredentialWriter = Depends(get_credential_writer),
    memberships: MembershipDirectory = Depends(get_membership_directory),
) -> ServiceAdmin:
    return ServiceAdmin(services, writer, memberships)


def get_connection_tester(
    connections: ConnectionRepository = Depends(get_connection_repository),
) -> ConnectionTester:
    return ConnectionTester(connections)


def get_language_service(request: Request) -> LanguageService:
    return LanguageService(request.app.state.languages_cache, api_key=config.GOOGLE_TRANSLATE_API_KEY)
