"""Chooses the credential used for one MCP call."""

import logging
from typing import List, Optional, Tuple

from connector_hub.infra.metrics import credential_resolutions_total
from connector_hub.infra.secrets import get_secret
from connector_hub.models.credential import (
    Credential,
    CredentialMissing,
    OwnerType,
    ResolutionResult,
    ResolvedAuth,
)
from connector_hub.models.service import ServiceConfig
from connector_hub.services.ports import SecretStore

logger = logging.getLogger(__name__)

TOKEN_MISSING_MESSAGE = (
    "No authentication token configured for this service. Please add your API key in settings."
)


class CredentialResolver:
    """
    Resolves the credential for a service call.

    Precedence is fixed: the app-wide credential of the service, then the
    explicitly requested (owner_type, owner_id) credential, then the calling
    user's personal credential.
    """

    def __init__(self, secret_store: SecretStore):
        self.secret_store = secret_store

    async def resolve(
        self,
        service: ServiceConfig,
        calling_user_id: str,
        owner_type: Optional[str] = None,
        owner_id: Optional[str] = None,
    ) -> ResolutionResult:
        """
        Resolve the credential for ``service``.

        Args:
            service: Service configuration being called
            calling_user_id: Authenticated user making the call
            owner_type: Optional explicit owner scope ('user' | 'team' | 'account')
            owner_id: Optional explicit owner id, used together with owner_type

        Returns:
            ResolvedAuth when a credential applies, otherwise CredentialMissing
        """
        app_credential = await self.secret_store.get_app_credential(service.id)
        if app_credential:
            credential_resolutions_total.labels(source="app").inc()
            logger.debug("Using app credential", extra={"service_type": service.service_type})
            return self._to_resolved(service, app_credential, use_override=False)

        for candidate_type, candidate_id in self.candidates(calling_user_id, owner_type, owner_id):
            credential = await self.secret_store.get_owner_credential(service.id, candidate_type, candidate_id)
            if credential:
                credential_resolutions_total.labels(source="owner").inc()
                logger.debug(
                    "Using owner credential",
                    extra={"service_type": service.service_type, "owner_type": candidate_type},
                )
                return self._to_resolved(service, credential, use_override=True)

        credential_resolutions_total.labels(source="missing").inc()
        logger.info("No credential configured", extra={"service_type": service.service_type})
        return CredentialMissing(message=TOKEN_MISSING_MESSAGE, uses_app_token=service.uses_app_token)

    @staticmethod
    def candidates(
        calling_user_id: str,
        owner_type: Optional[str] = None,
        owner_id: Optional[str] = None,
    ) -> List[Tuple[str, str]]:
        """Owner scopes to try, in order. The calling user is always the last resort."""
        queries = []
        if owner_type and owner_id:
            queries.append((owner_type, owner_id))
        queries.append((OwnerType.USER.value, calling_user_id))
        return queries

    @staticmethod
    def _to_resolved(service: ServiceConfig, credential: Credential, use_override: bool) -> ResolvedAuth:
        endpoint = credential.endpoint if use_override and credential.endpoint else service.endpoint_template
        return ResolvedAuth(
            secret=_credential_secret(credential),
            auth_type=credential.auth_type,
            auth_config=dict(credential.auth_config or {}),
            endpoint=endpoint,
        )


def _credential_secret(credential: Credential) -> str:
    # Only app credentials, written by app admins, may reference server secrets
    if credential.is_app_credential:
        return get_secret(credential.secret) or ""
    return credential.secret or ""
