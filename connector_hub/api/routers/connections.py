"""Connection test API router."""

from fastapi import APIRouter, Depends

from connector_hub.api.dependencies import get_connection_tester
from connector_hub.api.models import ConnectionTestRequest, ConnectionTestResponse
from connector_hub.services.connection_tester import ConnectionTester

router = APIRouter()


@router.post("/connections/test", tags=["Connections"], response_model=ConnectionTestResponse)
async def test_connection(
    request: ConnectionTestRequest,
    tester: ConnectionTester = Depends(get_connection_tester),
):
    """
    Check that a configured connection is reachable with its credentials.

    Issues one authenticated GET (10 second timeout) against a lightweight
    endpoint of the service and stores the outcome as the connection's
    active flag. Returns 400 without `connectionId` and 404 for unknown ids.
    """
    return await tester.test_connection(request.connection_id)
