"""Admin dashboard endpoint.

GET /api/admin/users/dashboard - User statistics and users table contract
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from userdash.api.app import get_settings, get_users_client
from userdash.client.users_api import UsersApiClient
from userdash.config import Settings
from userdash.models.types import DashboardPayload
from userdash.pages.users import UsersAdminPage

router = APIRouter()


@router.get("/users/dashboard", response_model=DashboardPayload)
async def get_users_dashboard(
    client: UsersApiClient = Depends(get_users_client),
    settings: Settings = Depends(get_settings),
) -> DashboardPayload:
    """Run the admin users page pipeline once.

    Failed statistics are reported in their MetricView rather than
    failing the request.

    Args:
        client: Users service client (injected).
        settings: App settings (injected).

    Returns:
        DashboardPayload with the settled statistics and the table contract.
    """
    page = UsersAdminPage(client, settings)
    try:
        await page.wait_ready()
        return page.to_payload()
    finally:
        await page.unmount()
