"""
Pass Coordinator for design changes.

Issued wallet passes are owned by the external pass service. When the
active design changes, the coordinator asks that service to regenerate and
push updates so existing card holders see the new design without
re-issuing a card. Failures are logged and reported in the result, never
raised: a design change is committed before fan-out starts.
"""

import logging
from typing import Optional

import httpx

from cardstudio.core.config import settings
from cardstudio.domain.schemas import CardDesign

logger = logging.getLogger(__name__)

# Changing any of these alters the stamp strip on issued passes
STRIP_AFFECTING_FIELDS = frozenset({
    "background_color",
    "stamp_filled_color",
    "stamp_empty_color",
    "stamp_border_color",
    "total_stamps",
    "stamp_icon",
    "reward_icon",
    "icon_color",
})


def affects_strips(changes: dict, existing: CardDesign) -> bool:
    """True if a patch changes the value of a strip-affecting field."""
    current = existing.content()
    return any(
        field in changes and changes[field] != current.get(field)
        for field in STRIP_AFFECTING_FIELDS
    )


class PassCoordinator:
    """Notifies the pass service about design activation and updates."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url if base_url is not None else settings.pass_service_url).rstrip("/")
        self.token = token if token is not None else settings.pass_service_token
        self.timeout = timeout if timeout is not None else settings.pass_service_timeout
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _post(self, path: str, payload: dict) -> dict:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            response = await client.post(path, json=payload, headers=self._headers())
            response.raise_for_status()
            return response.json() if response.content else {}

    async def on_design_activated(self, business_id: str, design: CardDesign) -> dict:
        """
        Handle design activation - refresh every issued pass.

        Args:
            business_id: The business whose customers hold the passes
            design: The newly active design

        Returns:
            Dict with the refresh outcome
        """
        return await self._refresh(business_id, design, reason="activated", regenerate_strips=True)

    async def on_design_updated(
        self,
        business_id: str,
        design: CardDesign,
        regenerate_strips: bool = True,
    ) -> dict:
        """Handle an update to the active design."""
        return await self._refresh(
            business_id, design, reason="updated", regenerate_strips=regenerate_strips
        )

    async def _refresh(
        self,
        business_id: str,
        design: CardDesign,
        reason: str,
        regenerate_strips: bool,
    ) -> dict:
        results = {"design_id": design.id, "reason": reason, "notified": False}

        if not self.enabled:
            logger.info(
                f"[PassCoordinator] Pass service not configured, skipping refresh for design {design.id}"
            )
            return results

        payload = {
            "reason": reason,
            "regenerate_strips": regenerate_strips,
            "design": design.model_dump(mode="json"),
        }
        try:
            results["response"] = await self._post(
                f"/businesses/{business_id}/designs/{design.id}/refresh", payload
            )
            results["notified"] = True
            logger.info(f"[PassCoordinator] Refresh requested for design {design.id} ({reason})")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[PassCoordinator] Pass refresh error for design {design.id}: {e}")
            results["error"] = str(e)

        return results


def create_pass_coordinator() -> PassCoordinator:
    """Factory function to create PassCoordinator."""
    return PassCoordinator()
