"""Adapter registry sync client."""

import logging
from typing import Any, Dict

import requests

from .. import __version__
from ..errors import RegistrySyncError

logger = logging.getLogger(__name__)


class RegistryClient:
    """POSTs adapter metadata to the registry sync endpoint."""

    def __init__(self, endpoint: str, token: str, timeout: int = 30):
        self.endpoint = endpoint
        self.token = token
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
            "User-Agent": f"adapter-deploy/{__version__}",
        }

    def sync(self, payload: Dict[str, Any]) -> None:
        """Send one adapter version to the registry.

        Raises:
            RegistrySyncError: On transport failure or a non-2xx response
        """
        adapter_ref = f"{payload.get('id')}@{payload.get('version')}"
        logger.info("Syncing %s to registry", adapter_ref)

        try:
            response = requests.post(
                self.endpoint, headers=self._headers(), json=payload, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise RegistrySyncError(f"Registry sync for {adapter_ref} failed: {e}") from e

        if not 200 <= response.status_code < 300:
            body = (response.text or "").strip()[:500]
            raise RegistrySyncError(
                f"Registry sync for {adapter_ref} returned HTTP "
                f"{response.status_code}: {body or response.reason}",
                status_code=response.status_code,
            )

        logger.info("Registry accepted %s (HTTP %s)", adapter_ref, response.status_code)
