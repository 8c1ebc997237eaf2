"""SWIS REST API client for SolarWinds Orion IPAM."""

from typing import Any, Dict, List, Optional

import requests
from oslo_log import log as logging

from .configuration import get_connection_settings
from .exceptions import (
    OrionAPIConnectionError,
    OrionAPIError,
    OrionAPITimeout,
    OrionAuthenticationError,
)

LOG = logging.getLogger(__name__)

DEFAULT_PORT = 17778
SWIS_JSON_PATH = "/SolarWinds/InformationService/v3/Json"


class OrionClient:
    """REST client for the SolarWinds Information Service (SWIS).

    Exposes the two primitives the reservation engine needs: a SWQL query
    returning rows, and a partial update of an entity addressed by URI.
    Requests are issued once; failures surface as OrionTransportError
    subclasses.
    """

    def __init__(
        self,
        server: str,
        username: str,
        password: str,
        port: int = DEFAULT_PORT,
        verify_ssl: bool = True,
        timeout: int = 30,
    ):
        """Initialize SWIS API client.

        Args:
            server: Orion server host name or address (e.g., orion.example.com)
            username: Orion account name
            password: Orion account password
            port: SWIS REST port (default: 17778)
            verify_ssl: Whether to verify SSL certificates
            timeout: HTTP request timeout in seconds
        """
        host = server.rstrip("/")
        if "://" in host:
            host = host.split("://", 1)[1]

        self.base_url = f"https://{host}:{port}{SWIS_JSON_PATH}"
        self.timeout = timeout
        self.verify_ssl = verify_ssl

        self.session = requests.Session()
        self.session.auth = (username, password)
        self.session.headers.update({"Content-Type": "application/json"})

    @classmethod
    def from_settings(cls, settings) -> "OrionClient":
        """Build a client from resolved ConnectionSettings."""
        return cls(
            server=settings.server,
            username=settings.username,
            password=settings.password,
            port=settings.port,
            verify_ssl=not settings.insecure,
            timeout=settings.timeout,
        )

    def _make_request(
        self,
        method: str,
        path: str,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Make HTTP request to the SWIS API.

        Args:
            method: HTTP method
            path: Path relative to the SWIS JSON root (e.g., /Query)
            json_data: Request body as JSON

        Returns:
            Response data dictionary (empty dict for empty bodies)

        Raises:
            OrionAPIConnectionError: Connection failed
            OrionAPITimeout: Request timed out
            OrionAuthenticationError: Credentials rejected (401/403)
            OrionAPIError: API returned another error
        """
        if path.startswith("/"):
            url = self.base_url + path
        else:
            url = f"{self.base_url}/{path}"

        LOG.debug("Making %s request to %s", method, path)

        try:
            response = self.session.request(
                method=method,
                url=url,
                json=json_data,
                timeout=self.timeout,
                verify=self.verify_ssl,
            )
        except requests.exceptions.Timeout:
            LOG.error("Request timeout after %ss: %s", self.timeout, path)
            raise OrionAPITimeout(timeout=self.timeout)
        except requests.exceptions.ConnectionError as e:
            LOG.error("Connection error: %s, %s", path, e)
            raise OrionAPIConnectionError(details=str(e))
        except requests.exceptions.RequestException as e:
            LOG.error("Request exception: %s, %s", path, e)
            raise OrionAPIError(details=str(e))

        LOG.debug("Response status: %s", response.status_code)

        if response.status_code >= 400:
            # SWIS faults carry a "Message" field; fall back to the raw body
            try:
                error_data = response.json()
                error_msg = error_data.get("Message") or error_data.get("message") or response.text
            except ValueError:
                error_msg = response.text

            if response.status_code in (401, 403):
                LOG.error("Authentication failed: HTTP %s", response.status_code)
                raise OrionAuthenticationError(details=f"HTTP {response.status_code}: {error_msg}")

            LOG.error("API error: HTTP %s, %s", response.status_code, error_msg)
            raise OrionAPIError(details=f"HTTP {response.status_code}: {error_msg}")

        if not response.content:
            return {}

        try:
            data = response.json()
        except ValueError as e:
            raise OrionAPIError(details=f"Invalid JSON in response from {path}: {e}")

        # Updates answer with a bare JSON null
        return data if isinstance(data, dict) else {}

    def query(self, query: str, parameters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Run a SWQL query.

        Args:
            query: SWQL statement with @named parameters
            parameters: Values for the named parameters

        Returns:
            List of result rows

        Raises:
            OrionTransportError: Query failed
        """
        data = {"query": query, "parameters": parameters or {}}
        response = self._make_request("POST", "/Query", json_data=data)
        return response.get("results", [])

    def update(self, uri: str, fields: Dict[str, Any]) -> None:
        """Apply a partial update to the entity at ``uri``.

        Args:
            uri: SWIS entity URI (e.g., swis://orion/Orion/IPAM.IPNode/IpNodeId=42)
            fields: Properties to set

        Raises:
            OrionTransportError: Update failed
        """
        self._make_request("POST", uri, json_data=fields)
        LOG.debug("Updated %s with fields %s", uri, sorted(fields))


def build_client(conf) -> OrionClient:
    """Build a client from a loaded ConfigOpts instance.

    Raises:
        OrionConfigurationError: Connection settings are incomplete
    """
    return OrionClient.from_settings(get_connection_settings(conf))
