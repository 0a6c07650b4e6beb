"""
Workbook API Client
===================

Async entity source talking to a live Workbook CRM instance.

Workbook exposes every operation as /api/json/reply/<RequestName>. Read
requests are sent as POST with an X-HTTP-METHOD-OVERRIDE: GET header and a
JSON body; batch requests (names ending in "[]") take a list of parameter
objects and return a list.

Endpoints Used:
- ResourceRequest[]            single resource by id ([{"Id": id}])
- ContactsForResourceRequest   contacts of a resource (plain GET with query)
- ResourcesRequest             all resources (company directory)

Design Decisions:
-----------------
1. httpx.AsyncClient for connection pooling across a whole traversal
2. Empty results and 404 mean "not found"; any other failure is a SourceError
   so the graph builder can tell a missing root from a broken transport
3. No caching here; that belongs to whoever owns the Workbook deployment
"""

from typing import Optional, Any

import httpx

from ..config import SourceConfig
from ..exceptions import EntityNotFound, SourceError
from ..model.schemas import Entity, EntityKind, ResourceType
from .entity_source import entity_from_resource, entity_from_contact


API_PREFIX = "/api/json/reply/"


class WorkbookClient:
    """Entity source for the Workbook REST API.

    Usage:
        async with WorkbookClient(SourceConfig(api_base="https://acme.workbook.net",
                                               api_key="...")) as client:
            company = await client.get_entity(101)
            contacts = await client.get_associates(101, active_only=True)
    """

    def __init__(
        self,
        config: Optional[SourceConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        verbose: bool = False
    ):
        """Initialize the client.

        Args:
            config: Source configuration (endpoint, key, timeout)
            transport: Optional httpx transport (used for testing)
            verbose: Whether to print each request

        Raises:
            ValueError: If no API base URL is configured
        """
        self.config = config or SourceConfig()
        if not self.config.api_base:
            raise ValueError("Workbook API base URL is required (set WORKBOOK_API_URL)")

        self.verbose = verbose
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"

        self._client = httpx.AsyncClient(
            base_url=self.config.api_base,
            headers=headers,
            timeout=self.config.timeout,
            transport=transport
        )

    async def __aenter__(self) -> "WorkbookClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    async def _request(
        self,
        endpoint: str,
        body: Any = None,
        params: Optional[dict] = None
    ) -> Any:
        """Send one Workbook request and return the decoded JSON.

        With a body the request goes out as POST + method override, otherwise
        as a plain GET with query parameters.

        Returns:
            Decoded JSON, or None for 204 / 404 responses

        Raises:
            SourceError: On HTTP errors, network errors or invalid JSON
        """
        url = API_PREFIX + endpoint
        if self.verbose:
            print(f"[*] Workbook request: {endpoint}")

        try:
            if body is not None:
                response = await self._client.post(
                    url, json=body, headers={"X-HTTP-METHOD-OVERRIDE": "GET"}
                )
            else:
                response = await self._client.get(url, params=params)
        except httpx.RequestError as e:
            raise SourceError(f"Network error calling {endpoint}: {e}") from e

        if response.status_code in (204, 404):
            return None
        if response.status_code == 500 and "do not have access" in response.text:
            raise SourceError(f"Access denied to {endpoint}")

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SourceError(
                f"API error {response.status_code} from {endpoint}: {response.text[:200]}"
            ) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise SourceError(f"Failed to parse response from {endpoint}: {e}") from e

    async def _get_resource(self, entity_id: int) -> Optional[Entity]:
        data = await self._request("ResourceRequest[]", body=[{"Id": entity_id}])
        if not data:
            return None
        record = data[0] if isinstance(data, list) else data
        return entity_from_resource(record)

    async def get_entity(self, entity_id: int) -> Entity:
        """Get a resource by id.

        Raises:
            EntityNotFound: If Workbook returns nothing for the id
            SourceError: If the request fails
        """
        entity = await self._get_resource(entity_id)
        if entity is None:
            raise EntityNotFound(entity_id)
        return entity

    async def get_responsible_party(
        self, entity_id: int, responsible_id: Optional[int] = None
    ) -> Optional[Entity]:
        """Get the resource named by ResponsibleResourceId, if any.

        With a known responsible_id this is a single request; otherwise the
        entity itself is read first.
        """
        if responsible_id is not None:
            return await self._get_resource(responsible_id)
        entity = await self._get_resource(entity_id)
        if entity is None or entity.responsible_id is None:
            return None
        return await self._get_resource(entity.responsible_id)

    async def get_associates(self, entity_id: int, active_only: bool = True) -> list[Entity]:
        """Get contact persons of a resource."""
        params = {"ResourceId": entity_id}
        if active_only:
            params["Active"] = "true"
        data = await self._request("ContactsForResourceRequest", params=params)
        return [entity_from_contact(record) for record in data or []]

    async def _get_all_resources(self) -> list[Entity]:
        data = await self._request("ResourcesRequest", body={})
        return [entity_from_resource(record) for record in data or []]

    async def find_companies_by_name(self, name: str) -> list[Entity]:
        """Companies whose name contains the given text (case-insensitive)."""
        needle = name.strip().lower()
        return [
            entity for entity in await self._get_all_resources()
            if entity.kind == EntityKind.COMPANY and needle in entity.name.lower()
        ]

    async def list_companies(self, include_inactive: bool = False) -> list[Entity]:
        """Client, supplier and prospect resources (default mapping targets)."""
        return [
            entity for entity in await self._get_all_resources()
            if ResourceType.is_business_partner(entity.type_id) and (include_inactive or entity.active)
        ]
