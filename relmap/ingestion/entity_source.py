"""
Entity Source Interfaces
========================

The protocol boundary between the graph core and a CRM-like data source.

Every source must provide three coroutines:
- get_entity(id) -> Entity (raises EntityNotFound)
- get_responsible_party(entity_id, responsible_id=None) -> Entity | None
  (responsible_id is the already known ResponsibleResourceId, if any; a
  source may use it to skip re-reading the entity)
- get_associates(entity_id, active_only) -> list[Entity]

Sources that can also list or search companies implement CompanyDirectory;
the bridge uses it to pick roots when no ids are given.

Workbook records arrive as PascalCase dictionaries. The parsing helpers here
turn them into Entity objects for every concrete source.
"""

from typing import Optional, Protocol, runtime_checkable

from ..model.schemas import Entity, EntityKind, ResourceType


@runtime_checkable
class EntitySource(Protocol):
    """Minimal data source consumed by GraphBuilder."""

    async def get_entity(self, entity_id: int) -> Entity:
        ...

    async def get_responsible_party(
        self, entity_id: int, responsible_id: Optional[int] = None
    ) -> Optional[Entity]:
        ...

    async def get_associates(self, entity_id: int, active_only: bool = True) -> list[Entity]:
        ...


@runtime_checkable
class CompanyDirectory(Protocol):
    """Optional company lookup used to choose graph roots."""

    async def find_companies_by_name(self, name: str) -> list[Entity]:
        ...

    async def list_companies(self, include_inactive: bool = False) -> list[Entity]:
        ...


def entity_from_resource(data: dict) -> Entity:
    """Build an Entity from a Workbook resource record.

    Args:
        data: Resource dictionary (Id, Name, TypeId, Active, Email, ...)

    Returns:
        Entity with kind derived from TypeId
    """
    type_id = data.get("TypeId") or 0
    return Entity(
        id=data["Id"],
        kind=EntityKind.from_type_id(type_id),
        name=data.get("Name") or "",
        active=bool(data.get("Active", True)),
        type_id=type_id,
        email=data.get("Email") or None,
        phone=data.get("Phone1") or data.get("CellPhone") or None,
        address=data.get("Address1") or None,
        city=data.get("City") or None,
        country=data.get("Country") or None,
        responsible_id=data.get("ResponsibleResourceId") or None,
        parent_id=data.get("ParentResourceId") or None,
    )


def entity_from_contact(data: dict) -> Entity:
    """Build an Entity from a Workbook contact-person record.

    Contacts come from a separate endpoint and carry no TypeId; they are
    always contact persons owned by ParentResourceId.
    """
    return Entity(
        id=data["Id"],
        kind=EntityKind.CONTACT,
        name=data.get("Name") or "",
        active=bool(data.get("Active", True)),
        type_id=ResourceType.CONTACT_PERSON.value,
        email=data.get("Email") or None,
        phone=data.get("Phone1") or data.get("CellPhone") or None,
        address=data.get("Address1") or None,
        city=data.get("City") or None,
        country=data.get("Country") or None,
        parent_id=data.get("ParentResourceId") or None,
    )
