"""
Workbook JSON Loader
====================

In-memory entity source built from a Workbook-shaped JSON export.

Supported Format:
    {
        "resources": [{"Id": 1, "Name": "Acme", "TypeId": 3, ...}, ...],
        "contacts":  [{"Id": 9, "Name": "Ann", "ParentResourceId": 1, ...}, ...]
    }

A bare list is treated as "resources".

Design Decisions:
-----------------
1. Resources and contacts keep separate id spaces, as in Workbook
2. get_entity prefers resources and falls back to contacts
3. Contacts keep their file order so "first N associates" is stable
"""

import json
from pathlib import Path
from typing import Optional, Union

from ..exceptions import EntityNotFound
from ..model.schemas import Entity, EntityKind, ResourceType
from .entity_source import entity_from_resource, entity_from_contact


class JsonEntitySource:
    """Entity source backed by a Workbook JSON export.

    Usage:
        source = JsonEntitySource.from_file("workbook_export.json")
        entity = await source.get_entity(101)

        # Or from already-parsed data
        source = JsonEntitySource.from_dict({"resources": [...], "contacts": [...]})
    """

    def __init__(self, resources: list = None, contacts: list = None, verbose: bool = False):
        """Initialize the source.

        Args:
            resources: Workbook resource dictionaries
            contacts: Workbook contact dictionaries
            verbose: Whether to print skipped records
        """
        self.verbose = verbose
        self._resources: dict[int, Entity] = {}
        self._contacts: dict[int, Entity] = {}
        self._contacts_by_parent: dict[int, list[int]] = {}

        for record in resources or []:
            self._add_record(record, entity_from_resource, self._resources)
        for record in contacts or []:
            contact = self._add_record(record, entity_from_contact, self._contacts)
            if contact is not None and contact.parent_id is not None:
                self._contacts_by_parent.setdefault(contact.parent_id, []).append(contact.id)

    def _add_record(self, record: dict, parse, index: dict) -> Optional[Entity]:
        try:
            entity = parse(record)
        except (KeyError, TypeError) as e:
            if self.verbose:
                print(f"[!] Skipping malformed record {record!r}: {e}")
            return None
        index[entity.id] = entity
        return entity

    @classmethod
    def from_dict(cls, data: Union[dict, list], verbose: bool = False) -> "JsonEntitySource":
        """Create a source from parsed JSON data."""
        if isinstance(data, list):
            return cls(resources=data, verbose=verbose)
        return cls(
            resources=data.get("resources", data.get("Resources", [])),
            contacts=data.get("contacts", data.get("Contacts", [])),
            verbose=verbose
        )

    @classmethod
    def from_file(cls, file_path: str, verbose: bool = False) -> "JsonEntitySource":
        """Load a source from a JSON file.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {file_path}")

        if verbose:
            print(f"[*] Loading {path.name}...")

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        source = cls.from_dict(data, verbose=verbose)
        if verbose:
            print(f"[+] Loaded {len(source._resources)} resources, {len(source._contacts)} contacts")
        return source

    async def get_entity(self, entity_id: int) -> Entity:
        """Get a resource (or, failing that, a contact) by id.

        Raises:
            EntityNotFound: If no record has this id
        """
        entity = self._resources.get(entity_id) or self._contacts.get(entity_id)
        if entity is None:
            raise EntityNotFound(entity_id)
        return entity

    async def get_responsible_party(
        self, entity_id: int, responsible_id: Optional[int] = None
    ) -> Optional[Entity]:
        """Get the resource responsible for a resource, if any."""
        if responsible_id is not None:
            return self._resources.get(responsible_id)
        entity = self._resources.get(entity_id)
        if entity is None or entity.responsible_id is None:
            return None
        return self._resources.get(entity.responsible_id)

    async def get_associates(self, entity_id: int, active_only: bool = True) -> list[Entity]:
        """Get the contact persons of a resource in file order."""
        contacts = [self._contacts[cid] for cid in self._contacts_by_parent.get(entity_id, [])]
        if active_only:
            contacts = [c for c in contacts if c.active]
        return contacts

    async def find_companies_by_name(self, name: str) -> list[Entity]:
        """Companies whose name contains the given text (case-insensitive)."""
        needle = name.strip().lower()
        return [
            entity for entity in self._resources.values()
            if entity.kind == EntityKind.COMPANY and needle in entity.name.lower()
        ]

    async def list_companies(self, include_inactive: bool = False) -> list[Entity]:
        """Client, supplier and prospect resources (default mapping targets)."""
        return [
            entity for entity in self._resources.values()
            if ResourceType.is_business_partner(entity.type_id) and (include_inactive or entity.active)
        ]
