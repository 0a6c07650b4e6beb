import asyncio

import pytest

from relmap.ingestion.json_loader import JsonEntitySource


def resource(id, name, type_id=3, active=True, responsible=None, email=None, phone=None, **extra):
    record = {"Id": id, "Name": name, "TypeId": type_id, "Active": active}
    if responsible is not None:
        record["ResponsibleResourceId"] = responsible
    if email:
        record["Email"] = email
    if phone:
        record["Phone1"] = phone
    record.update(extra)
    return record


def contact(id, name, parent, active=True, email=None, phone=None):
    record = {"Id": id, "Name": name, "ParentResourceId": parent, "Active": active}
    if email:
        record["Email"] = email
    if phone:
        record["Phone1"] = phone
    return record


class FlakySource(JsonEntitySource):
    """JSON source whose lookups fail for chosen entity ids."""

    def __init__(self, *args, failing_associates=(), failing_responsible=(), failing_entities=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.failing_associates = set(failing_associates)
        self.failing_responsible = set(failing_responsible)
        self.failing_entities = set(failing_entities)
        self.associate_calls = []

    async def get_entity(self, entity_id):
        if entity_id in self.failing_entities:
            raise RuntimeError(f"timeout fetching {entity_id}")
        return await super().get_entity(entity_id)

    async def get_responsible_party(self, entity_id, responsible_id=None):
        if entity_id in self.failing_responsible:
            raise RuntimeError(f"responsible lookup failed for {entity_id}")
        return await super().get_responsible_party(entity_id, responsible_id)

    async def get_associates(self, entity_id, active_only=True):
        self.associate_calls.append((entity_id, active_only))
        if entity_id in self.failing_associates:
            raise RuntimeError(f"contacts lookup failed for {entity_id}")
        return await super().get_associates(entity_id, active_only)


class DelayedSource(JsonEntitySource):
    """JSON source that answers after a per-entity delay."""

    def __init__(self, *args, delays=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.delays = delays or {}

    async def _pause(self, entity_id):
        await asyncio.sleep(self.delays.get(entity_id, 0))

    async def get_responsible_party(self, entity_id, responsible_id=None):
        await self._pause(entity_id)
        return await super().get_responsible_party(entity_id, responsible_id)

    async def get_associates(self, entity_id, active_only=True):
        await self._pause(entity_id)
        return await super().get_associates(entity_id, active_only)


ACME_RESOURCES = [
    resource(100, "Acme A/S", responsible=1, email="info@acme.dk", phone="+45 1111",
             Address1="Havnegade 1", City="Aarhus", Country="Denmark"),
    resource(1, "Ann Berg", type_id=2, email="ann@ours.dk", phone="+45 2222"),
]

ACME_CONTACTS = [
    contact(201, "Carl Dahl", 100, email="carl@acme.dk"),
    contact(202, "Eva Falk", 100, email="eva@acme.dk", phone="+45 3333"),
    contact(203, "Ole Holm", 100, active=False, email="ole@acme.dk"),
]


@pytest.fixture
def acme_data():
    """Company with one responsible employee and three contacts (one inactive)."""
    return {"resources": list(ACME_RESOURCES), "contacts": list(ACME_CONTACTS)}


@pytest.fixture
def acme_source(acme_data):
    return JsonEntitySource.from_dict(acme_data)


@pytest.fixture
def network_data():
    """Three client companies; 100 and 200 share account manager 1."""
    return {
        "resources": [
            resource(100, "Acme A/S", responsible=1, email="info@acme.dk"),
            resource(200, "Birk ApS", responsible=1, email="hello@birk.dk"),
            resource(300, "Cobalt AB", type_id=6, responsible=2),
            resource(1, "Ann Berg", type_id=2, email="ann@ours.dk"),
            resource(2, "Bo Lund", type_id=2),
        ],
        "contacts": [
            contact(201, "Carl Dahl", 100),
            contact(202, "Eva Falk", 100),
            contact(211, "Gry Iversen", 200),
            contact(301, "Jens Krogh", 300),
            contact(302, "Lis Moe", 300),
        ],
    }


@pytest.fixture
def network_source(network_data):
    return JsonEntitySource.from_dict(network_data)
