"""
relmap Data Schemas
===================

Typed dataclasses representing CRM entities and the relationships between them.

Design Decisions:
-----------------
1. Entity is what a data source hands us; Node is an Entity placed in a graph
2. Node identity is (id, kind): ids are not unique across kinds in Workbook
3. Connection identity is (from_id, to_id, category); the category implies
   the endpoint kinds, which are also stored for related_to links
4. MappingResult aggregates everything a presentation layer needs

Schema Hierarchy:
- Entity: source record
- Node: graph vertex (entity + depth/strength/how it was reached)
- Connection: directed graph edge
- BuildOptions: per-call traversal options
- LookupFailure: non-fatal expansion failure
- RelationshipStats / CompanySummary / MappingResult: analysis output
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
from datetime import datetime


class EntityKind(Enum):
    """Graph-level kind of an entity."""
    COMPANY = "company"
    EMPLOYEE = "employee"
    CONTACT = "contact"

    @classmethod
    def from_type_id(cls, type_id: Optional[int]) -> "EntityKind":
        """Map a Workbook resource type code to an entity kind.

        Employees and contact persons have their own codes; every other code
        (owner company, client, supplier, prospect, unknown) is a company.
        """
        if type_id == ResourceType.EMPLOYEE.value:
            return cls.EMPLOYEE
        if type_id == ResourceType.CONTACT_PERSON.value:
            return cls.CONTACT
        return cls.COMPANY


class ResourceType(Enum):
    """Workbook resource type codes."""
    COMPANY = 1           # The owner company
    EMPLOYEE = 2          # Internal employees
    CLIENT = 3            # Customers
    SUPPLIER = 4          # Vendors
    PROSPECT = 6          # Potential clients
    CONTACT_PERSON = 10   # Contact persons at client companies

    @classmethod
    def is_business_partner(cls, type_id: Optional[int]) -> bool:
        """Whether a type code is a client, supplier or prospect.

        Only business partners have contact persons and are picked as
        default mapping targets; the owner company and unknown codes are not.
        """
        return type_id in (cls.CLIENT.value, cls.SUPPLIER.value, cls.PROSPECT.value)

    @classmethod
    def display_name(cls, type_id: Optional[int]) -> str:
        """Human-readable name for a type code.

        The owner company has no label of its own and reports as "Unknown".
        """
        names = {
            cls.EMPLOYEE.value: "Employee",
            cls.CLIENT.value: "Client",
            cls.SUPPLIER.value: "Supplier",
            cls.PROSPECT.value: "Prospect",
            cls.CONTACT_PERSON.value: "Contact",
        }
        return names.get(type_id, "Unknown")


class ConnectionCategory(Enum):
    """Categories of directed relationships.

    responsible_for: employee -> company (or manager -> employee)
    contact_of: contact -> company
    parent_of / child_of: company hierarchy
    related_to: the same party appearing under two kinds
    """
    RESPONSIBLE_FOR = "responsible_for"
    CONTACT_OF = "contact_of"
    PARENT_OF = "parent_of"
    CHILD_OF = "child_of"
    RELATED_TO = "related_to"

    @property
    def endpoint_kinds(self) -> tuple:
        """Default (from_kind, to_kind) implied by the category."""
        return _ENDPOINT_KINDS[self]

    @property
    def node_connection_type(self) -> "ConnectionType":
        """How a node reached through this category was connected."""
        return _NODE_CONNECTION_TYPES[self]


class ConnectionType(Enum):
    """How a node was first reached during traversal."""
    ROOT = "root"
    RESPONSIBLE = "responsible"
    CONTACT = "contact"
    HIERARCHY = "hierarchy"
    RELATED = "related"


_ENDPOINT_KINDS = {
    ConnectionCategory.RESPONSIBLE_FOR: (EntityKind.EMPLOYEE, EntityKind.COMPANY),
    ConnectionCategory.CONTACT_OF: (EntityKind.CONTACT, EntityKind.COMPANY),
    ConnectionCategory.PARENT_OF: (EntityKind.COMPANY, EntityKind.COMPANY),
    ConnectionCategory.CHILD_OF: (EntityKind.COMPANY, EntityKind.COMPANY),
    ConnectionCategory.RELATED_TO: (EntityKind.CONTACT, EntityKind.EMPLOYEE),
}

_NODE_CONNECTION_TYPES = {
    ConnectionCategory.RESPONSIBLE_FOR: ConnectionType.RESPONSIBLE,
    ConnectionCategory.CONTACT_OF: ConnectionType.CONTACT,
    ConnectionCategory.PARENT_OF: ConnectionType.HIERARCHY,
    ConnectionCategory.CHILD_OF: ConnectionType.HIERARCHY,
    ConnectionCategory.RELATED_TO: ConnectionType.RELATED,
}


@dataclass
class Entity:
    """A business record as returned by an entity source.

    Attributes:
        id: Source id (unique per kind, not globally)
        kind: Graph-level kind
        name: Display name
        active: Whether the record is active
        type_id: Raw Workbook resource type code
        responsible_id: Id of the employee responsible for this record
        parent_id: Id of the owning resource (contacts, sub-companies)
    """
    id: int
    kind: EntityKind
    name: str
    active: bool = True
    type_id: int = 0
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    responsible_id: Optional[int] = None
    parent_id: Optional[int] = None

    @property
    def key(self) -> tuple:
        return (self.id, self.kind)

    @property
    def has_email(self) -> bool:
        return bool(self.email)

    @property
    def has_phone(self) -> bool:
        return bool(self.phone)


@dataclass
class Node:
    """An entity admitted into a relationship graph.

    Attributes:
        depth: Expansion steps from the root (root = 0)
        connection_strength: Strength of the connection that admitted the node
        connection_type: How the node was first reached

    Design Decision:
        Identity is (id, kind). The first discovery of an identity wins;
        later discoveries never overwrite depth or strength.
    """
    id: int
    kind: EntityKind
    name: str
    type_id: int = 0
    active: bool = True
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    depth: int = 0
    connection_strength: float = 1.0
    connection_type: ConnectionType = ConnectionType.ROOT

    def __hash__(self):
        return hash(self.key)

    def __eq__(self, other):
        if isinstance(other, Node):
            return self.key == other.key
        return False

    @property
    def key(self) -> tuple:
        return (self.id, self.kind)

    @property
    def has_email(self) -> bool:
        return bool(self.email)

    @property
    def has_phone(self) -> bool:
        return bool(self.phone)

    @classmethod
    def from_entity(
        cls,
        entity: Entity,
        depth: int = 0,
        connection_strength: float = 1.0,
        connection_type: ConnectionType = ConnectionType.ROOT
    ) -> "Node":
        """Create a node from a source entity."""
        return cls(
            id=entity.id,
            kind=entity.kind,
            name=entity.name or f"Unknown {entity.kind.value.title()}",
            type_id=entity.type_id,
            active=entity.active,
            email=entity.email or None,
            phone=entity.phone or None,
            address=entity.address or None,
            city=entity.city or None,
            country=entity.country or None,
            depth=depth,
            connection_strength=connection_strength,
            connection_type=connection_type,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "kind": self.kind.value,
            "name": self.name,
            "type_id": self.type_id,
            "active": self.active,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "city": self.city,
            "country": self.country,
            "depth": self.depth,
            "connection_strength": self.connection_strength,
            "connection_type": self.connection_type.value,
        }


@dataclass
class Connection:
    """A directed relationship between two nodes.

    Attributes:
        from_id: Entity id of the source node
        to_id: Entity id of the target node
        category: Relationship category
        strength: Score in [0, 1]
        description: Human-readable sentence
        from_kind / to_kind: Endpoint kinds (default to the category's kinds)
    """
    from_id: int
    to_id: int
    category: ConnectionCategory
    strength: float = 0.0
    description: str = ""
    from_kind: Optional[EntityKind] = None
    to_kind: Optional[EntityKind] = None

    def __post_init__(self):
        default_from, default_to = self.category.endpoint_kinds
        if self.from_kind is None:
            self.from_kind = default_from
        if self.to_kind is None:
            self.to_kind = default_to

    def __hash__(self):
        return hash(self.key)

    def __eq__(self, other):
        if isinstance(other, Connection):
            return self.key == other.key
        return False

    @property
    def key(self) -> tuple:
        return (self.from_id, self.to_id, self.category)

    @property
    def from_key(self) -> tuple:
        return (self.from_id, self.from_kind)

    @property
    def to_key(self) -> tuple:
        return (self.to_id, self.to_kind)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "from_id": self.from_id,
            "to_id": self.to_id,
            "category": self.category.value,
            "strength": self.strength,
            "description": self.description,
            "from_kind": self.from_kind.value,
            "to_kind": self.to_kind.value,
        }


@dataclass
class BuildOptions:
    """Options for a single graph build.

    Attributes:
        max_depth: Nodes at this depth are included but not expanded
        include_inactive: Admit inactive related entities
        include_rendering: Render the text tree into the graph
    """
    max_depth: int = 3
    include_inactive: bool = False
    include_rendering: bool = True

    def __post_init__(self):
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")


@dataclass
class LookupFailure:
    """A lookup that failed while expanding a non-root node."""
    entity_id: int
    lookup: str
    error: str

    def to_dict(self) -> dict:
        return {"entity_id": self.entity_id, "lookup": self.lookup, "error": self.error}


@dataclass
class RelationshipStats:
    """Aggregate statistics over a relationship graph."""
    companies_count: int = 0
    contacts_count: int = 0
    employees_count: int = 0
    active_nodes_count: int = 0
    strong_connections_count: int = 0
    average_connection_strength: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "companies_count": self.companies_count,
            "contacts_count": self.contacts_count,
            "employees_count": self.employees_count,
            "active_nodes_count": self.active_nodes_count,
            "strong_connections_count": self.strong_connections_count,
            "average_connection_strength": self.average_connection_strength,
        }


@dataclass
class CompanySummary:
    """Relationship overview for one company in a graph.

    Attributes:
        responsible_employee: Node of the account manager, if any
        contacts: Contact nodes attached to the company
        portfolio_companies: Other companies with the same account manager
        related_employees: (node, role) pairs
        connection_strength: Mean strength of touching connections, 0-100
        strength_reason: Comma-separated facts behind the strength
    """
    company_id: int
    company_name: str
    company_type: str
    active: bool
    responsible_employee: Optional[Node] = None
    contacts: list = field(default_factory=list)
    portfolio_companies: list = field(default_factory=list)
    related_employees: list = field(default_factory=list)
    connection_strength: int = 0
    strength_reason: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        employee = self.responsible_employee
        return {
            "company_id": self.company_id,
            "company_name": self.company_name,
            "company_type": self.company_type,
            "active": self.active,
            "responsible_employee": {
                "id": employee.id,
                "name": employee.name,
                "email": employee.email,
            } if employee else None,
            "structure": {
                "contacts": [
                    {"id": c.id, "name": c.name, "email": c.email, "phone": c.phone}
                    for c in self.contacts
                ],
                "portfolio_companies": [
                    {"id": c.id, "name": c.name} for c in self.portfolio_companies
                ],
                "related_employees": [
                    {"id": e.id, "name": e.name, "role": role}
                    for e, role in self.related_employees
                ],
            },
            "connection_strength": self.connection_strength,
            "strength_reason": self.strength_reason,
        }


@dataclass
class MappingResult:
    """Complete relationship mapping output for presentation layers.

    Attributes:
        relationships: CompanySummary per company node
        network_map: Rendered text tree (if requested)
        total_mapped: Number of entities in the graph
        total_connections: Number of connections in the graph
        stats: Aggregate statistics
        graph: The underlying RelationshipGraph (not serialized)
        message: One-line outcome description
        report_path: Path to the JSON report, once written
    """
    relationships: list = field(default_factory=list)
    network_map: Optional[str] = None
    total_mapped: int = 0
    total_connections: int = 0
    stats: Optional[RelationshipStats] = None
    graph: Optional[object] = None
    message: str = ""
    success: bool = True
    report_path: Optional[str] = None
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        if "timestamp" not in self.metadata:
            self.metadata["timestamp"] = datetime.now().isoformat()

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "relationships": [r.to_dict() for r in self.relationships],
            "network_map": self.network_map,
            "total_mapped": self.total_mapped,
            "total_connections": self.total_connections,
            "stats": self.stats.to_dict() if self.stats else None,
            "graph": self.graph.to_dict() if self.graph is not None else None,
            "message": self.message,
            "success": self.success,
            "report_path": self.report_path,
            "metadata": self.metadata,
        }
