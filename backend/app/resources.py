"""
Backoffice API: Resource Descriptors
=====================================

What:  One immutable record per resource collection. Each record is all the
       generic ResourceService and the router factory need to serve it.
How:   The descriptor points at the ORM model (table + key column) and lists
       the required and optional fields in column order.

Registry:
    employees  key id            required name, role, salary
    clients    key id_cliente    required identification_number, name, phone
                                 optional email
    suppliers  key id_proveedor  required identification_number, name,
                                          primary_contact, phone
"""

from dataclasses import dataclass
from typing import Dict, Tuple, Type

from sqlalchemy import Column, Table

from app.database import Base
from app.models.client import Client
from app.models.employee import Employee
from app.models.supplier import Supplier


@dataclass(frozen=True)
class ResourceDescriptor:
    """
    Attributes:
        name:      collection name, also the URL prefix (/employees)
        label:     singular display name used in messages ("Employee")
        model:     ORM model owning the table
        required:  fields whose truthy presence is mandatory on create/update
        optional:  fields stored as NULL when absent or falsy
    """
    name: str
    label: str
    model: Type[Base]
    required: Tuple[str, ...]
    optional: Tuple[str, ...] = ()

    @property
    def table(self) -> Table:
        return self.model.__table__

    @property
    def key_column(self) -> Column:
        # Every resource table has a single-column primary key
        return self.table.primary_key.columns.values()[0]

    @property
    def key(self) -> str:
        return self.key_column.name


EMPLOYEES = ResourceDescriptor(
    name="employees",
    label="Employee",
    model=Employee,
    required=("name", "role", "salary"),
)

CLIENTS = ResourceDescriptor(
    name="clients",
    label="Client",
    model=Client,
    required=("identification_number", "name", "phone"),
    optional=("email",),
)

SUPPLIERS = ResourceDescriptor(
    name="suppliers",
    label="Supplier",
    model=Supplier,
    required=("identification_number", "name", "primary_contact", "phone"),
)

RESOURCES: Dict[str, ResourceDescriptor] = {
    descriptor.name: descriptor for descriptor in (EMPLOYEES, CLIENTS, SUPPLIERS)
}
