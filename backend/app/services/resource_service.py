"""
Backoffice API: Resource Service (generic CRUD)
================================================

What:  List, get, create, update and delete for any resource collection.
How:   One ResourceService per ResourceDescriptor. The service validates
       input, builds the parameterized Core statement for the descriptor's
       table, hands it to the Database gateway and interprets the RowSet as
       a domain outcome.
Who:   Called by the routers built in app.routes.resources.

Outcomes:
    found / created / updated / deleted   → return value
    missing required field                → ValidationError (400), storage untouched
    zero rows returned or affected        → NotFoundError (404)
    gateway failure                       → StorageError (500), propagated unmodified

Required-field rule:
    A required field counts as missing when `not payload.get(field)`.
    Empty string, 0, 0.0, False, None, empty containers and an absent key are
    all rejected. This is a truthiness check, not a null check: a salary of 0
    is refused. Update uses the same rule, so every required field must be
    resupplied (full replacement, no partial patch).

Key handling:
    The path id arrives as an opaque string. Integer keys accept ASCII digits
    with an optional leading minus, within the column's storage width; other
    key types are converted with the column's Python type. A value that cannot
    be converted cannot match any row, so it is reported as not found without
    a query.
"""

import logging
import re
from typing import Any, Dict, List, Mapping

from sqlalchemy import BigInteger, Integer, SmallInteger, delete, insert, select, update

from app.database import Database
from app.exceptions import NotFoundError, ValidationError
from app.resources import RESOURCES, ResourceDescriptor

logger = logging.getLogger(__name__)

_INTEGER_ID = re.compile(r"-?[0-9]+")


def _integer_bits(column_type: Integer) -> int:
    """Magnitude bits of a signed integer column (INTEGER is 32-bit in Postgres and MySQL)."""
    if isinstance(column_type, BigInteger):
        return 63
    if isinstance(column_type, SmallInteger):
        return 15
    return 31


class ResourceService:
    """
    Stateless CRUD logic for one resource collection.

    The service holds no records between calls; each method receives the
    Database handle for the current request.
    """

    def __init__(self, descriptor: ResourceDescriptor):
        self.descriptor = descriptor
        self.table = descriptor.table
        self.key_column = descriptor.key_column

    # ── Helpers ───────────────────────────────────────────────────────────

    def validation_message(self) -> str:
        """Message returned with a 400 for this resource."""
        if not self.descriptor.optional:
            return "All fields are required"
        names = list(self.descriptor.required)
        if len(names) == 1:
            return f"{names[0]} is required"
        return f"{', '.join(names[:-1])} and {names[-1]} are required"

    def validate(self, payload: Mapping[str, Any]) -> None:
        """
        Raise ValidationError when any required field is falsy or absent.

        Raises:
            ValidationError: with the missing fields in `missing_fields`
        """
        missing = [name for name in self.descriptor.required if not payload.get(name)]
        if missing:
            logger.info(
                "Validation failed for %s: missing %s",
                self.descriptor.name,
                ", ".join(missing),
            )
            raise ValidationError(
                message=self.validation_message(),
                missing_fields=missing,
            )

    def values_from(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Column values for insert/update; falsy optional fields become NULL."""
        values = {name: payload[name] for name in self.descriptor.required}
        for name in self.descriptor.optional:
            values[name] = payload.get(name) or None
        return values

    def coerce_key(self, raw_id: str) -> Any:
        """
        Convert the path id to the key column's Python type.

        Integer keys accept plain ASCII digits only (an optional leading
        minus), and the value must fit the column's storage width. Anything
        else cannot match a row.

        Raises:
            NotFoundError: the id cannot be converted, so no row can match
        """
        column_type = self.key_column.type
        if isinstance(column_type, Integer):
            if not _INTEGER_ID.fullmatch(raw_id):
                raise self.malformed(raw_id)
            key = int(raw_id)
            bits = _integer_bits(column_type)
            if not -(2 ** bits) <= key < 2 ** bits:
                raise self.malformed(raw_id)
            return key
        try:
            python_type = column_type.python_type
        except NotImplementedError:
            return raw_id
        try:
            return python_type(raw_id)
        except (TypeError, ValueError):
            raise self.malformed(raw_id)

    def malformed(self, raw_id: str) -> NotFoundError:
        logger.info("%s not found: malformed ID %r", self.descriptor.label, raw_id)
        return NotFoundError(resource=self.descriptor.label, resource_id=str(raw_id))

    def not_found(self, raw_id: str) -> NotFoundError:
        logger.info("%s not found: ID %s", self.descriptor.label, raw_id)
        return NotFoundError(resource=self.descriptor.label, resource_id=str(raw_id))

    # ── Operations ────────────────────────────────────────────────────────

    async def list_records(self, db: Database) -> List[Dict[str, Any]]:
        """Every record in the table; an empty table yields an empty list."""
        row_set = await db.execute(select(self.table).order_by(self.key_column))
        return row_set.rows

    async def get_record(self, db: Database, raw_id: str) -> Dict[str, Any]:
        """
        Retrieve a single record by key.

        Raises:
            NotFoundError: no row has this key (→ 404)
            StorageError: query execution failed (→ 500)
        """
        key = self.coerce_key(raw_id)
        row_set = await db.execute(select(self.table).where(self.key_column == key))
        if not row_set.rows:
            raise self.not_found(raw_id)
        return row_set.rows[0]

    async def create_record(self, db: Database, payload: Mapping[str, Any]) -> Any:
        """
        Validate and insert a new record.

        Key values present in the payload are ignored; the database assigns
        the key.

        Returns:
            The generated primary key.
        """
        self.validate(payload)
        row_set = await db.execute(insert(self.table).values(**self.values_from(payload)))
        logger.info("%s created with ID %s", self.descriptor.label, row_set.inserted_key)
        return row_set.inserted_key

    async def update_record(
        self, db: Database, raw_id: str, payload: Mapping[str, Any]
    ) -> None:
        """
        Validate and overwrite every field of an existing record.

        Raises:
            ValidationError: a required field is missing (checked first)
            NotFoundError: no row has this key
        """
        self.validate(payload)
        key = self.coerce_key(raw_id)
        row_set = await db.execute(
            update(self.table)
            .where(self.key_column == key)
            .values(**self.values_from(payload))
        )
        if row_set.rowcount == 0:
            raise self.not_found(raw_id)
        logger.info("%s updated: ID %s", self.descriptor.label, raw_id)

    async def delete_record(self, db: Database, raw_id: str) -> None:
        """Permanently delete a record. Raises NotFoundError when nothing was deleted."""
        key = self.coerce_key(raw_id)
        row_set = await db.execute(delete(self.table).where(self.key_column == key))
        if row_set.rowcount == 0:
            raise self.not_found(raw_id)
        logger.info("%s deleted: ID %s", self.descriptor.label, raw_id)


# ── Service Instances ─────────────────────────────────────────────────────
# One stateless service per registered resource
resource_services: Dict[str, ResourceService] = {
    name: ResourceService(descriptor) for name, descriptor in RESOURCES.items()
}
