"""
Backoffice API: Resource Service Unit Tests
============================================

What:  Tests for the generic CRUD logic (validation, statement values,
       outcome mapping).
How:   Uses a mock Database gateway (no real DB needed); statements handed to
       the gateway are compiled to inspect their bound values.

What we test:
    ✅ Truthiness-based required-field validation (never reaches the gateway)
    ✅ Optional fields stored as NULL when absent or empty
    ✅ Zero rows returned/affected → NotFoundError
    ✅ Malformed ids → NotFoundError without a query
    ✅ StorageError propagates unmodified
"""

import pytest
from unittest.mock import AsyncMock

from app.database import RowSet
from app.exceptions import NotFoundError, StorageError, ValidationError
from app.resources import CLIENTS, EMPLOYEES, SUPPLIERS
from app.services.resource_service import ResourceService, resource_services


VALID_EMPLOYEE = {"name": "Ana", "role": "Dev", "salary": 5000}


def bound_values(mock_db):
    """Bound parameters of the last statement passed to the gateway."""
    statement = mock_db.execute.await_args.args[0]
    return statement.compile().params


class TestDescriptors:
    """The registry wires each resource to the right table and key."""

    def test_registered_services(self):
        assert set(resource_services) == {"employees", "clients", "suppliers"}

    def test_key_columns(self):
        assert EMPLOYEES.key == "id"
        assert CLIENTS.key == "id_cliente"
        assert SUPPLIERS.key == "id_proveedor"

    def test_table_names(self):
        assert EMPLOYEES.table.name == "employees"
        assert CLIENTS.table.name == "clients"
        assert SUPPLIERS.table.name == "suppliers"


class TestValidation:
    """Required fields use truthiness, not null checks."""

    def setup_method(self):
        self.service = ResourceService(EMPLOYEES)

    @pytest.mark.parametrize("falsy", ["", 0, 0.0, None, False, [], {}])
    def test_falsy_required_value_rejected(self, falsy):
        payload = {**VALID_EMPLOYEE, "salary": falsy}
        with pytest.raises(ValidationError) as exc_info:
            self.service.validate(payload)
        assert exc_info.value.missing_fields == ["salary"]

    def test_absent_fields_listed_in_order(self):
        with pytest.raises(ValidationError) as exc_info:
            self.service.validate({"role": "Dev"})
        assert exc_info.value.missing_fields == ["name", "salary"]
        assert exc_info.value.context["missing_fields"] == ["name", "salary"]

    def test_valid_payload_passes(self):
        self.service.validate(VALID_EMPLOYEE)

    def test_string_zero_is_truthy(self):
        self.service.validate({**VALID_EMPLOYEE, "salary": "0"})

    def test_message_without_optional_fields(self):
        assert self.service.validation_message() == "All fields are required"
        assert ResourceService(SUPPLIERS).validation_message() == "All fields are required"

    def test_message_with_optional_fields(self):
        assert (
            ResourceService(CLIENTS).validation_message()
            == "identification_number, name and phone are required"
        )


class TestCreate:

    @pytest.mark.asyncio
    async def test_create_returns_generated_key(self, mock_db):
        mock_db.execute.return_value = RowSet(rowcount=1, inserted_key=7)
        service = ResourceService(EMPLOYEES)

        new_id = await service.create_record(mock_db, VALID_EMPLOYEE)

        assert new_id == 7
        assert bound_values(mock_db) == {"name": "Ana", "role": "Dev", "salary": 5000}

    @pytest.mark.asyncio
    async def test_create_ignores_key_and_unknown_fields(self, mock_db):
        mock_db.execute.return_value = RowSet(rowcount=1, inserted_key=1)
        service = ResourceService(EMPLOYEES)

        await service.create_record(mock_db, {**VALID_EMPLOYEE, "id": 42, "extra": "x"})

        assert "id" not in bound_values(mock_db)
        assert "extra" not in bound_values(mock_db)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload_email", [{}, {"email": ""}, {"email": None}])
    async def test_missing_optional_field_stored_as_null(self, mock_db, payload_email):
        mock_db.execute.return_value = RowSet(rowcount=1, inserted_key=1)
        service = ResourceService(CLIENTS)
        payload = {"identification_number": "123", "name": "X", "phone": "555", **payload_email}

        await service.create_record(mock_db, payload)

        assert bound_values(mock_db)["email"] is None

    @pytest.mark.asyncio
    async def test_invalid_payload_never_reaches_storage(self, mock_db):
        service = ResourceService(SUPPLIERS)
        with pytest.raises(ValidationError):
            await service.create_record(mock_db, {"name": "Acme"})
        mock_db.execute.assert_not_awaited()


class TestGet:

    @pytest.mark.asyncio
    async def test_get_found(self, mock_db):
        row = {"id": 1, **VALID_EMPLOYEE}
        mock_db.execute.return_value = RowSet(rows=[row], rowcount=1)

        result = await ResourceService(EMPLOYEES).get_record(mock_db, "1")

        assert result == row
        assert list(bound_values(mock_db).values()) == [1]

    @pytest.mark.asyncio
    async def test_get_not_found(self, mock_db):
        with pytest.raises(NotFoundError) as exc_info:
            await ResourceService(EMPLOYEES).get_record(mock_db, "99")
        assert "99" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_malformed_id_is_not_found_without_query(self, mock_db):
        with pytest.raises(NotFoundError):
            await ResourceService(CLIENTS).get_record(mock_db, "abc")
        mock_db.execute.assert_not_awaited()

    @pytest.mark.parametrize("raw_id", ["0", "7", "-3", "2147483647", "-2147483648"])
    def test_key_within_integer_range(self, raw_id):
        assert ResourceService(EMPLOYEES).coerce_key(raw_id) == int(raw_id)

    @pytest.mark.parametrize(
        "raw_id", ["2147483648", "-2147483649", "1_0", " 1", "1 ", "+1", "٣", ""]
    )
    def test_key_outside_range_or_loosely_spelled(self, raw_id):
        with pytest.raises(NotFoundError):
            ResourceService(SUPPLIERS).coerce_key(raw_id)

    @pytest.mark.asyncio
    async def test_storage_error_propagates(self, mock_db):
        mock_db.execute = AsyncMock(side_effect=StorageError(message="connection lost"))
        with pytest.raises(StorageError, match="connection lost"):
            await ResourceService(EMPLOYEES).get_record(mock_db, "1")


class TestUpdate:

    @pytest.mark.asyncio
    async def test_update_binds_every_field_and_key(self, mock_db):
        mock_db.execute.return_value = RowSet(rowcount=1)
        service = ResourceService(CLIENTS)
        payload = {"identification_number": "9", "name": "Y", "phone": "1"}

        await service.update_record(mock_db, "3", payload)

        values = bound_values(mock_db)
        assert values["identification_number"] == "9"
        assert values["email"] is None
        assert 3 in values.values()

    @pytest.mark.asyncio
    async def test_update_zero_rows_is_not_found(self, mock_db):
        mock_db.execute.return_value = RowSet(rowcount=0)
        with pytest.raises(NotFoundError):
            await ResourceService(EMPLOYEES).update_record(mock_db, "99", VALID_EMPLOYEE)

    @pytest.mark.asyncio
    async def test_update_validates_before_key(self, mock_db):
        with pytest.raises(ValidationError):
            await ResourceService(EMPLOYEES).update_record(mock_db, "abc", {"name": "Ana"})
        mock_db.execute.assert_not_awaited()


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_success(self, mock_db):
        mock_db.execute.return_value = RowSet(rowcount=1)
        await ResourceService(SUPPLIERS).delete_record(mock_db, "5")
        mock_db.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_zero_rows_is_not_found(self, mock_db):
        mock_db.execute.return_value = RowSet(rowcount=0)
        with pytest.raises(NotFoundError):
            await ResourceService(SUPPLIERS).delete_record(mock_db, "5")
