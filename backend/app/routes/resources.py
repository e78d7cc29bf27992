"""
Backoffice API: Resource Routes
================================

What:  The five standard operations for one resource collection.
How:   build_resource_router() turns a ResourceService into an APIRouter
       mounted under the descriptor's name. The app factory calls it once per
       registered resource (employees, clients, suppliers).

Route Table (per resource):
    GET    /{resource}        list      200 array
    GET    /{resource}/{id}   get       200 object | 404
    POST   /{resource}        create    201 {message, id} | 400
    PUT    /{resource}/{id}   update    200 {message} | 400 | 404
    DELETE /{resource}/{id}   delete    200 {message} | 404
    (any of them: 500 on storage failure)

The {id} path segment is taken as an opaque string; the service converts it.
Routes stay thin: errors are raised by the service and formatted by the
global exception handlers in main.py.
"""

import json
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from app.database import Database, get_database
from app.exceptions import ValidationError
from app.schemas.resource import CreatedResponse, ErrorResponse, MessageResponse
from app.services.resource_service import ResourceService


async def read_payload(request: Request) -> Dict[str, Any]:
    """
    Dependency returning the JSON request body as a dict.

    An empty body is treated as {} so the service reports the missing
    fields with a 400 instead of a framework-level 422.

    Raises:
        ValidationError: the body is not valid JSON or not a JSON object
    """
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        payload = json.loads(raw)
    except ValueError:
        raise ValidationError(message="Request body must be valid JSON")
    if not isinstance(payload, dict):
        raise ValidationError(message="Request body must be a JSON object")
    return payload


def build_resource_router(service: ResourceService) -> APIRouter:
    """Create the CRUD router for the service's resource."""
    descriptor = service.descriptor
    label = descriptor.label
    router = APIRouter(prefix=f"/{descriptor.name}", tags=[descriptor.name.capitalize()])

    not_found = {404: {"description": f"{label} not found", "model": ErrorResponse}}
    invalid = {400: {"description": "Missing required fields", "model": ErrorResponse}}
    server_error = {500: {"description": "Storage error", "model": ErrorResponse}}

    @router.get(
        "",
        name=f"list_{descriptor.name}",
        summary=f"List all {descriptor.name}",
        responses={**server_error},
    )
    async def list_records(db: Database = Depends(get_database)):
        return await service.list_records(db)

    @router.get(
        "/{record_id}",
        name=f"get_{descriptor.name}",
        summary=f"Get a single {label.lower()} by ID",
        responses={**not_found, **server_error},
    )
    async def get_record(record_id: str, db: Database = Depends(get_database)):
        return await service.get_record(db, record_id)

    @router.post(
        "",
        status_code=201,
        response_model=CreatedResponse,
        name=f"create_{descriptor.name}",
        summary=f"Create a {label.lower()}",
        description=(
            f"Required fields: {', '.join(descriptor.required)}. "
            + (f"Optional fields: {', '.join(descriptor.optional)}." if descriptor.optional else "")
        ),
        responses={**invalid, **server_error},
    )
    async def create_record(
        payload: Dict[str, Any] = Depends(read_payload),
        db: Database = Depends(get_database),
    ) -> CreatedResponse:
        new_id = await service.create_record(db, payload)
        return CreatedResponse(message=f"{label} created", id=new_id)

    @router.put(
        "/{record_id}",
        response_model=MessageResponse,
        name=f"update_{descriptor.name}",
        summary=f"Replace every field of a {label.lower()}",
        responses={**invalid, **not_found, **server_error},
    )
    async def update_record(
        record_id: str,
        payload: Dict[str, Any] = Depends(read_payload),
        db: Database = Depends(get_database),
    ) -> MessageResponse:
        await service.update_record(db, record_id, payload)
        return MessageResponse(message=f"{label} updated")

    @router.delete(
        "/{record_id}",
        response_model=MessageResponse,
        name=f"delete_{descriptor.name}",
        summary=f"Delete a {label.lower()}",
        responses={**not_found, **server_error},
    )
    async def delete_record(
        record_id: str,
        db: Database = Depends(get_database),
    ) -> MessageResponse:
        await service.delete_record(db, record_id)
        return MessageResponse(message=f"{label} deleted")

    return router
