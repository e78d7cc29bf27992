# Routes package init
"""
Backoffice API: Routes Package
===============================

Route Inventory:
    - resources.py: build_resource_router(), the five CRUD routes mounted
                    once per resource (/employees, /clients, /suppliers)
    - health.py:    GET /health (database probe)

Routes are thin: they extract the path id and body, call the service and
return its result. Errors are raised by the service and formatted by the
global exception handlers.
"""
