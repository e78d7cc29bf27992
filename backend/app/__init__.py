"""
Backoffice API: Application Package
====================================

CRUD backend for three independent resource collections (employees,
clients, suppliers) stored in a relational database.

Layers:

    ┌─────────────────────────────────────┐
    │     Routes (one router per resource)│  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   ResourceService (generic CRUD)    │  ← validation, outcome mapping
    ├─────────────────────────────────────┤
    │  Descriptors & ORM models (data)    │  ← table, key, field lists
    ├─────────────────────────────────────┤
    │     Database gateway (pool, SQL)    │  ← parameterized execution
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
