# Services package init
"""
Backoffice API: Services Layer
===============================

Service Inventory:
    - ResourceService: generic CRUD logic, instantiated once per
      ResourceDescriptor (see app.resources)

Services receive the Database handle per call and hold no records.
"""
