# Services package init
"""
Garden Map Backend — Services Layer
=====================================

What:  Business logic between routes (HTTP) and the JSON file (persistence).

Service Inventory:
    - MarkerStore: whole-file async load/save of the marker mapping
    - MarkerService: validation, ID assignment, merge rules, write serialization
"""
