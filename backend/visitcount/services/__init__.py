# Services package init
"""
Visit Counter Backend: Services Layer
======================================

What:  Business logic between routes (HTTP) and storage (persistence).

Service Inventory:
    - VisitService: record a visit, report the visit count
"""
