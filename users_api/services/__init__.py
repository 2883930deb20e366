"""
Users API: Services Layer
==========================

What:  Business logic between routes (HTTP) and storage.
How:   Services return Result values (Success / SoftFailure) or raise
       UsersApiError subclasses; routes pass either straight through.

Service Inventory:
    - UserService (abstract): CRUD contract shared by every storage variant
    - MemoryUserService: process-local list, integer ids
    - SqlUserService: async SQLAlchemy, UUID ids, one instance per request
"""
