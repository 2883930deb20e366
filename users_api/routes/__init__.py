"""
Users API: Routes Package
==========================

What:  HTTP route handlers. Each returns a Result (or a plain value) that
       EnvelopeRoute renders; raised errors go to the global handlers.

Route Inventory:
    - users.py:         /users/*          (relational store, UUID ids)
    - memory_users.py:  /memory/users/*   (in-memory store, integer ids)
    - health.py:        GET /health       (service health check)

Routes handle HTTP concerns only; business logic lives in users_api.services.
"""
