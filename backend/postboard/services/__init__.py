# Services package init
"""
Postboard Backend — Services Layer
====================================

What:  Business logic between routes (HTTP) and the database session.

Service Inventory:
    - PostService: list, create, delete, mark-read and unread-count over `posts`
"""
