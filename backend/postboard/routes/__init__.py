# Routes package init
"""
Postboard Backend — API Routes Package
========================================

Route Inventory (prefix from settings.api_prefix, default /api):
    - posts.py:   GET    /posts                 (list, newest first)
                  POST   /posts                 (create)
                  DELETE /posts/{id}            (delete)
                  GET    /posts/unread-count    (unread count)
                  POST   /posts/{id}/read       (mark read)
    - health.py:  GET    /health                (service health check)

Routes are thin: they pull data out of the request, call PostService, and
pick the status code. Errors are formatted by the global handlers in main.py.
"""
