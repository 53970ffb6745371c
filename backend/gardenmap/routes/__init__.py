# Routes package init
"""
Garden Map Backend — API Routes Package
=========================================

Route Inventory:
    - markers.py: GET    /api/markers        (full marker mapping)
                  POST   /api/markers        (create, server assigns ID)
                  PUT    /api/markers/{id}   (move and/or edit)
                  DELETE /api/markers/{id}   (remove)
    - health.py:  GET    /health             (liveness + store check)

Routes stay thin: parse the request, call MarkerService, set the status
code. Errors are raised as exceptions and shaped by the handlers in main.py.
"""
