"""
School API Backend — API Routes Package
=========================================

Route Inventory:
    - health.py:  GET  /                       (welcome message)
                  GET  /health                 (service health check)
    - auth.py:    POST /auth/register          (public)
                  POST /auth/login             (public)
                  GET  /auth/users             (protected)
    - school.py:  /students, /teachers, /courses CRUD (protected)

Routes are thin: they read the request, call a service and pick the status
code. Business rules and error selection live in the services.
"""
