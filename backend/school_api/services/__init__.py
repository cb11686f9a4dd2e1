"""
School API Backend — Services Layer
=====================================

What:  Business logic between routes (HTTP) and the database (persistence).

Service Inventory:
    - PasswordHasher: bcrypt hashing and verification (threadpool-offloaded)
    - TokenService:   JWT issue / verify
    - AuthService:    register, login, user listing and lookups
    - CrudService:    create / list / get / update / delete for students,
                      teachers and courses

Services raise SchoolAPIError subclasses; they never build HTTP responses.
"""
