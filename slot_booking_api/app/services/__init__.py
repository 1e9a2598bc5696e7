"""
Service layer abstraction.

Each service encapsulates business logic for a domain and talks to
persistence only through the shared ``JsonStore`` it is constructed
with.  API handlers never touch the store file directly.
"""
