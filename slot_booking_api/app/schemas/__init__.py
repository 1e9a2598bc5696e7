"""
Pydantic schema definitions for API payloads.

Each domain (users, services, bookings) defines its own Pydantic
models for request and response bodies.  Schemas are separated from
the stored records so the JSON document layout can evolve without
changing the public API.
"""
