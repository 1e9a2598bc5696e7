"""
HTTP layer.

``deps`` exposes the shared store and services to handlers; ``v1``
holds the first version of the routes, mounted under ``/api/v1``.
"""
