"""
Application package.

The API is split into ``core`` (configuration, logging, security and
the JSON record store), ``services`` (business rules), ``schemas``
(request and response models) and ``api`` (versioned HTTP routes).
``main.create_app`` wires them together.
"""
