"""Placeholder business logic behind the resource endpoints.

The services return mock records and hold no state. Replace them with real
logic; keep the ``Result`` return type so the pipeline can render failures.
"""
