"""Backend package providing the REST API for expense tracking."""

__all__ = [
    "crud",
    "database",
    "models",
    "schemas",
    "server",
]
