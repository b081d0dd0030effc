"""Request-scoped dependencies: record store, user session and auth gates."""
