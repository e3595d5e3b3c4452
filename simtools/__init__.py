"""simtools: installer and report tooling for an architecture-simulation stack.

Core design goals:
- Declarative project catalog (YAML)
- Idempotent clone, update and build per project
- One project's failure never aborts the batch
- Centralized logging, one install log per project
"""

__all__ = []
