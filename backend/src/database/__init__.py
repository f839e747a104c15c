"""
Database package initialization.

The package follows a modular structure:
- base: declarative base and shared mixins
- connection: async engine and session management
- models: order and order item tables
"""

# Import submodules explicitly when needed to avoid circular dependencies

__all__ = []
