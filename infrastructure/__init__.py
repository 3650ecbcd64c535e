"""
Infrastructure Package
======================

Provides abstraction layers for external dependencies following the Dependency Inversion Principle.

Modules:
    - notifications: Seller notification abstraction (in-app, mock)
    - events: Redis pub/sub event bus
    - container: Service locator wiring stores and domain services

This package enables:
    - Easy testing with mock implementations
    - Switching between providers without code changes
    - Loose coupling between business logic and infrastructure
"""
