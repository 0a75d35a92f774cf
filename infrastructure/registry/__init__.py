"""Session registry adapters."""

from infrastructure.registry.in_memory import InMemorySessionRegistry, RetentionPolicy

__all__ = ["InMemorySessionRegistry", "RetentionPolicy"]
