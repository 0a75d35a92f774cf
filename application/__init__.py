"""
Application Layer for the session relay.

This package contains:
- ports/: Abstract interfaces (registry, channel hub, reconstruction renderer)
- use_cases/: The relay broadcaster coordinating registry and hub
"""
