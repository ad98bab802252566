"""
Domain layer containing core business logic and domain services.

Submodules:
- auth: Authorization of creator actions.
- live: Live session and recording lifecycles.
- feed: Boosted content feed and boost operations.
- utils: Domain-specific utilities (e.g., ID generation).
"""
