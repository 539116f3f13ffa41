"""Service layer — sanitization and app record orchestration.

Services may import from domain and infrastructure layers.
They must never import from config or bootstrap.
"""
