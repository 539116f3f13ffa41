"""Infrastructure layer — key-value record stores.

This layer depends on stdlib and third-party libs (SQLAlchemy, aiosqlite).
It must never import from domain or services.
"""
