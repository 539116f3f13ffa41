"""Domain layer — identifiers, records, tools, and structural cloning.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, or config.
"""
