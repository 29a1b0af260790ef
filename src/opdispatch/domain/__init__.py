"""Domain layer — result model, error taxonomy, value models.

This layer depends only on stdlib and pydantic.
It must never import from service, serialization, handler, or config.
"""
