"""Domain layer: wiki-link parsing and the lookup index over the category table.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
