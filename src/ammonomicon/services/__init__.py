"""Service layer: catalog snapshots and the operations built on them.

Services may import from domain and infrastructure layers.
They must never import from commands or output.
"""
