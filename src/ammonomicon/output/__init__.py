"""Output layer: Rich/JSON rendering of ServiceResult and the details view.

This layer may import from domain and services (types only).
Services must never import from here.
"""
