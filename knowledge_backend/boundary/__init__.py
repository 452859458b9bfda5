"""
Boundary layer.

Adapters for external collaborators: blob store, embedding providers and
vector indexes.
"""
