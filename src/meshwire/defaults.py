DEFAULT_MESH_NAME = "default"
"""Name given to containers constructed without an explicit name."""

MESH_SELF_KEY = "Mesh"
"""Key every container registers itself under."""

MESH_REF_ATTRIBUTE = "__mesh_ref__"
"""Attribute holding the back-reference from a managed object to its container."""
