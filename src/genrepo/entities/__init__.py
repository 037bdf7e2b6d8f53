from .base import UNLOADED, GenericEntity, is_loaded, reference_stub

__all__ = ["GenericEntity", "UNLOADED", "is_loaded", "reference_stub"]
