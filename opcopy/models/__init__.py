from .base import OpcopyBaseModel


__all__ = ["OpcopyBaseModel"]
