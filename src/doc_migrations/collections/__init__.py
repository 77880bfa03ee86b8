from .resolver import CollectionNameResolver

__all__ = ["CollectionNameResolver"]
