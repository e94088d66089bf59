"""Byte storage backends: remote object store and local disk."""

from .object_store import ObjectStore, SupabaseObjectStore, UnconfiguredObjectStore
from .local_disk import LocalDiskStore

__all__ = ["ObjectStore", "SupabaseObjectStore", "UnconfiguredObjectStore", "LocalDiskStore"]
