"""Wrappers around the external tools and services the deploy drives."""

from .js_runtime import JSRuntimeAdapter, create_js_runtime_adapter
from .object_store import ObjectStoreAdapter, create_object_store
from .process import ProcessResult, ProcessRunner
from .registry import RegistryClient
from .vcs import VCSAdapter, create_vcs_adapter

__all__ = [
    "JSRuntimeAdapter",
    "ObjectStoreAdapter",
    "ProcessResult",
    "ProcessRunner",
    "RegistryClient",
    "VCSAdapter",
    "create_js_runtime_adapter",
    "create_object_store",
    "create_vcs_adapter",
]
