#!/usr/bin/env python3
"""
Per-Adapter Publisher

Turns one adapter's source tree into published artifacts: descriptor checks,
idempotency guard, dependency install, build, upload and registry sync. Each
step is a hard precondition for the next; the first failure raises.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .config import DeployConfig
from .contracts.models import AdapterDescriptor
from .descriptor import load_descriptor, write_icon
from .errors import (
    ArtifactMissingError,
    DependencyInstallError,
    IconMissingError,
    VersionExistsError,
)
from .integrations.js_runtime import JSRuntimeAdapter
from .integrations.object_store import ObjectStoreAdapter
from .integrations.registry import RegistryClient
from .utils.json_logger import adapter_logger

logger = logging.getLogger(__name__)

MARKER_FILE = "package.json"
CODE_CONTENT_TYPE = "application/javascript"
ICON_CONTENT_TYPE = "image/png"


class PublishOutcome(Enum):
    PUBLISHED = "published"
    SKIPPED = "skipped"
    PLANNED = "planned"


@dataclass(frozen=True)
class PublishTarget:
    """Object keys an adapter publishes to."""

    code_key: str
    icon_key: Optional[str] = None

    @classmethod
    def for_descriptor(
        cls, descriptor: AdapterDescriptor, versioned: bool
    ) -> "PublishTarget":
        if not versioned:
            return cls(code_key=f"{descriptor.id}/index.js")
        prefix = f"{descriptor.id}/{descriptor.version}"
        return cls(code_key=f"{prefix}/index.js", icon_key=f"{prefix}/icon.png")

    def keys(self) -> List[str]:
        return [k for k in (self.code_key, self.icon_key) if k]

    def icon_url(self, public_url: str) -> str:
        if not self.icon_key:
            raise ValueError("unversioned targets have no icon key")
        return f"{public_url.rstrip('/')}/{self.icon_key}"


@dataclass
class PublishResult:
    """Outcome of processing one adapter directory."""

    adapter_dir: str
    outcome: PublishOutcome
    adapter_id: Optional[str] = None
    version: Optional[str] = None
    keys: List[str] = field(default_factory=list)
    icon_url: Optional[str] = None
    synced: bool = False
    reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "adapter_dir": self.adapter_dir,
            "outcome": self.outcome.value,
            "adapter_id": self.adapter_id,
            "version": self.version,
            "keys": self.keys,
            "icon_url": self.icon_url,
            "synced": self.synced,
            "reason": self.reason,
        }


class AdapterPublisher:
    """Builds and publishes a single adapter directory at a time."""

    def __init__(
        self,
        config: DeployConfig,
        js_runtime: JSRuntimeAdapter,
        store: ObjectStoreAdapter,
        registry: Optional[RegistryClient] = None,
        repo_dir: Union[str, Path] = ".",
    ):
        if config.versioned and registry is None:
            raise ValueError("versioned publishing needs a registry client")
        self.config = config
        self.js_runtime = js_runtime
        self.store = store
        self.registry = registry
        self.repo_dir = Path(repo_dir)

    def _prepare(
        self, adapter_dir: str
    ) -> Optional[Tuple[Path, Path, AdapterDescriptor, PublishTarget]]:
        path = self.repo_dir / adapter_dir
        if not (path / MARKER_FILE).is_file():
            logger.info(
                "Skipping %s: no %s",
                adapter_dir,
                MARKER_FILE,
                extra={"adapter_dir": adapter_dir},
            )
            return None

        descriptor_file = path / self.config.descriptor_path
        descriptor = load_descriptor(descriptor_file, versioned=self.config.versioned)
        target = PublishTarget.for_descriptor(descriptor, self.config.versioned)
        if self.config.versioned:
            self._ensure_unpublished(target)
        return path, descriptor_file, descriptor, target

    def _ensure_unpublished(self, target: PublishTarget) -> None:
        for key in target.keys():
            if self.store.exists(key):
                raise VersionExistsError(key)

    def plan(self, adapter_dir: str) -> PublishResult:
        """Run the checks that precede the build and report the target keys.

        Nothing is installed, built, uploaded or synced.
        """
        prepared = self._prepare(adapter_dir)
        if prepared is None:
            return PublishResult(
                adapter_dir, PublishOutcome.SKIPPED, reason=f"no {MARKER_FILE}"
            )
        _, _, descriptor, target = prepared
        icon_url = target.icon_url(self.config.public_url) if target.icon_key else None
        return PublishResult(
            adapter_dir,
            PublishOutcome.PLANNED,
            adapter_id=descriptor.id,
            version=descriptor.version,
            keys=target.keys(),
            icon_url=icon_url,
        )

    def publish(self, adapter_dir: str) -> PublishResult:
        """Install, build, upload and sync one adapter.

        Returns:
            PublishResult with outcome PUBLISHED, or SKIPPED when the directory
            is not a package

        Raises:
            DeployError: Subclass naming the first step that failed
        """
        prepared = self._prepare(adapter_dir)
        if prepared is None:
            return PublishResult(
                adapter_dir, PublishOutcome.SKIPPED, reason=f"no {MARKER_FILE}"
            )
        path, descriptor_file, descriptor, target = prepared
        versioned = self.config.versioned
        log = adapter_logger(
            logger,
            adapter_dir=adapter_dir,
            adapter_id=descriptor.id,
            version=descriptor.version,
        )
        log.info("Processing %s (%s@%s)", adapter_dir, descriptor.id, descriptor.version)

        log.info("Installing dependencies...")
        install = self.js_runtime.install(cwd=path)
        if not install.ok:
            raise DependencyInstallError(
                f"{self.js_runtime.package_manager} install failed in {adapter_dir} "
                f"(exit {install.code}):\n{install.tail()}"
            )

        icon_url = None
        if versioned:
            icon_url = target.icon_url(self.config.public_url)
            write_icon(descriptor_file, icon_url)
            descriptor.icon = icon_url
            log.info("Set icon to %s", icon_url)

        log.info("Building asset...")
        build = self.js_runtime.build(cwd=path)
        if not build.ok:
            log.warning(
                "No build script or build failed (exit %s): %s", build.code, build.tail(5)
            )

        artifact = path / self.config.artifact_path
        if not artifact.is_file():
            raise ArtifactMissingError(
                f"Build artifact not found at {adapter_dir}/{self.config.artifact_path}."
            )

        icon_file = None
        if versioned:
            icon_file = path / self.config.icon_path
            if not icon_file.is_file():
                raise IconMissingError(
                    f"Icon not found at {adapter_dir}/{self.config.icon_path}."
                )

        conditional = versioned and self.config.conditional_writes
        self.store.upload_file(
            target.code_key, artifact, CODE_CONTENT_TYPE, if_not_exists=conditional
        )
        if icon_file is not None and target.icon_key:
            self.store.upload_file(
                target.icon_key, icon_file, ICON_CONTENT_TYPE, if_not_exists=conditional
            )

        synced = False
        if versioned:
            self.registry.sync(descriptor.sync_payload())
            synced = True

        log.info("Published %s", ", ".join(target.keys()))
        return PublishResult(
            adapter_dir,
            PublishOutcome.PUBLISHED,
            adapter_id=descriptor.id,
            version=descriptor.version,
            keys=target.keys(),
            icon_url=icon_url,
            synced=synced,
        )
