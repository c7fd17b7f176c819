"""
Deploy pipeline: detect changed adapters, then publish them one at a time.

Processing is sequential in detection order and stops at the first failure;
artifacts already uploaded for earlier adapters are left in place.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from .config import DeployConfig
from .detector import detect_changed_adapters
from .integrations.js_runtime import JSRuntimeAdapter, create_js_runtime_adapter
from .integrations.object_store import create_object_store
from .integrations.process import ProcessRunner
from .integrations.registry import RegistryClient
from .integrations.vcs import VCSAdapter, create_vcs_adapter
from .publisher import AdapterPublisher, PublishOutcome, PublishResult

logger = logging.getLogger(__name__)


@dataclass
class DeploySummary:
    """Result from a deploy run."""

    base: Optional[str] = None
    head: Optional[str] = None
    changed: List[str] = field(default_factory=list)
    results: List[PublishResult] = field(default_factory=list)
    dry_run: bool = False

    @property
    def nothing_to_do(self) -> bool:
        return not self.changed

    def by_outcome(self, outcome: PublishOutcome) -> List[PublishResult]:
        return [r for r in self.results if r.outcome == outcome]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base": self.base,
            "head": self.head,
            "dry_run": self.dry_run,
            "changed": self.changed,
            "results": [r.to_dict() for r in self.results],
        }


class Deployer:
    """Runs the change detector and the publisher in sequence."""

    def __init__(
        self,
        config: DeployConfig,
        vcs: VCSAdapter,
        publisher: AdapterPublisher,
        js_runtime: JSRuntimeAdapter,
    ):
        self.config = config
        self.vcs = vcs
        self.publisher = publisher
        self.js_runtime = js_runtime

    def detect(self, base: str = "HEAD~1", head: str = "HEAD") -> List[str]:
        return detect_changed_adapters(self.vcs, base, head, self.config.adapters_root)

    def run(
        self, base: str = "HEAD~1", head: str = "HEAD", dry_run: bool = False
    ) -> DeploySummary:
        """Deploy every adapter changed between ``base`` and ``head``."""
        changed = self.detect(base, head)
        summary = DeploySummary(base=base, head=head, changed=changed, dry_run=dry_run)
        if not changed:
            logger.info("No adapters were changed. Nothing to deploy.")
            return summary

        logger.info("Found changed adapters to deploy: %s", ", ".join(changed))
        summary.results = self.publish_dirs(changed, dry_run=dry_run)
        return summary

    def publish_dirs(
        self, adapter_dirs: Sequence[str], dry_run: bool = False
    ) -> List[PublishResult]:
        """Publish (or plan) each directory in order, failing fast."""
        if not dry_run:
            self._preflight()

        results = []
        for adapter_dir in adapter_dirs:
            if dry_run:
                results.append(self.publisher.plan(adapter_dir))
            else:
                results.append(self.publisher.publish(adapter_dir))
        return results

    def _preflight(self) -> None:
        self.js_runtime.ensure_available()
        logger.info(
            "Using %s and %s (%s mode)",
            self.vcs.version(),
            self.js_runtime.version(),
            self.config.mode.value,
        )


def create_deployer(
    config: DeployConfig,
    repo_dir: Union[str, Path] = ".",
    runner: Optional[ProcessRunner] = None,
    s3_client: Optional[Any] = None,
) -> Deployer:
    """Wire a Deployer from a validated configuration.

    Args:
        config: Validated deploy configuration
        repo_dir: Repository working tree
        runner: ProcessRunner to use (optional)
        s3_client: Pre-built boto3 S3 client (optional)

    Returns:
        Deployer instance
    """
    runner = runner or ProcessRunner()
    vcs = create_vcs_adapter(runner, repo_dir)
    js_runtime = create_js_runtime_adapter(runner, config.package_manager)
    store = create_object_store(config, client=s3_client)
    registry = None
    if config.versioned:
        registry = RegistryClient(
            config.sync_endpoint, config.sync_token, timeout=config.sync_timeout
        )
    publisher = AdapterPublisher(config, js_runtime, store, registry, repo_dir=repo_dir)
    return Deployer(config, vcs, publisher, js_runtime)
