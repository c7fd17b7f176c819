"""Find the adapter directories touched by a commit range."""

import logging
from pathlib import PurePosixPath
from typing import Iterable, List

from .integrations.vcs import VCSAdapter

logger = logging.getLogger(__name__)


def affected_adapter_dirs(paths: Iterable[str], root: str = "adapters") -> List[str]:
    """Map changed file paths to the adapter directories containing them.

    Only files strictly inside ``<root>/<name>/`` count; files sitting
    directly in ``<root>`` or outside it are ignored. Order is first-seen.

    >>> affected_adapter_dirs(["adapters/foo/src/x.ts", "README.md"])
    ['adapters/foo']
    """
    root_parts = PurePosixPath(root).parts
    depth = len(root_parts)
    seen = set()
    result: List[str] = []
    for path in paths:
        parts = PurePosixPath(path.strip()).parts
        if len(parts) < depth + 2 or parts[:depth] != root_parts:
            continue
        adapter_dir = "/".join(parts[: depth + 1])
        if adapter_dir not in seen:
            seen.add(adapter_dir)
            result.append(adapter_dir)
    return result


def detect_changed_adapters(
    vcs: VCSAdapter,
    base: str = "HEAD~1",
    head: str = "HEAD",
    root: str = "adapters",
) -> List[str]:
    """Diff ``base..head`` and return the changed adapter directories.

    Raises:
        ChangeDetectionError: If the range cannot be diffed
    """
    changed = vcs.changed_files(base, head)
    adapters = affected_adapter_dirs(changed, root)
    logger.info(
        "%d file(s) changed between %s and %s, %d adapter(s) affected",
        len(changed),
        base,
        head,
        len(adapters),
    )
    return adapters
