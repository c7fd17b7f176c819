"""Version Control System integrations."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from ..errors import ChangeDetectionError
from .process import ProcessResult, ProcessRunner

logger = logging.getLogger(__name__)


@dataclass
class ToolVersion:
    """Version information for an external tool."""

    version: str
    tool: str

    def __str__(self) -> str:
        return f"{self.tool} {self.version}"


class VCSAdapter:
    """Adapter for the git operations the deploy needs."""

    def __init__(
        self,
        runner: ProcessRunner,
        repo_dir: Union[str, Path] = ".",
        git_path: str = "git",
    ):
        """Initialize VCS adapter.

        Args:
            runner: ProcessRunner instance
            repo_dir: Working tree the commands run in
            git_path: git executable
        """
        self.runner = runner
        self.repo_dir = Path(repo_dir)
        self.git_path = git_path

    def _git(self, *args: str) -> ProcessResult:
        return self.runner.run([self.git_path, *args], cwd=self.repo_dir)

    def version(self) -> ToolVersion:
        """Get git version information."""
        result = self._git("--version")
        if result.ok:
            version_str = result.stdout.strip()
            # "git version X.Y.Z"
            if "git version" in version_str:
                version_num = version_str.split("git version")[1].strip()
            else:
                version_num = version_str
            return ToolVersion(version=version_num, tool="git")
        return ToolVersion(version="unknown", tool="git")

    def rev_parse(self, rev: str) -> Optional[str]:
        """Resolve a revision to a commit sha, or None if it does not exist."""
        result = self._git("rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}")
        if result.ok:
            return result.stdout.strip()
        return None

    def changed_files(self, base: str = "HEAD~1", head: str = "HEAD") -> List[str]:
        """List paths changed between two commits.

        Args:
            base: Older revision
            head: Newer revision

        Returns:
            Repository-relative paths, in the order git reports them

        Raises:
            ChangeDetectionError: If git cannot diff the range
        """
        # unquoted so non-ASCII paths keep their directory prefix
        result = self._git("-c", "core.quotePath=false", "diff", "--name-only", base, head)
        if not result.ok:
            hint = ""
            if self.rev_parse(base) is None:
                hint = (
                    f" Revision {base!r} is not available; shallow clones need"
                    " a fetch depth of at least 2."
                )
            raise ChangeDetectionError(
                f"git diff {base} {head} failed ({result.code}): "
                f"{result.stderr.strip() or result.details}.{hint}"
            )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def create_vcs_adapter(
    runner: ProcessRunner, repo_dir: Union[str, Path] = "."
) -> VCSAdapter:
    """Create a VCS adapter instance.

    Args:
        runner: ProcessRunner instance
        repo_dir: Repository working tree

    Returns:
        VCSAdapter instance
    """
    return VCSAdapter(runner, repo_dir)
