"""JavaScript package manager integrations (bun, npm, pnpm)."""

import logging
from pathlib import Path
from typing import List, Optional, Union

from ..errors import ToolNotFoundError
from .process import ProcessResult, ProcessRunner
from .vcs import ToolVersion

logger = logging.getLogger(__name__)

SUPPORTED_PACKAGE_MANAGERS = ("bun", "npm", "pnpm")


class JSRuntimeAdapter:
    """Adapter for package manager operations inside an adapter directory."""

    def __init__(self, runner: ProcessRunner, package_manager: str = "bun"):
        """Initialize JS runtime adapter.

        Args:
            runner: ProcessRunner instance
            package_manager: One of SUPPORTED_PACKAGE_MANAGERS
        """
        if package_manager not in SUPPORTED_PACKAGE_MANAGERS:
            raise ValueError(
                f"Unsupported package manager {package_manager!r}; "
                f"expected one of {', '.join(SUPPORTED_PACKAGE_MANAGERS)}"
            )
        self.runner = runner
        self.package_manager = package_manager

    def ensure_available(self) -> None:
        """Raise ToolNotFoundError if the package manager is not on PATH."""
        if not self.runner.check_tool_available(self.package_manager):
            raise ToolNotFoundError(f"{self.package_manager} not found on PATH")

    def version(self) -> ToolVersion:
        """Get package manager version information."""
        result = self.runner.run([self.package_manager, "--version"])
        if result.ok:
            return ToolVersion(
                version=result.stdout.strip().lstrip("v"), tool=self.package_manager
            )
        return ToolVersion(version="unknown", tool=self.package_manager)

    def install(
        self, cwd: Union[str, Path], package: Optional[str] = None
    ) -> ProcessResult:
        """Install dependencies.

        Args:
            cwd: Package directory
            package: Specific package to add (optional)

        Returns:
            ProcessResult from the install
        """
        if package:
            verb = "install" if self.package_manager == "npm" else "add"
            return self.runner.run([self.package_manager, verb, package], cwd=cwd)
        return self.runner.run([self.package_manager, "install"], cwd=cwd)

    def run_script(
        self, script: str, cwd: Union[str, Path], args: Optional[List[str]] = None
    ) -> ProcessResult:
        """Run a package.json script.

        Args:
            script: Script name to run
            cwd: Package directory
            args: Additional arguments (optional)

        Returns:
            ProcessResult from the script
        """
        cmd = [self.package_manager, "run", script]
        if args:
            cmd += ["--", *args]
        return self.runner.run(cmd, cwd=cwd)

    def build(self, cwd: Union[str, Path]) -> ProcessResult:
        """Run the build script."""
        return self.run_script("build", cwd=cwd)


def create_js_runtime_adapter(
    runner: ProcessRunner, package_manager: str = "bun"
) -> JSRuntimeAdapter:
    """Create a JS runtime adapter instance.

    Args:
        runner: ProcessRunner instance
        package_manager: Package manager executable name

    Returns:
        JSRuntimeAdapter instance
    """
    return JSRuntimeAdapter(runner, package_manager)
