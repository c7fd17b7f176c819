"""Process execution utilities for tool integrations."""

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """Result of a process execution."""

    code: int
    stdout: str
    stderr: str
    ok: bool = False
    details: str = ""

    def __post_init__(self):
        self.ok = self.code == 0
        if not self.details:
            self.details = self.stderr if self.stderr else "Process completed"

    def tail(self, lines: int = 20) -> str:
        """Last lines of combined output, for error messages."""
        combined = "\n".join(part for part in (self.stdout, self.stderr) if part)
        return "\n".join(combined.strip().splitlines()[-lines:])


class ProcessRunner:
    """Execute external processes and report the outcome as a ProcessResult.

    Commands are always argument lists; nothing goes through a shell.
    """

    def __init__(self, default_timeout: Optional[int] = None):
        """Initialize ProcessRunner.

        Args:
            default_timeout: Timeout in seconds applied when run() gets none
        """
        self.default_timeout = default_timeout
        self.logger = logging.getLogger(__name__)

    def run(
        self,
        command: List[str],
        cwd: Optional[Union[str, Path]] = None,
        env: Optional[Dict[str, str]] = None,
        timeout: Optional[int] = None,
    ) -> ProcessResult:
        """Run a command and return the result.

        Args:
            command: Command and arguments to execute
            cwd: Working directory for the command
            env: Environment variables (inherits the current environment if None)
            timeout: Timeout in seconds

        Returns:
            ProcessResult with execution details
        """
        timeout = timeout if timeout is not None else self.default_timeout
        cmd_str = " ".join(command)
        self.logger.info("Running: %s", cmd_str, extra={"cwd": str(cwd or ".")})

        try:
            result = subprocess.run(
                command,
                cwd=str(cwd) if cwd is not None else None,
                env=env,
                timeout=timeout,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )

            return ProcessResult(
                code=result.returncode,
                stdout=result.stdout or "",
                stderr=result.stderr or "",
                details=result.stderr if result.returncode != 0 else "Success",
            )

        except subprocess.TimeoutExpired as e:
            return ProcessResult(
                code=-1,
                stdout=_decode(e.stdout),
                stderr=_decode(e.stderr),
                details=f"Command timed out after {timeout} seconds",
            )

        except FileNotFoundError as e:
            return ProcessResult(
                code=127,
                stdout="",
                stderr=str(e),
                details=f"Command not found: {command[0]}",
            )

        except OSError as e:
            return ProcessResult(
                code=-1,
                stdout="",
                stderr=str(e),
                details=f"Process execution failed: {e}",
            )

    def check_tool_available(self, tool_name: str) -> bool:
        """Check if a tool is available in PATH."""
        return shutil.which(tool_name) is not None


def _decode(output: Union[bytes, str, None]) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode(errors="replace")
    return output
