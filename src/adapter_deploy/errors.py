"""Error taxonomy for the deploy pipeline.

Every failure is fatal for the job: the CLI catches ``DeployError`` and exits 1.
"""

from typing import List, Optional


class DeployError(Exception):
    """Base class for all deploy failures."""


class ConfigError(DeployError):
    """Required configuration is missing or invalid."""

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("Invalid configuration: " + "; ".join(self.problems))


class ToolNotFoundError(DeployError):
    """An external tool (git, bun, npm...) is not on PATH."""


class ChangeDetectionError(DeployError):
    """The commit range could not be diffed."""


class DescriptorError(DeployError):
    """Base class for adapter.json problems."""


class MissingDescriptorError(DescriptorError):
    pass


class InvalidDescriptorError(DescriptorError):
    pass


class VersionExistsError(DeployError):
    """The target version is already published."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(
            f"Object {key} already exists; published versions are immutable. "
            "Bump the version in src/adapter.json."
        )


class DependencyInstallError(DeployError):
    pass


class ArtifactMissingError(DeployError):
    pass


class IconMissingError(DeployError):
    pass


class ObjectStoreError(DeployError):
    """Unexpected failure talking to the object store."""


class RegistrySyncError(DeployError):
    """The registry sync endpoint rejected or did not receive the payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
