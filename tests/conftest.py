"""
Shared test configuration for adapter-deploy.

Provides:
- A fully populated DeployConfig
- A factory for adapter directories on disk
- In-memory fakes for the process runner, object store and registry
"""

import json
import shutil
import subprocess
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

from adapter_deploy.config import DeployConfig
from adapter_deploy.contracts.models import PublishMode
from adapter_deploy.errors import VersionExistsError
from adapter_deploy.integrations.js_runtime import JSRuntimeAdapter
from adapter_deploy.integrations.process import ProcessResult
from adapter_deploy.publisher import AdapterPublisher

PUBLIC_URL = "https://cdn.example.com"


# Fakes


class FakeRunner:
    """ProcessRunner stand-in that records commands instead of running them."""

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self.results: Dict[str, ProcessResult] = {}
        self.hooks: Dict[str, Callable[[Path], None]] = {}
        self.available = True

    def respond(self, subcommand: str, code: int = 0, stdout: str = "", stderr: str = ""):
        self.results[subcommand] = ProcessResult(code=code, stdout=stdout, stderr=stderr)

    def on(self, subcommand: str, hook: Callable[[Path], None]):
        self.hooks[subcommand] = hook

    def run(self, command, cwd=None, env=None, timeout=None) -> ProcessResult:
        self.calls.append({"command": list(command), "cwd": cwd})
        key = " ".join(command[1:])
        if key in self.hooks:
            self.hooks[key](Path(cwd))
        return self.results.get(key, ProcessResult(code=0, stdout="", stderr=""))

    def check_tool_available(self, tool_name: str) -> bool:
        return self.available

    @property
    def commands(self) -> List[List[str]]:
        return [c["command"] for c in self.calls]


class FakeStore:
    """ObjectStoreAdapter stand-in backed by a dict."""

    def __init__(self, existing: Optional[List[str]] = None):
        self.objects: Dict[str, Dict[str, Any]] = {k: {} for k in (existing or [])}
        self.checked: List[str] = []
        self.uploads: List[Dict[str, Any]] = []
        self.bucket = "test-bucket"

    def exists(self, key: str) -> bool:
        self.checked.append(key)
        return key in self.objects

    def upload_file(self, key, path, content_type, if_not_exists=False):
        if if_not_exists and key in self.objects:
            raise VersionExistsError(key)
        body = Path(path).read_bytes()
        self.objects[key] = {"body": body, "content_type": content_type}
        self.uploads.append(
            {"key": key, "content_type": content_type, "if_not_exists": if_not_exists}
        )


class FakeRegistry:
    def __init__(self):
        self.payloads: List[Dict[str, Any]] = []

    def sync(self, payload: Dict[str, Any]) -> None:
        self.payloads.append(payload)


# Core Fixtures


@pytest.fixture
def deploy_config() -> DeployConfig:
    return DeployConfig(
        account_id="acct123",
        access_key_id="AKIDEXAMPLE",
        secret_access_key="secret",
        bucket="test-bucket",
        public_url=PUBLIC_URL,
        sync_endpoint="https://registry.example.com/api/sync",
        sync_token="sync-token",
        mode=PublishMode.versioned,
    )


@pytest.fixture
def unversioned_config(deploy_config) -> DeployConfig:
    deploy_config.mode = PublishMode.unversioned
    return deploy_config


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def fake_registry() -> FakeRegistry:
    return FakeRegistry()


def write_build_output(adapter_path: Path) -> None:
    dist = adapter_path / "dist"
    dist.mkdir(exist_ok=True)
    (dist / "index.js").write_text("export default {};\n", encoding="utf-8")


@pytest.fixture
def building_runner(fake_runner) -> FakeRunner:
    """Runner whose ``run build`` writes dist/index.js like a real build."""
    fake_runner.on("run build", write_build_output)
    return fake_runner


@pytest.fixture
def make_adapter(tmp_path) -> Callable[..., Path]:
    """Create ``adapters/<name>`` under tmp_path and return its path."""

    def _make(
        name: str,
        descriptor: Optional[Dict[str, Any]] = None,
        package_json: bool = True,
        icon: bool = True,
        built: bool = False,
    ) -> Path:
        path = tmp_path / "adapters" / name
        (path / "src").mkdir(parents=True)
        if package_json:
            (path / "package.json").write_text(
                json.dumps({"name": name, "scripts": {"build": "bun build"}}),
                encoding="utf-8",
            )
        if descriptor is not None:
            (path / "src" / "adapter.json").write_text(
                json.dumps(descriptor, indent=2), encoding="utf-8"
            )
        if icon:
            (path / "src" / "icon.png").write_bytes(b"\x89PNG\r\n\x1a\nfake")
        if built:
            write_build_output(path)
        return path

    return _make


@pytest.fixture
def make_publisher(tmp_path, deploy_config, fake_store, fake_registry):
    def _make(runner, config: Optional[DeployConfig] = None) -> AdapterPublisher:
        config = config or deploy_config
        registry = fake_registry if config.versioned else None
        return AdapterPublisher(
            config,
            JSRuntimeAdapter(runner, config.package_manager),
            fake_store,
            registry,
            repo_dir=tmp_path,
        )

    return _make


# Git helpers


def git(repo: Path, *args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        ["git", "-c", "user.name=Test", "-c", "user.email=test@example.com", *args],
        cwd=str(repo),
        capture_output=True,
        text=True,
        check=True,
    )


def commit_files(repo: Path, files: Dict[str, str], message: str) -> None:
    for rel, content in files.items():
        target = repo / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    git(repo, "add", "-A")
    git(repo, "commit", "-q", "-m", message)


@pytest.fixture
def commit() -> Callable[[Path, Dict[str, str], str], None]:
    return commit_files


@pytest.fixture
def git_repo(tmp_path) -> Path:
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    commit_files(repo, {"README.md": "# Adapters\n"}, "chore: init")
    return repo


def pytest_collection_modifyitems(config, items):
    """Mark tests by directory."""
    for item in items:
        test_path = str(item.fspath)
        if "unit" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "integration" in test_path:
            item.add_marker(pytest.mark.integration)
