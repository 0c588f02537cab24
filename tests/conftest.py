"""
Pytest configuration and shared fixtures for the ue-builder test suite.

This module provides common fixtures, test utilities, and configuration
for all test modules in the ue-builder project. Orchestrator tests run a
fake UnrealBuildTool: a Python script installed at the real toolchain
location and executed with ``sys.executable`` as the host runtime.
"""

import json
import shutil
import sys
import tempfile
import textwrap
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "e2e: mark test as an end-to-end test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


# ============================================================================
# Fake toolchain
# ============================================================================

FAKE_UBT_SOURCE = textwrap.dedent(
    """
    import json
    import sys
    import time
    from pathlib import Path

    here = Path(__file__).resolve().parent
    behavior_file = here / "behavior.json"
    behavior = json.loads(behavior_file.read_text()) if behavior_file.exists() else {}
    args = sys.argv[1:]

    with open(here / "invocations.log", "a", encoding="utf-8") as f:
        f.write(" ".join(args) + "\\n")

    if "-ProjectFiles" in args:
        print("Generating project files...")
        print("")
        print("   ")
        print("Project files generated.")
        sys.stdout.flush()
        sys.exit(behavior.get("regen_exit", 0))

    print(f"Building {args[0]}...")
    for line in behavior.get("lines", []):
        print(line)
    sys.stdout.flush()
    print("warning: fake toolchain warning", file=sys.stderr)
    sys.stderr.flush()
    time.sleep(behavior.get("compile_sleep", 0))
    sys.exit(behavior.get("compile_exit", 0))
    """
)


class FakeEngine:
    """An engine root whose UnrealBuildTool.dll is a scriptable Python program."""

    def __init__(self, root: Path):
        self.root = root
        self.ubt_dir = root / "Engine" / "Binaries" / "DotNET" / "UnrealBuildTool"
        self.entry_point = self.ubt_dir / "UnrealBuildTool.dll"
        self.host_runtime = sys.executable

    def install(self) -> "FakeEngine":
        self.ubt_dir.mkdir(parents=True, exist_ok=True)
        self.entry_point.write_text(FAKE_UBT_SOURCE, encoding="utf-8")
        return self

    def configure(
        self,
        compile_exit: int = 0,
        regen_exit: int = 0,
        compile_sleep: float = 0,
        lines: Optional[List[str]] = None,
    ) -> None:
        behavior = {
            "compile_exit": compile_exit,
            "regen_exit": regen_exit,
            "compile_sleep": compile_sleep,
            "lines": lines or [],
        }
        (self.ubt_dir / "behavior.json").write_text(json.dumps(behavior), encoding="utf-8")

    def invocations(self) -> List[List[str]]:
        log_file = self.ubt_dir / "invocations.log"
        if not log_file.exists():
            return []
        return [line.split(" ") for line in log_file.read_text(encoding="utf-8").splitlines()]


def make_project(
    base_dir: Path,
    name: str = "Foo",
    targets: Optional[List[str]] = None,
    artifacts: bool = False,
) -> Path:
    """
    Create a project directory with a .uproject file and Source targets.

    Args:
        base_dir: Directory to create the project in
        name: Project name; the project file is ``<name>.uproject``
        targets: Target names to create as ``Source/<name>.Target.cs``
        artifacts: Also create Binaries/Intermediate/Saved/.vs and a solution file

    Returns:
        Path to the .uproject file
    """
    project_dir = base_dir / name
    source_dir = project_dir / "Source"
    source_dir.mkdir(parents=True, exist_ok=True)
    project_file = project_dir / f"{name}.uproject"
    project_file.write_text('{"FileVersion": 3}', encoding="utf-8")

    for target in targets if targets is not None else [name, f"{name}Editor"]:
        (source_dir / f"{target}.Target.cs").write_text("// target\n", encoding="utf-8")

    if artifacts:
        for dir_name in ("Binaries", "Intermediate", "Saved", ".vs"):
            (project_dir / dir_name / "sub").mkdir(parents=True, exist_ok=True)
            (project_dir / dir_name / "sub" / "data.bin").write_bytes(b"\x00\x01")
        (project_dir / f"{name}.sln").write_text("solution", encoding="utf-8")

    return project_file


@pytest.fixture
def fake_engine(temp_dir):
    """An installed fake engine with a successful default behavior."""
    engine = FakeEngine(temp_dir / "UE_5.3").install()
    engine.configure()
    return engine


@pytest.fixture
def fake_project(temp_dir):
    """A project 'Foo' with Foo and FooEditor targets and build artifacts."""
    return make_project(temp_dir / "Projects", "Foo", artifacts=True)


@pytest.fixture
def sample_config_data(fake_engine, fake_project) -> Dict[str, Any]:
    """Configuration data pointing at the fake engine and project."""
    return {
        "engine": {
            "root": str(fake_engine.root),
            "host_runtime": fake_engine.host_runtime,
        },
        "build": {
            "platform": "Win64",
            "configuration": "Development",
            "poll_interval_seconds": 0.02,
            "kill_timeout_seconds": 5.0,
        },
        "projects": [
            {"name": "Foo", "path": str(fake_project), "target": ""},
        ],
    }


@pytest.fixture
def config_file(temp_dir, sample_config_data):
    """Write the sample configuration to a config.toml."""
    import toml

    config_path = temp_dir / "config.toml"
    with open(config_path, "w") as f:
        toml.dump(sample_config_data, f)
    return config_path


# ============================================================================
# Test Utilities
# ============================================================================


class TestUtils:
    """Utility functions for testing."""

    make_project = staticmethod(make_project)

    @staticmethod
    def collect_lines(handle, timeout: float = 30.0) -> List[str]:
        """Wait for a build to finish and return everything it logged."""
        handle.wait(timeout)
        assert handle.finished, f"build did not finish within {timeout}s"
        return list(handle.log)


@pytest.fixture
def test_utils():
    """Provide test utility functions."""
    return TestUtils


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear configuration cache after each test."""
    from uebuilder.config import clear_config_cache, get_config_path, set_config_path

    original_config_path = get_config_path()

    yield  # Run the test

    clear_config_cache()
    set_config_path(original_config_path)
