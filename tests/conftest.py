from pathlib import Path
import pytest

from nestsafe.sanitizing.registry import reset_registry

@pytest.fixture(scope="session")
def project_root() -> Path:
    return Path(__file__).resolve().parents[1]

@pytest.fixture(scope="session")
def cfg_path(project_root: Path) -> Path:
    # default location we agreed on
    return project_root / "config" / "config.toml"

@pytest.fixture(scope="session")
def cfg(cfg_path: Path):
    try:
        from nestsafe.config_model.model import load_config
    except Exception as e:
        pytest.skip(f"config loader not importable yet: {e}")
    return load_config(str(cfg_path))

@pytest.fixture
def tmp_out(tmp_path: Path) -> Path:
    d = tmp_path / "out"
    d.mkdir(parents=True, exist_ok=True)
    return d

@pytest.fixture(autouse=True)
def _clean_registry():
    # registry is process-wide; every test starts from the builtins, unfrozen
    reset_registry()
    yield
    reset_registry()
