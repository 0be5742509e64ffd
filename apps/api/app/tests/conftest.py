import stat
import sys
import textwrap
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import app
from app.modules.backends.base import ExecutionBackend
from app.modules.backends.selector import BackendSelector, get_backend_selector
from app.modules.staging.service import StagingArea, get_staging_area


@pytest.fixture()
def work_dir(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture()
def staging(work_dir: Path) -> StagingArea:
    return StagingArea(work_dir / "uploads", work_dir / "signed")


@pytest.fixture()
def gateway_settings(work_dir: Path) -> Settings:
    return Settings(work_dir=work_dir, c2pa_mode="local")


@pytest.fixture()
def selector(gateway_settings: Settings) -> BackendSelector:
    return BackendSelector(gateway_settings, probe=lambda _: False)


@pytest.fixture()
def install_backend(selector: BackendSelector) -> Callable[[ExecutionBackend], None]:
    def _install(backend: ExecutionBackend) -> None:
        selector.install(backend)

    return _install


@pytest.fixture()
def client(staging: StagingArea, selector: BackendSelector) -> Iterator[TestClient]:
    app.dependency_overrides[get_staging_area] = lambda: staging
    app.dependency_overrides[get_backend_selector] = lambda: selector
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def make_tool(tmp_path: Path) -> Callable[[str], Path]:
    """Writes an executable stand-in for c2patool whose body sees ``args``."""

    def _make(body: str) -> Path:
        path = tmp_path / "bin" / "c2patool"
        path.parent.mkdir(exist_ok=True)
        script = f"#!{sys.executable}\nimport shutil, sys\nargs = sys.argv[1:]\n"
        path.write_text(script + textwrap.dedent(body), encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _make
