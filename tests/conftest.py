import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest
from fastapi import FastAPI
from structlog.testing import capture_logs

from routefuse.models import DiscoveryConfig

ROUTER_SOURCE = """
from fastapi import APIRouter

router = APIRouter()


@router.get("{route}")
def handle():
    return {{"source": "{source}"}}
"""


def router_source(route: str, source: str) -> str:
    return ROUTER_SOURCE.format(route=route, source=source)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def write_file(project: Path) -> Callable[[str, str], Path]:
    """Write a file relative to the project root, creating parent directories."""

    def write(relative: str, content: str = "") -> Path:
        path = project / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content))
        return path

    return write


@pytest.fixture
def write_router(write_file: Callable[[str, str], Path]) -> Callable[..., Path]:
    def write(relative: str, route: str = "/item", source: str | None = None) -> Path:
        return write_file(relative, router_source(route, source or relative))

    return write


@pytest.fixture
def config(project: Path) -> DiscoveryConfig:
    return DiscoveryConfig(root_path=project)


@pytest.fixture
def app() -> FastAPI:
    return FastAPI()


@pytest.fixture
def captured_logs():
    with capture_logs() as logs:
        yield logs
