import json
from pathlib import Path

import pytest
from structlog.testing import capture_logs

from routefuse import __main__ as cli

SAMPLE_PROJECT = Path(__file__).parent / "test_data" / "sample_project"


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch: pytest.MonkeyPatch):
    # global structlog configuration would leak into other tests
    monkeypatch.setattr(cli, "setup_logging", lambda settings: None)
    with capture_logs():
        yield


def test_prints_discovered_route_table(capsys: pytest.CaptureFixture[str]):
    exit_code = cli.main([str(SAMPLE_PROJECT), "--exclude", "build"])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out) == [
        {"method": "GET", "path": "/items/{item_id}"},
        {"method": "DELETE", "path": "/admin/items/{item_id}"},
        {"method": "GET", "path": "/users"},
        {"method": "POST", "path": "/users"},
    ]


def test_excluded_folder_is_scanned_without_filter(capsys: pytest.CaptureFixture[str]):
    exit_code = cli.main([str(SAMPLE_PROJECT), "--exclude", ""])

    assert exit_code == 0
    table = json.loads(capsys.readouterr().out)
    assert table[0] == {"method": "GET", "path": "/generated"}


def test_missing_project_path(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    exit_code = cli.main([str(tmp_path / "missing")])

    assert exit_code == 1
    assert "Unable to read directory" in capsys.readouterr().err
