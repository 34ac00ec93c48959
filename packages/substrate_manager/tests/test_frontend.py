from __future__ import annotations

from pathlib import Path

import pytest

from substrate_manager import frontend
from substrate_manager.errors import DestinationExistsError
from substrate_manager.frontend import FRONTEND_TEMPLATE_REMOTE, clone_frontend_argv, generate_frontend, start_frontend


@pytest.fixture
def calls(monkeypatch: pytest.MonkeyPatch) -> list[tuple[list[str], Path | None]]:
    recorded: list[tuple[list[str], Path | None]] = []

    def fake_run(argv, *, cwd=None, **kwargs):
        recorded.append((list(argv), cwd))

    monkeypatch.setattr(frontend, "run_command", fake_run)
    return recorded


def test_clone_argv_uses_the_template_remote(tmp_path: Path) -> None:
    assert clone_frontend_argv(tmp_path / "frontend") == [
        "git",
        "clone",
        FRONTEND_TEMPLATE_REMOTE,
        str(tmp_path / "frontend"),
    ]


def test_generate_clones_then_installs(tmp_path: Path, calls: list[tuple[list[str], Path | None]]) -> None:
    dest = tmp_path / "frontend"

    generate_frontend(dest)

    assert calls == [
        (clone_frontend_argv(dest), None),
        (["yarn", "install"], dest),
    ]


def test_generate_refuses_existing_directory(tmp_path: Path, calls: list[tuple[list[str], Path | None]]) -> None:
    dest = tmp_path / "frontend"
    dest.mkdir()

    with pytest.raises(DestinationExistsError):
        generate_frontend(dest)
    assert calls == []


def test_start_runs_yarn_start(tmp_path: Path, calls: list[tuple[list[str], Path | None]]) -> None:
    start_frontend(tmp_path)
    assert calls == [(["yarn", "start"], tmp_path)]
