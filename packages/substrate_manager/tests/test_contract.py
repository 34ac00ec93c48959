from __future__ import annotations

from pathlib import Path

import pytest

from substrate_manager import contract
from substrate_manager.contract import CONTRACTS_UI_URL, build_contract, build_contract_argv, open_contracts_ui


def test_build_contract_argv() -> None:
    assert build_contract_argv() == ["cargo-contract", "contract", "build", "--release"]
    assert build_contract_argv(release=False) == ["cargo-contract", "contract", "build"]


def test_build_contract_runs_in_the_contract_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, object] = {}

    def fake_run(argv, *, cwd=None, capture=True, **kwargs):
        seen.update(argv=list(argv), cwd=cwd, capture=capture)

    monkeypatch.setattr(contract, "run_command", fake_run)

    build_contract(cwd=tmp_path, release=False)

    assert seen == {"argv": ["cargo-contract", "contract", "build"], "cwd": tmp_path, "capture": False}


def test_open_contracts_ui(monkeypatch: pytest.MonkeyPatch) -> None:
    opened: list[str] = []
    monkeypatch.setattr(contract.webbrowser, "open", lambda url: opened.append(url) or True)

    assert open_contracts_ui() is True
    assert opened == [CONTRACTS_UI_URL]
