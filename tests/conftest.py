"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from buildoracle.services.settings import EnvironmentSettings, set_active_settings
from buildoracle.utils.logging import setup_logging, teardown_logging
from tests.helpers import FakeEngine, ScriptedCommand

DOCUMENT_TEXT = "\n".join(
    [
        "Require Import lib.a lib.b.",
        "Definition one := 1.",
        "Definition two := 2.",
        "Lemma l : one + one = two.",
        "Proof. reflexivity. Qed.",
        "Require Import dep1.",
        "Definition three := 3.",
        "Definition four := 4.",
        "Definition five := 5.",
        "Require Import lib.a lib.b.",
        "Definition six := 6.",
    ]
)


@pytest.fixture(scope="session", autouse=True)
def run_log(tmp_path_factory: pytest.TempPathFactory):
    path = setup_logging(tmp_path_factory.mktemp("logs"))
    yield path
    teardown_logging()


@pytest.fixture(autouse=True)
def reset_active_settings():
    previous = set_active_settings(EnvironmentSettings())
    yield
    set_active_settings(previous)


@pytest.fixture
def dependency_files(tmp_path: Path) -> dict[str, Path]:
    source = tmp_path / "dep1.v"
    compiled = tmp_path / "dep1.vo"
    source.write_text("Definition d := 0.\n", encoding="utf-8")
    compiled.write_bytes(b"compiled")
    return {"source": source, "compiled": compiled}


@pytest.fixture
def engine(dependency_files: dict[str, Path]) -> FakeEngine:
    commands = {
        1: ScriptedCommand(ancestors=("lib/a.vo", "lib/b.vo")),
        6: ScriptedCommand(ancestors=(str(dependency_files["compiled"]),), rebuilds=(dependency_files["compiled"],)),
        10: ScriptedCommand(ancestors=("lib/a.vo", "lib/b.vo")),
    }
    return FakeEngine(DOCUMENT_TEXT, commands)
