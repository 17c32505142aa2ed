from __future__ import annotations

import tomllib
from pathlib import Path

PYPROJECT = Path(__file__).resolve().parent.parent / "pyproject.toml"


def load_project() -> dict:
    with PYPROJECT.open("rb") as handle:
        return tomllib.load(handle)["project"]


def test_no_long_description_file() -> None:
    assert "readme" not in load_project()


def test_firestore_sdk_is_a_runtime_dependency() -> None:
    names = [dep.split(">")[0].split("[")[0] for dep in load_project()["dependencies"]]
    assert "google-cloud-firestore" in names
    assert "httpx" not in names
