from __future__ import annotations
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any
import pytest
from promptline.context import Context, Deadline


class FakeRunner:
    def __init__(self, outputs: dict[tuple[str, ...], str] | None = None) -> None:
        self.outputs = outputs or {}
        self.calls: list[tuple[tuple[str, ...], float]] = []

    def __call__(self, *argv: str, timeout: float) -> str | None:
        self.calls.append((argv, timeout))
        return self.outputs.get(argv)


@pytest.fixture
def make_ctx(tmp_path: Path) -> Callable[..., Context]:
    def make(**kwargs: Any) -> Context:
        fields: dict[str, Any] = {
            "env": {"HOME": "/home/jdoe"},
            "cwd": Path("/home/jdoe/work"),
            "user": "jdoe",
            "hostname": "firefly",
            "dirstack": 0,
            "loadavg": None,
            "now": datetime(2026, 10, 19, 14, 5, 9),
            "runner": FakeRunner(),
            "deadline": Deadline(5),
            "root": tmp_path / "root",
        }
        fields.update(kwargs)
        return Context(**fields)

    return make
