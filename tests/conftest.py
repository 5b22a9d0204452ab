from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from app.main import app


def make_activity(title: str, completed: bool = False, needs_resume: bool = False, **extra: Any) -> dict:
    return {"titulo": title, "completed": completed, "needs_resume": needs_resume, **extra}


def make_module(title: str, *activities: dict, **extra: Any) -> dict:
    return {"titulo": title, "atividades": list(activities), **extra}


@pytest.fixture
def mixed_curriculum() -> list[dict]:
    """Module A: 2 activities (1 done); module B: 1 pending flagged for resume."""
    return [
        make_module(
            "A",
            make_activity("A1", completed=True, id=11),
            make_activity("A2", id=12),
        ),
        make_module("B", make_activity("B1", needs_resume=True, id=21)),
    ]


@pytest.fixture
def completed_curriculum() -> list[dict]:
    return [
        make_module("M1", make_activity("a", completed=True), make_activity("b", completed=True)),
        make_module(
            "M2",
            make_activity("c", completed=True, needs_resume=True),
            make_activity("d", completed=True),
        ),
    ]


@pytest.fixture
def partial_curriculum() -> list[dict]:
    return [
        make_module(
            "Único",
            make_activity("first", completed=True),
            make_activity("second"),
            make_activity("third"),
        )
    ]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)
