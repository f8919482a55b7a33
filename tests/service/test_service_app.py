"""Tests for the FastAPI service mode."""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from coderules.models import Verdict
from coderules.pipeline import CodeRulesPipeline
from coderules.service.app import create_app
from coderules.tool import TOOL_NAME
from tests._fixtures.oracles import RecordingOracle


@pytest.fixture
def oracle() -> RecordingOracle:
    return RecordingOracle([Verdict(file_index=2, include=False)])


@pytest.fixture
def client(oracle: RecordingOracle) -> TestClient:
    pipeline = CodeRulesPipeline(oracle)
    return TestClient(create_app(lambda: pipeline))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "cache_entries": 0}


def test_tool_endpoint_describes_tool(client: TestClient) -> None:
    response = client.get("/tool")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == TOOL_NAME
    assert data["input_schema"]["required"] == ["task", "docsPath"]


def test_coderules_endpoint_returns_filtered_docs(client: TestClient, docs_builder) -> None:
    docs_builder.write(
        {
            "a.md": "Alpha rules.\n",
            "b.md": "Beta rules.\n",
            "c.md": "Gamma rules.\n",
            "d.md": "Delta rules.\n",
        }
    )

    response = client.post(
        "/coderules", json={"task": "alpha work", "docsPath": str(docs_builder.path())}
    )

    assert response.status_code == 200
    text = response.json()["content"][0]["text"]
    assert "## a.md" in text
    assert "## b.md" not in text
    assert text.index("## c.md") < text.index("## d.md")


def test_coderules_endpoint_reports_validation_errors(client: TestClient) -> None:
    response = client.post("/coderules", json={"docsPath": "/docs"})

    assert response.status_code == 400
    data = response.json()
    assert data["isError"] is True
    assert json.loads(data["content"][0]["text"])["error"] == "Task description is required"
