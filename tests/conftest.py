"""pytest configuration and shared fixtures for declcapture tests."""

import json
from typing import Any, Dict, List

import pytest
import yaml

from declcapture.config import reset_config
from declcapture.services.hook_registry import reset_registry
from declcapture.utils import logging as structured_logging


@pytest.fixture(autouse=True)
def clean_process_state(monkeypatch):
    """Give every test a fresh configuration, hook registry and structured logger."""
    monkeypatch.delenv("DECLCAPTURE_DEFAULT_TYPE", raising=False)
    monkeypatch.setattr(structured_logging, "_global_logger", None)
    reset_config()
    reset_registry()
    yield
    reset_config()
    reset_registry()


@pytest.fixture
def recorder():
    """Callable that records every call it receives."""

    class Recorder:
        def __init__(self):
            self.calls: List[tuple] = []

        def __call__(self, *args):
            self.calls.append(args)

    return Recorder()


@pytest.fixture
def sample_forest() -> List[Dict[str, Any]]:
    """One group with two children plus one independent leaf."""
    return [
        {
            "name": "Work",
            "keys": "w",
            "children": [
                {
                    "name": "Task",
                    "keys": "t",
                    "file": "work.org",
                    "headline": "Tasks",
                    "template": ["* TODO %?", "%U"],
                    "prepend": True,
                },
                {
                    "name": "Meeting",
                    "keys": "m",
                    "file": "work.org",
                    "olp": ["Meetings"],
                    "datetree": True,
                    "template": "* %? :meeting:",
                    "clock-in": True,
                    "clock-resume": True,
                },
            ],
        },
        {
            "name": "Journal",
            "keys": "j",
            "type": "plain",
            "file": "journal.org",
            "template-file": "templates/journal.txt",
        },
    ]


@pytest.fixture
def declaration_file(tmp_path, sample_forest):
    """Write sample_forest to a JSON file and return its path."""
    path = tmp_path / "templates.json"
    path.write_text(json.dumps(sample_forest), encoding="utf-8")
    return path


@pytest.fixture
def yaml_declaration_file(tmp_path, sample_forest):
    """Write sample_forest to a YAML file and return its path."""
    path = tmp_path / "templates.yaml"
    path.write_text(yaml.safe_dump(sample_forest, sort_keys=False), encoding="utf-8")
    return path
