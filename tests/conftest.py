"""Shared fixtures: tests never see FIELDFORMS_* variables from the host."""

import os

import pytest

from fieldforms.config import ENV_PREFIX


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for key in list(os.environ):
        if key.upper().startswith(ENV_PREFIX):
            monkeypatch.delenv(key)
