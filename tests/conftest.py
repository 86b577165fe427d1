"""Test configuration helpers for the aclengine codebase."""
from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict

import pytest

# Ensure the project root is importable as ``aclengine`` when running tests
# without installing the package.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# navconfig locates ``env/.env`` relative to SITE_ROOT; point it at the repo.
os.environ.setdefault("SITE_ROOT", str(PROJECT_ROOT))

from aclengine.policy import PolicyDocument, ValidationSet  # noqa: E402


ADMIN_POLICY = """\
description: Admin access to the ops project
context:
  project: 'ops'
for:
  job:
    - match:
        name: 'deploy.*'
      allow: [read, run]
    - equals:
        group: 'maintenance'
      deny: kill
  node:
    - contains:
        tags: [prod]
      allow: read
by:
  group: [admin]
"""

APPLICATION_POLICY = """\
description: Application level read
context:
  application: 'rundeck'
for:
  project:
    - match:
        name: '.*'
      allow: read
by:
  username: [alice, bob]
"""


@pytest.fixture
def validation() -> ValidationSet:
    """Empty diagnostics accumulator."""
    return ValidationSet()


@pytest.fixture
def base_policy() -> Dict[str, Any]:
    """A minimal valid policy document as deserialized YAML."""
    return {
        "description": "test policy",
        "context": {"project": "ops"},
        "by": {"username": ["a", "b"]},
        "for": {
            "job": [
                {"allow": ["read"], "match": {"name": "x.*"}},
            ],
        },
    }


@pytest.fixture
def make_document(base_policy: Dict[str, Any]) -> Callable[..., PolicyDocument]:
    """Build a PolicyDocument from the base policy with top-level overrides.

    A value of ``None`` removes the key from the document.
    """
    def _make(**overrides: Any) -> PolicyDocument:
        data = dict(base_policy)
        for key, value in overrides.items():
            key = {"for_": "for", "not_by": "notBy"}.get(key, key)
            if value is None:
                data.pop(key, None)
            else:
                data[key] = value
        return PolicyDocument.model_validate(data)
    return _make


@pytest.fixture
def admin_policy_yaml() -> str:
    return ADMIN_POLICY


@pytest.fixture
def application_policy_yaml() -> str:
    return APPLICATION_POLICY
