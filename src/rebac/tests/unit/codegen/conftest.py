"""Fixtures for the codegen tests."""

import json
from pathlib import Path
from unittest.mock import create_autospec

import pytest

from codegen.application.observability import GeneratorProbe


def _direct(*user_types: str) -> dict:
    return {"directly_related_user_types": [{"type": t} for t in user_types]}


FORMS_MODEL = {
    "schema_version": "1.1",
    "type_definitions": [
        {"type": "user", "relations": {}, "metadata": None},
        {
            "type": "group",
            "relations": {"member": {"this": {}}},
            "metadata": {"relations": {"member": _direct("user")}},
        },
        {
            "type": "team",
            "relations": {"group": {"this": {}}, "member": {"this": {}}},
            "metadata": {
                "relations": {
                    "group": _direct("group"),
                    "member": _direct("user", "group#member"),
                }
            },
        },
        {
            "type": "form",
            "relations": {
                "editor": {"this": {}},
                "reader": {"this": {}},
                "edit": {"computedUserset": {"relation": "editor"}},
                "read": {
                    "union": {
                        "child": [
                            {"computedUserset": {"relation": "reader"}},
                            {"computedUserset": {"relation": "editor"}},
                        ]
                    }
                },
            },
            "metadata": {
                "relations": {
                    "editor": _direct("user", "team#member"),
                    "reader": _direct("user", "team#member"),
                    "edit": _direct(),
                    "read": _direct(),
                }
            },
        },
        {
            "type": "subscription",
            "relations": {
                "member": {"this": {}},
                "active": {"computedUserset": {"relation": "member"}},
            },
            "metadata": {
                "relations": {
                    "member": {
                        "directly_related_user_types": [
                            {"type": "user", "condition": "active_trial"}
                        ]
                    }
                }
            },
        },
        {"type": "crm_email_account", "relations": {}},
        {
            "type": "crm_company",
            "relations": {
                "owner": {"this": {}},
                "for": {"this": {}},
                "edit": {"computedUserset": {"relation": "owner"}},
                "read": {"computedUserset": {"relation": "owner"}},
            },
            "metadata": {
                "relations": {
                    "owner": _direct("user"),
                    "for": _direct("user"),
                }
            },
        },
    ],
    "conditions": {
        "active_trial": {
            "name": "active_trial",
            "expression": "current_time_provided < trial_start_init + trial_duration_init",
            "parameters": {
                "trial_start_init": {"type_name": "TYPE_NAME_TIMESTAMP"},
                "trial_duration_init": {"type_name": "TYPE_NAME_DURATION"},
                "current_time_provided": {"type_name": "TYPE_NAME_TIMESTAMP"},
            },
        },
        "seat_limit": {
            "name": "seat_limit",
            "expression": "seats_used_provided < max_seats && enabled_init",
            "parameters": {
                "max_seats": {"type_name": "TYPE_NAME_INT"},
                "enabled_init": {"type_name": "TYPE_NAME_BOOL"},
                "seats_used_provided": {"type_name": "TYPE_NAME_INT"},
                "region_provided": {"type_name": "TYPE_NAME_STRING"},
            },
        },
    },
}


@pytest.fixture
def forms_model_json() -> str:
    """JSON authorization model covering every generation shape."""
    return json.dumps(FORMS_MODEL)


@pytest.fixture
def mock_generator_probe():
    return create_autospec(GeneratorProbe, instance=True)


@pytest.fixture
def forms_schema_path() -> Path:
    """JSON model matching the schema the integration tests load into SpiceDB."""
    return Path(__file__).parents[2] / "fixtures" / "forms-model.json"
