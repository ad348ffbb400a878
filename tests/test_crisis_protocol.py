from datetime import datetime, timezone
from types import SimpleNamespace

from crisis_protocol import (
    CRISIS_PROTOCOLS,
    EMERGENCY_RESOURCES,
    execute_protocol,
    protocol_name,
    protocol_steps,
)

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

CONTACT = SimpleNamespace(name="Mom", relationship="parent", phone="+91-900")
PROFESSIONAL = SimpleNamespace(
    name="Dr. Iyer",
    profession="Psychologist",
    phone="+91-901",
    specialization="crisis",
)


def test_every_severity_has_three_steps():
    for severity in ("LOW", "MEDIUM", "HIGH", "CRITICAL"):
        steps = protocol_steps(severity)
        assert [s["step"] for s in steps] == [1, 2, 3]


def test_protocol_name():
    assert protocol_name("HIGH") == "CRISIS_HIGH_PROTOCOL"


def test_unknown_severity_runs_nothing():
    assert protocol_steps("UNKNOWN") == []
    assert execute_protocol("UNKNOWN", [CONTACT], [PROFESSIONAL], NOW) == []


def test_critical_runs_all_steps_in_order():
    actions = execute_protocol("CRITICAL", [CONTACT], [PROFESSIONAL], NOW)

    assert [a["action"] for a in actions] == [
        "IMMEDIATE_ESCALATION",
        "NOTIFY_CONTACTS",
        "PROFESSIONAL_BACKUP",
    ]
    assert all(a["executed"] for a in actions)
    assert all(a["timestamp"] == NOW.isoformat() for a in actions)
    assert actions[0]["resources"] == EMERGENCY_RESOURCES
    assert actions[1]["contacts_notified"] == [
        {"name": "Mom", "relationship": "parent", "phone": "+91-900"}
    ]
    assert actions[2]["professionals_notified"][0]["name"] == "Dr. Iyer"


def test_notify_steps_skipped_without_recipients():
    actions = execute_protocol("CRITICAL", [], [], NOW)

    assert [a["action"] for a in actions] == ["IMMEDIATE_ESCALATION"]


def test_high_follows_table_order():
    actions = execute_protocol("HIGH", [CONTACT], [PROFESSIONAL], NOW)

    assert [a["action"] for a in actions] == [
        step["action"] for step in CRISIS_PROTOCOLS["HIGH"]
    ]


def test_low_has_no_notifications():
    actions = execute_protocol("LOW", [CONTACT], [PROFESSIONAL], NOW)

    assert [a["action"] for a in actions] == [
        "ACTIVE_LISTENING",
        "GROUNDING_TECHNIQUES",
        "RESOURCE_SHARING",
    ]
    assert not any("contacts_notified" in a for a in actions)
