"""
Crisis intervention protocols.

A static table maps severity to an ordered list of steps. Running a protocol
walks the steps once and records what was done; there is no retry and no
delivery confirmation.
"""
from datetime import datetime
from typing import Any, Dict, List, Sequence

MAX_CONTACTS_NOTIFIED = 3
MAX_PROFESSIONALS_NOTIFIED = 5

CRISIS_PROTOCOLS: Dict[str, List[dict]] = {
    "CRITICAL": [
        {
            "step": 1,
            "action": "IMMEDIATE_ESCALATION",
            "description": "Contact emergency services immediately",
            "emergency": True,
        },
        {
            "step": 2,
            "action": "NOTIFY_CONTACTS",
            "description": "Alert primary emergency contacts",
            "priority": 1,
        },
        {
            "step": 3,
            "action": "PROFESSIONAL_BACKUP",
            "description": "Activate professional backup network",
            "priority": 1,
        },
    ],
    "HIGH": [
        {
            "step": 1,
            "action": "ASSESS_SAFETY",
            "description": "Conduct immediate safety assessment",
        },
        {
            "step": 2,
            "action": "PROFESSIONAL_BACKUP",
            "description": "Notify professional backup network",
        },
        {
            "step": 3,
            "action": "NOTIFY_CONTACTS",
            "description": "Alert emergency contacts if needed",
        },
    ],
    "MEDIUM": [
        {
            "step": 1,
            "action": "SUPPORTIVE_INTERVENTION",
            "description": "Provide immediate emotional support",
        },
        {
            "step": 2,
            "action": "SAFETY_PLANNING",
            "description": "Create safety plan together",
        },
        {
            "step": 3,
            "action": "FOLLOW_UP",
            "description": "Schedule follow-up check-in",
        },
    ],
    "LOW": [
        {
            "step": 1,
            "action": "ACTIVE_LISTENING",
            "description": "Provide empathetic listening",
        },
        {
            "step": 2,
            "action": "GROUNDING_TECHNIQUES",
            "description": "Suggest grounding exercises",
        },
        {
            "step": 3,
            "action": "RESOURCE_SHARING",
            "description": "Share relevant support resources",
        },
    ],
}

EMERGENCY_RESOURCES: Dict[str, Dict[str, dict]] = {
    "india": {
        "suicide_prevention": {
            "name": "iCall",
            "phone": "9152987821",
            "available": "24/7",
        },
        "mental_health": {
            "name": "Vandrevala Foundation",
            "phone": "18602662345",
            "available": "24/7",
        },
        "domestic_violence": {
            "name": "National Domestic Violence Helpline",
            "phone": "181",
            "available": "24/7",
        },
    },
    "global": {
        "international": {
            "name": "International Association for Suicide Prevention",
            "website": "https://www.iasp.info/resources/Crisis_Centres/",
            "description": "Find crisis centers worldwide",
        }
    },
}


def protocol_name(severity: str) -> str:
    return f"CRISIS_{severity}_PROTOCOL"


def protocol_steps(severity: str) -> List[dict]:
    return CRISIS_PROTOCOLS.get(severity, [])


def execute_protocol(
    severity: str,
    contacts: Sequence[Any],
    professionals: Sequence[Any],
    now: datetime,
) -> List[Dict[str, Any]]:
    """
    Run every step of the severity's protocol once and return the actions taken.

    Notification steps are only recorded when there is someone to notify.
    """
    timestamp = now.isoformat()
    actions_taken: List[Dict[str, Any]] = []

    for step in protocol_steps(severity):
        action = {
            "action": step["action"],
            "description": step["description"],
            "executed": True,
            "timestamp": timestamp,
        }

        if step["action"] == "IMMEDIATE_ESCALATION":
            action["resources"] = EMERGENCY_RESOURCES

        elif step["action"] == "NOTIFY_CONTACTS":
            if not contacts:
                continue
            action["contacts_notified"] = [
                {"name": c.name, "relationship": c.relationship, "phone": c.phone}
                for c in contacts
            ]

        elif step["action"] == "PROFESSIONAL_BACKUP":
            if not professionals:
                continue
            action["professionals_notified"] = [
                {
                    "name": p.name,
                    "profession": p.profession,
                    "phone": p.phone,
                    "specialization": p.specialization,
                }
                for p in professionals
            ]

        actions_taken.append(action)

    return actions_taken
