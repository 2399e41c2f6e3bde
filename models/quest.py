# models/quest.py
# Quest enumerations, field rules, defaults and the quest id factory

import re
import secrets
import time
from enum import Enum


class QuestStatus(str, Enum):
    PREPARE = "prepare"
    ACTIVE = "active"
    DONE = "done"


class Visibility(str, Enum):
    PRIVATE = "private"
    SHARED = "shared"


class EffortType(str, Enum):
    # well-known values; effort_type itself accepts any string
    FOCUS_TIME = "focus_time"
    PROBLEM_SET = "problem_set"
    READING = "reading"
    CUSTOM = "custom"


ID_PREFIX = "quest_"
TITLE_MAX_LENGTH = 200
DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")

REQUIRED_FIELDS = ["title", "subject", "suggested_minutes", "deadline"]

ALLOWED_UPDATES = [
    "title",
    "description",
    "subject",
    "topic",
    "effort_type",
    "studied_minutes",
    "suggested_minutes",
    "deadline",
    "visibility",
    "status",
]

DEFAULTS = {
    "description": "",
    "topic": "",
    "effort_type": EffortType.FOCUS_TIME.value,
    "studied_minutes": 0,
    "visibility": Visibility.SHARED.value,
    "status": QuestStatus.PREPARE.value,
}

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(n):
    if n == 0:
        return "0"
    digits = []
    while n:
        n, r = divmod(n, 36)
        digits.append(_BASE36[r])
    return "".join(reversed(digits))


def generate_quest_id():
    """
    Default quest id factory.
    quest_ + nanosecond clock in base36 + 6 random hex chars.
    """
    return f"{ID_PREFIX}{to_base36(time.time_ns())}{secrets.token_hex(3)}"
