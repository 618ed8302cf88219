# object_gateway/common/utils.py
from typing import Dict, Iterable

MAX_OBJECT_ID_LENGTH = 32


def parse_env(entries: Iterable[str]) -> Dict[str, str]:
    """Parse KEY=VALUE entries, splitting on the first '=' only"""
    env = {}
    for entry in entries:
        key, sep, value = entry.partition("=")
        if sep:
            env[key] = value
    return env


def validate_object_id(object_id: str) -> bool:
    return 0 < len(object_id) <= MAX_OBJECT_ID_LENGTH
