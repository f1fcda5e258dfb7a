"""
Helper Functions

Contains utility functions used throughout the application.
"""

import random
import re
from typing import Dict, Optional

# No 0/O or 1/I
SYNC_CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'
SYNC_CODE_LENGTH = 9

_SYNC_CODE_RE = re.compile(rf'^[{SYNC_CODE_ALPHABET}]{{4}}-[{SYNC_CODE_ALPHABET}]{{4}}$')


def get_user_identity(request_obj=None) -> Dict[str, Optional[str]]:
    """Extract user identity information from request."""
    if request_obj is None:
        return {'user_ip': 'local', 'session_id': None, 'username': None}

    user_ip = getattr(request_obj, 'remote_addr', None) or 'unknown'

    return {
        'user_ip': user_ip,
        'session_id': None,
        'username': None
    }


def generate_sync_code(rng: Optional[random.Random] = None) -> str:
    """Return a fresh XXXX-YYYY code."""
    rng = rng or random.SystemRandom()
    halves = [''.join(rng.choice(SYNC_CODE_ALPHABET) for _ in range(4)) for _ in range(2)]
    return '-'.join(halves)


def normalize_sync_code(code: Optional[str]) -> str:
    return (code or '').strip().upper()


def is_valid_sync_code(code: Optional[str]) -> bool:
    return bool(code) and len(code) == SYNC_CODE_LENGTH and _SYNC_CODE_RE.match(code) is not None


def mask_sync_code(code: Optional[str]) -> Optional[str]:
    """Keep the first half of a code for log correlation, hide the rest."""
    if not code:
        return code
    return f"{code[:4]}-****"
