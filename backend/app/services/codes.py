import random
import secrets
import string
import time
import uuid

CODE_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZ"
CODE_LENGTH = 8

FALLBACK_ID_PREFIX = "res_"
_BASE36 = string.digits + string.ascii_lowercase


def next_code() -> str:
    """Return a fresh confirmation code such as ``K7QX2M9A``."""
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def next_id() -> str:
    """Return a UUID4 string, or ``res_<millis>_<suffix>`` when no UUID source is available."""
    try:
        return str(uuid.uuid4())
    except (NotImplementedError, OSError):
        suffix = "".join(random.choices(_BASE36, k=6))
        return f"{FALLBACK_ID_PREFIX}{int(time.time() * 1000)}_{suffix}"
