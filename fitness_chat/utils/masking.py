"""
KEY MASKING UTILITY
===================

API keys are secrets, but logs still need to say which key was used. mask_key()
keeps the first few characters so two keys can be told apart in the log.
"""


def mask_key(key: str, visible: int = 8) -> str:
    """Return e.g. 'sk-or-v1...' for a long key, or '***' for a short one."""
    if not key:
        return "N/A"
    if len(key) <= visible:
        return "***"
    return f"{key[:visible]}..."
