"""
Storage key scheme.

Account records live under the bare identity. Other clients read these
keys directly, so the formats must not change.
"""

# Removed on logout; older clients kept the signed-in user here
LEGACY_SESSION_KEY = "user"


def account_key(identity: str) -> str:
    return identity


def history_key(identity: str) -> str:
    return f"{identity}_deposit_history"


def pending_deposit_key(identity: str) -> str:
    return f"{identity}_pending_deposit"
