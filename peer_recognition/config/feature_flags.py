"""
peer_recognition/config/feature_flags.py
Behaviour toggles read once from the environment at import time

Flags gate rules that deployments disagree on: whether self-allocation is
rejected at the write boundary, whether contribution writes are restricted
to the contribution phase, and whether stores compare document versions
before overwriting.
"""
import os

_TRUTHY = frozenset({"true", "1", "yes", "on", "enabled"})


def get_bool_env(key: str, default: bool = False) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


class FeatureFlags:
    """Class-level flags; tests flip them with monkeypatch.setattr."""

    FEATURE_STRICT_SELF_ALLOCATION: bool = get_bool_env("FEATURE_STRICT_SELF_ALLOCATION", True)
    FEATURE_ENFORCE_PHASE_GATES: bool = get_bool_env("FEATURE_ENFORCE_PHASE_GATES", False)
    FEATURE_DOCUMENT_CAS: bool = get_bool_env("FEATURE_DOCUMENT_CAS", False)

    @classmethod
    def get_all_flags(cls) -> dict:
        """Snapshot of every FEATURE_* flag, as reported by /health."""
        return {
            name: getattr(cls, name)
            for name in dir(cls)
            if name.startswith("FEATURE_")
        }


feature_flags = FeatureFlags()
