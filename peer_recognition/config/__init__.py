"""
peer_recognition/config
Environment-driven settings and feature flags
"""
from peer_recognition.config.feature_flags import FeatureFlags, feature_flags, get_bool_env
from peer_recognition.config.settings import Settings, get_settings
