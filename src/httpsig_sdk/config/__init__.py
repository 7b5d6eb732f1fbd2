"""
Configuration management for the HTTP message signing SDK

This module loads signing policies from JSON and predefined profiles and
turns them into signature parameter factories.
"""

from .signing_policy import (
    SigningPolicy,
    SigningPolicyConfig,
    SigningPolicyError,
    SIGNING_PROFILES,
    get_signing_profile,
    list_signing_profiles,
    load_signing_config_from_file,
)

__all__ = [
    'SigningPolicy',
    'SigningPolicyConfig',
    'SigningPolicyError',
    'SIGNING_PROFILES',
    'get_signing_profile',
    'list_signing_profiles',
    'load_signing_config_from_file',
]
