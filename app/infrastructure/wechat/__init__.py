"""Adapters for the WeChat Pay and mini-program APIs."""

from .mini_program_client import MiniProgramClient, clear_access_token_cache
from .pay_notification import (
    AEAD_AES_256_GCM,
    CallbackContext,
    PayNotificationVerifier,
    VerifiedNotification,
    WechatPayNotificationVerifier,
    validate_supported_algorithms,
)

__all__ = [
    "AEAD_AES_256_GCM",
    "CallbackContext",
    "MiniProgramClient",
    "PayNotificationVerifier",
    "VerifiedNotification",
    "WechatPayNotificationVerifier",
    "clear_access_token_cache",
    "validate_supported_algorithms",
]
