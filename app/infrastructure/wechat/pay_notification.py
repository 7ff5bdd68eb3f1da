"""Verification and decryption of WeChat Pay v3 payment notifications.

See https://pay.weixin.qq.com/wiki/doc/apiv3/apis/chapter3_5_5.shtml for the
callback format. The notification body is signed with the platform
certificate and its ``resource`` is encrypted with the merchant's APIv3 key.
"""

from __future__ import annotations

import base64
import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cryptography import x509
from cryptography.exceptions import InvalidSignature, InvalidTag
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from app.domain.entities import Account, Merchant, PayOrder
from app.domain.exceptions import (
    PayNotificationDecodingError,
    PaymentConfigurationError,
    UnsupportedNotificationError,
)

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "wechatpay-signature"
TIMESTAMP_HEADER = "wechatpay-timestamp"
NONCE_HEADER = "wechatpay-nonce"
SERIAL_HEADER = "wechatpay-serial"

TRANSACTION_SUCCESS = "TRANSACTION.SUCCESS"
AEAD_AES_256_GCM = "AEAD_AES_256_GCM"
SUPPORTED_ALGORITHMS: frozenset[str] = frozenset({AEAD_AES_256_GCM})

_API_V3_KEY_LENGTH = 32


@dataclass(frozen=True)
class CallbackContext:
    """Order, account and transport headers a callback was received with."""

    account: Account
    pay_order: PayOrder
    headers: Mapping[str, str] = field(default_factory=dict)

    def header(self, name: str) -> str | None:
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


@dataclass(frozen=True)
class VerifiedNotification:
    """Result of a successful verification."""

    pay_order: PayOrder
    account: Account
    fields: dict[str, Any]


class PayNotificationVerifier(ABC):
    """Contract for the payment SDK that authenticates callbacks."""

    @abstractmethod
    def verify_and_decrypt(
        self, raw_body: bytes, context: CallbackContext
    ) -> VerifiedNotification:
        """Authenticate ``raw_body`` and return its decrypted fields.

        Raises :class:`PaymentConfigurationError` before touching the payload
        when credentials are missing, :class:`PayNotificationDecodingError`
        when the payload is malformed or forged and
        :class:`UnsupportedNotificationError` for unsupported encryption.
        """


def validate_supported_algorithms(algorithms: Iterable[str]) -> frozenset[str]:
    """Return ``algorithms`` as a set, rejecting any this build cannot decrypt."""

    requested = frozenset(algorithms)
    unsupported = sorted(requested - SUPPORTED_ALGORITHMS)
    if unsupported:
        raise UnsupportedNotificationError(
            f"Unsupported notification algorithm(s): {', '.join(unsupported)}"
        )
    if not requested:
        raise PaymentConfigurationError("At least one notification algorithm is required")
    return requested


class WechatPayNotificationVerifier(PayNotificationVerifier):
    """Verify RSA-SHA256 signatures and decrypt AES-256-GCM resources."""

    def __init__(
        self,
        cert_dir: str | Path,
        *,
        algorithms: Iterable[str] = (AEAD_AES_256_GCM,),
    ) -> None:
        self.cert_dir = Path(cert_dir)
        self.algorithms = validate_supported_algorithms(algorithms)

    def verify_and_decrypt(
        self, raw_body: bytes, context: CallbackContext
    ) -> VerifiedNotification:
        merchant = self._require_merchant(context.pay_order)
        api_v3_key = self._require_api_v3_key(merchant)
        platform_key = self._load_platform_key(merchant)

        signature = context.header(SIGNATURE_HEADER)
        timestamp = context.header(TIMESTAMP_HEADER)
        nonce = context.header(NONCE_HEADER)
        if not (signature and timestamp and nonce):
            raise PayNotificationDecodingError("Missing WeChat Pay signature headers")

        serial = context.header(SERIAL_HEADER)
        if (
            serial
            and merchant.platform_cert_serial
            and serial != merchant.platform_cert_serial
        ):
            raise PayNotificationDecodingError(
                f"Unexpected platform certificate serial {serial}"
            )

        body = _decode_json_object(raw_body, what="notification body")
        if body.get("event_type") != TRANSACTION_SUCCESS:
            raise PayNotificationDecodingError(
                f"Unexpected event type {body.get('event_type')!r}"
            )

        self._verify_signature(platform_key, raw_body, timestamp, nonce, signature)
        fields = self._decrypt_resource(body.get("resource"), api_v3_key)

        out_trade_no = fields.get("out_trade_no")
        if out_trade_no and out_trade_no != context.pay_order.trade_no:
            raise PayNotificationDecodingError(
                f"Notification refers to order {out_trade_no}, "
                f"expected {context.pay_order.trade_no}"
            )

        return VerifiedNotification(
            pay_order=context.pay_order, account=context.account, fields=fields
        )

    @staticmethod
    def _require_merchant(pay_order: PayOrder) -> Merchant:
        if pay_order.merchant is None:
            raise PaymentConfigurationError(
                f"Pay order {pay_order.trade_no} has no merchant configured"
            )
        return pay_order.merchant

    @staticmethod
    def _require_api_v3_key(merchant: Merchant) -> bytes:
        if not merchant.api_v3_key:
            raise PaymentConfigurationError(
                f"Merchant {merchant.mch_id} has no APIv3 key configured"
            )
        key = merchant.api_v3_key.encode("utf-8")
        if len(key) != _API_V3_KEY_LENGTH:
            raise PaymentConfigurationError(
                f"Merchant {merchant.mch_id} APIv3 key must be {_API_V3_KEY_LENGTH} bytes"
            )
        return key

    def platform_cert_path(self, merchant: Merchant) -> Path:
        return self.cert_dir / f"{merchant.mch_id}_platform_cert.pem"

    def _load_platform_key(self, merchant: Merchant) -> rsa.RSAPublicKey:
        path = self.platform_cert_path(merchant)
        try:
            pem = path.read_bytes()
        except OSError as exc:
            raise PaymentConfigurationError(
                f"Platform certificate for merchant {merchant.mch_id} is unavailable"
            ) from exc

        try:
            if b"BEGIN CERTIFICATE" in pem:
                public_key = x509.load_pem_x509_certificate(pem).public_key()
            else:
                public_key = serialization.load_pem_public_key(pem)
        except ValueError as exc:
            raise PaymentConfigurationError(
                f"Platform certificate {path.name} could not be parsed"
            ) from exc

        if not isinstance(public_key, rsa.RSAPublicKey):
            raise PaymentConfigurationError(
                f"Platform certificate {path.name} does not hold an RSA key"
            )
        return public_key

    @staticmethod
    def _verify_signature(
        public_key: rsa.RSAPublicKey,
        raw_body: bytes,
        timestamp: str,
        nonce: str,
        signature: str,
    ) -> None:
        message = b"\n".join(
            [timestamp.encode("utf-8"), nonce.encode("utf-8"), raw_body, b""]
        )
        try:
            decoded_signature = base64.b64decode(signature, validate=True)
            public_key.verify(
                decoded_signature, message, padding.PKCS1v15(), hashes.SHA256()
            )
        except (ValueError, InvalidSignature) as exc:
            raise PayNotificationDecodingError("Signature verification failed") from exc

    def _decrypt_resource(self, resource: Any, api_v3_key: bytes) -> dict[str, Any]:
        if not isinstance(resource, dict):
            raise PayNotificationDecodingError("Notification resource is missing")

        algorithm = resource.get("algorithm", AEAD_AES_256_GCM)
        if not isinstance(algorithm, str):
            raise PayNotificationDecodingError("Notification algorithm must be a string")
        if algorithm not in self.algorithms:
            raise UnsupportedNotificationError(
                f"Notification algorithm {algorithm!r} is not supported"
            )

        ciphertext = resource.get("ciphertext")
        nonce = resource.get("nonce")
        associated_data = resource.get("associated_data", "")
        if not (
            isinstance(ciphertext, str)
            and isinstance(nonce, str)
            and isinstance(associated_data, str)
        ):
            raise PayNotificationDecodingError(
                "Notification resource lacks the encrypted fields"
            )

        try:
            plaintext = AESGCM(api_v3_key).decrypt(
                nonce.encode("utf-8"),
                base64.b64decode(ciphertext, validate=True),
                associated_data.encode("utf-8") or None,
            )
        except (InvalidTag, ValueError) as exc:
            raise PayNotificationDecodingError("Resource decryption failed") from exc

        return _decode_json_object(plaintext, what="decrypted resource")


def _decode_json_object(data: bytes, *, what: str) -> dict[str, Any]:
    try:
        parsed = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise PayNotificationDecodingError(f"The {what} is not valid JSON") from exc
    if not isinstance(parsed, dict):
        raise PayNotificationDecodingError(f"The {what} is not a JSON object")
    return parsed


__all__ = [
    "AEAD_AES_256_GCM",
    "CallbackContext",
    "PayNotificationVerifier",
    "SUPPORTED_ALGORITHMS",
    "VerifiedNotification",
    "WechatPayNotificationVerifier",
    "validate_supported_algorithms",
]
