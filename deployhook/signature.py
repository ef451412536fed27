# Webhook signature check
# X-Hub-Signature-256: sha256=<hex of HMAC-SHA256(secret, raw body)>

import hmac
import hashlib

SIGNATURE_HEADER = "X-Hub-Signature-256"
SIGNATURE_PREFIX = "sha256="


def _key(secret) -> bytes:
    return secret if isinstance(secret, bytes) else secret.encode("utf-8")


def compute_signature(secret, body: bytes) -> str:
    """
    Header value a sender holding `secret` would put on `body`.
    """
    mac = hmac.new(_key(secret), body, hashlib.sha256).hexdigest()
    return SIGNATURE_PREFIX + mac


def verify_signature(secret, body: bytes, sent_sig: str) -> bool:
    """
    Check HMAC signature. sent_sig should look like 'sha256=<hex>'.
    body must be the raw bytes off the wire, not re-serialized JSON.
    """
    if not secret:
        return False
    if not sent_sig or not body:
        return False

    expected = compute_signature(secret, body)
    # compare_digest needs both sides ASCII str or both bytes
    try:
        return hmac.compare_digest(expected.encode("ascii"), sent_sig.encode("ascii"))
    except UnicodeEncodeError:
        return False
