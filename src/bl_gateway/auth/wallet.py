"""Wallet signature verification (EIP-191 personal_sign).

The signed login message ends with "at <nonce>", where nonce is the 32-char hex
value from the nonce store.
"""

import logging
import re

from eth_account import Account
from eth_account.messages import encode_defunct

logger = logging.getLogger(__name__)

_NONCE_RE = re.compile(r"at ([0-9a-f]{32})\Z")


def extract_nonce(message: str) -> str | None:
    match = _NONCE_RE.search(message.strip())
    return match.group(1) if match else None


def recover_signer(message: str, signature: str) -> str | None:
    """Lower-cased address that signed message, or None if the signature is malformed."""
    try:
        signer = Account.recover_message(encode_defunct(text=message), signature=signature)
    except Exception:
        logger.info("Signature recovery failed", exc_info=True)
        return None
    return str(signer).lower()


def verify_wallet_signature(address: str, message: str, signature: str) -> bool:
    signer = recover_signer(message, signature)
    return signer is not None and signer == address.lower()
