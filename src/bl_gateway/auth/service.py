"""WalletAuthService — nonce issue and signature login."""

import logging

from src.bl_common.errors import InvalidNonceError, InvalidSignatureError
from src.bl_gateway.auth.jwt_handler import JwtHandler
from src.bl_gateway.auth.nonce_store import NonceStoreProtocol
from src.bl_gateway.auth.wallet import extract_nonce, verify_wallet_signature

logger = logging.getLogger(__name__)


class WalletAuthService:
    def __init__(self, nonces: NonceStoreProtocol, jwt_handler: JwtHandler) -> None:
        self._nonces = nonces
        self._jwt = jwt_handler

    @property
    def jwt(self) -> JwtHandler:
        return self._jwt

    async def issue_nonce(self) -> str:
        return await self._nonces.issue()

    async def verify(self, address: str, message: str, signature: str) -> str:
        """Check the signer, then consume the message's nonce, return an access token.

        A bad signature leaves the nonce untouched; only a correctly signed
        login spends it.
        """
        nonce = extract_nonce(message)
        if nonce is None:
            logger.warning("Login rejected: no nonce in message for %s", address)
            raise InvalidNonceError()
        if not verify_wallet_signature(address, message, signature):
            logger.warning("Login rejected: signature does not match %s", address)
            raise InvalidSignatureError()
        if not await self._nonces.consume(nonce):
            logger.warning("Login rejected: invalid or reused nonce for %s", address)
            raise InvalidNonceError()
        logger.info("Wallet login: %s", address.lower())
        return self._jwt.create_access_token(address)
