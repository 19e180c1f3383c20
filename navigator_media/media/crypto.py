"""
Media Crypto Core — integrity check and AES-256-CBC decryption.

Payload format:

    [MAC 10B][AES-256-CBC ciphertext, PKCS#7 padded]

where MAC is the first 10 bytes of HMAC-SHA256(mac_key, ciphertext).

The MAC is always verified before any decryption is attempted, and a MAC
mismatch is indistinguishable from a padding failure to the caller: both
raise ``DecryptionError`` with the same message.

Security Note:
    Never log plaintext, ciphertext or key material.
"""
import hmac
import hashlib
import logging

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..exceptions import DecryptionError
from .keys import ExpandedKeySet

logger = logging.getLogger("navigator.media")

MAC_SIZE = 10
BLOCK_SIZE = 16  # AES block, bytes

_INTEGRITY_FAILURE = "Invalid media key or corrupted file"


def compute_mac(mac_key: bytes, body: bytes) -> bytes:
    """Return the truncated (10-byte) HMAC-SHA256 tag of ``body``."""
    return hmac.new(mac_key, body, hashlib.sha256).digest()[:MAC_SIZE]


def decrypt_payload(payload: bytes, keys: ExpandedKeySet) -> bytes:
    """Verify and decrypt an encrypted media payload.

    Args:
        payload: Raw bytes as fetched, ``[mac 10B][ciphertext]``.
        keys: Live key set for the payload's category.

    Returns:
        Decrypted plaintext bytes.

    Raises:
        DecryptionError: If the payload is too small, the MAC does not match,
            or the ciphertext is misaligned or badly padded.
    """
    if len(payload) < MAC_SIZE:
        raise DecryptionError("payload too small")

    tag = payload[:MAC_SIZE]
    body = payload[MAC_SIZE:]

    expected = compute_mac(keys.mac_key, body)
    if not hmac.compare_digest(tag, expected):
        logger.debug("Media MAC verification failed (%d byte body)", len(body))
        raise DecryptionError(_INTEGRITY_FAILURE)

    if not body:
        # authenticated empty object
        return b""

    if len(body) % BLOCK_SIZE:
        logger.debug("Ciphertext not block aligned (%d bytes)", len(body))
        raise DecryptionError(_INTEGRITY_FAILURE)

    try:
        decryptor = Cipher(
            algorithms.AES(keys.cipher_key), modes.CBC(keys.iv)
        ).decryptor()
        padded = decryptor.update(body) + decryptor.finalize()
        unpadder = padding.PKCS7(BLOCK_SIZE * 8).unpadder()
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as err:
        logger.debug("Media padding check failed: %s", type(err).__name__)
        raise DecryptionError(_INTEGRITY_FAILURE, original_error=err) from err


def encrypt_payload(plaintext: bytes, keys: ExpandedKeySet) -> bytes:
    """Encrypt ``plaintext`` into the payload format read by ``decrypt_payload``.

    Args:
        plaintext: Data to encrypt.
        keys: Live key set for the target category.

    Returns:
        ``[mac 10B][ciphertext]`` bytes.
    """
    padder = padding.PKCS7(BLOCK_SIZE * 8).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(
        algorithms.AES(keys.cipher_key), modes.CBC(keys.iv)
    ).encryptor()
    body = encryptor.update(padded) + encryptor.finalize()
    return compute_mac(keys.mac_key, body) + body
