# Copyright 2026 Firefly Software Solutions Inc
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Key derivation and payload encryption for SignalGuard.

The intelligence backend decrypts every envelope with a key it derives on
its own from the integrator's API credentials, so both sides must agree
on every parameter of the pipeline:

- PBKDF2-HMAC-SHA256, 1000 iterations, 16-byte key
- salt = apiKey, passphrase = apiSecret (swapping them fails silently)
- AES-128-CBC with PKCS#7 padding
- a fresh 16-byte IV per encryption, drawn from the OS CSPRNG
- ciphertext as standard base64, IV as 32 lowercase hex characters

The IV is also sent as the tenant-id header; the backend reads the
decryption IV from that header, never from the body.

Example:
    >>> key = derive_key("k1", "sec1")
    >>> envelope = encrypt(key, {"f": "abc"})
    >>> len(envelope.iv)
    32
"""

from __future__ import annotations

import base64
import json
import secrets
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Mapping, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from signalguard.exceptions import CryptoUnavailableError, EncodingError
from signalguard.utils.logger import logger

if TYPE_CHECKING:
    from signalguard.config import AgentConfig

KDF_ITERATIONS = 1000
KEY_LENGTH = 16          # bytes (128 bits)
BLOCK_SIZE = 16          # AES block size in bytes
IV_LENGTH = 16

Plaintext = Union[bytes, str, Mapping[str, Any]]


@dataclass(frozen=True)
class SymmetricKey:
    """Derived AES key. Never printed in clear."""

    material: bytes

    def __post_init__(self) -> None:
        if len(self.material) != KEY_LENGTH:
            raise ValueError(f"Key must be {KEY_LENGTH} bytes, got {len(self.material)}")

    def __repr__(self) -> str:
        return f"SymmetricKey(bits={len(self.material) * 8})"


@dataclass(frozen=True)
class EncryptionEnvelope:
    """Result of one encryption: base64 ciphertext plus the hex IV used."""

    encoded_data: str
    iv: str

    def to_dict(self) -> Dict[str, str]:
        return {"encodedData": self.encoded_data, "iv": self.iv}


def _to_bytes(value: Union[str, bytes]) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode("utf-8")


def derive_key(salt: Union[str, bytes], passphrase: Union[str, bytes]) -> SymmetricKey:
    """
    Derive the envelope key from the credential pair.

    Deterministic: identical inputs always produce identical key bytes.

    Args:
        salt: The API key
        passphrase: The API secret

    Returns:
        Derived 128-bit SymmetricKey

    Raises:
        CryptoUnavailableError: If PBKDF2-HMAC-SHA256 is not supported
    """
    try:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_LENGTH,
            salt=_to_bytes(salt),
            iterations=KDF_ITERATIONS,
        )
        return SymmetricKey(kdf.derive(_to_bytes(passphrase)))
    except UnsupportedAlgorithm as e:
        raise CryptoUnavailableError(f"PBKDF2-HMAC-SHA256 unavailable: {e}") from e


def derive_session_key(config: AgentConfig) -> SymmetricKey:
    """Derive the key for a session configuration (salt=api_key, passphrase=api_secret)."""
    return derive_key(config.api_key, config.api_secret)


def serialize_payload(payload: Plaintext) -> bytes:
    """
    Serialize a payload to the plaintext bytes that get encrypted.

    Mappings are encoded as compact JSON in UTF-8 without ASCII escaping.

    Raises:
        EncodingError: If the payload cannot be serialized
    """
    if isinstance(payload, bytes):
        return payload
    try:
        if isinstance(payload, str):
            return payload.encode("utf-8")
        text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
        return text.encode("utf-8")
    except (TypeError, ValueError, UnicodeEncodeError) as e:
        raise EncodingError(f"Signal payload is not serializable: {e}") from e


def generate_iv() -> bytes:
    """Draw a fresh IV from the OS CSPRNG."""
    try:
        return secrets.token_bytes(IV_LENGTH)
    except NotImplementedError as e:
        raise CryptoUnavailableError("No cryptographically secure random source available") from e


def encrypt(key: SymmetricKey, plaintext: Plaintext) -> EncryptionEnvelope:
    """
    Encrypt a payload into a transport envelope.

    Args:
        key: Key from derive_key()
        plaintext: Raw bytes, a string (UTF-8) or a JSON-serializable mapping

    Returns:
        EncryptionEnvelope with base64 ciphertext and lowercase hex IV

    Raises:
        EncodingError: If the payload cannot be serialized
        CryptoUnavailableError: If AES-CBC or a secure random source is missing
    """
    data = serialize_payload(plaintext)
    iv = generate_iv()

    padder = padding.PKCS7(BLOCK_SIZE * 8).padder()
    padded = padder.update(data) + padder.finalize()

    try:
        encryptor = Cipher(algorithms.AES(key.material), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
    except UnsupportedAlgorithm as e:
        raise CryptoUnavailableError(f"AES-CBC unavailable: {e}") from e

    logger.debug(f"Encrypted {len(data)} byte payload into {len(ciphertext)} byte envelope")

    return EncryptionEnvelope(
        encoded_data=base64.b64encode(ciphertext).decode("ascii"),
        iv=iv.hex(),
    )


def seal_payload(config: AgentConfig, payload: Plaintext) -> EncryptionEnvelope:
    """Derive the session key and encrypt `payload` with it in one step."""
    return encrypt(derive_session_key(config), payload)
