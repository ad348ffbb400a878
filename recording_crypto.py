"""
Recording encryption.

The API only issues and stores a key per recording. The media itself never
passes through it: the uploader that captures a session fetches the key and
uses ``encrypt_blob`` before writing to storage, and playback uses
``decrypt_blob`` with the same key.
"""
import os
import secrets

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

ENCRYPTION_ALGORITHM = "aes-256-gcm"
NONCE_SIZE = 12


def generate_encryption_key() -> str:
    """Fresh 256-bit key, hex encoded so it can sit in a text column."""
    return secrets.token_hex(32)


def encrypt_blob(data: bytes, key_hex: str) -> bytes:
    """Encrypt recording bytes. Output is nonce followed by ciphertext+tag."""
    nonce = os.urandom(NONCE_SIZE)
    return nonce + AESGCM(bytes.fromhex(key_hex)).encrypt(nonce, data, None)


def decrypt_blob(blob: bytes, key_hex: str) -> bytes:
    nonce, ciphertext = blob[:NONCE_SIZE], blob[NONCE_SIZE:]
    return AESGCM(bytes.fromhex(key_hex)).decrypt(nonce, ciphertext, None)
