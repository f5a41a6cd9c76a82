"""
Encrypted on-disk cache for resolved Key Vault secrets.

Cache entries are content-addressed: the AES key is the SHA-256 digest of the
reference (vault URL, secret name and version concatenated) and the IV is the
first 16 bytes of the SHA-256 digest of that key. The file name embeds the hex
IV, so identical references always map to the same file and no index is kept.

File format: raw AES-256-CBC ciphertext of the UTF-8 value, PKCS7 padded, no
header.

Entries never expire. Concurrent writers race with last-writer-wins; a reader
that cannot decrypt a file treats it as a miss.
"""

import asyncio
import hashlib
import logging
import os
import tempfile
from pathlib import Path

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .matcher import KeyVaultReference

logger = logging.getLogger(__name__)

CACHE_FILE_PREFIX = "kv-cache-"
CACHE_FILE_MODE = 0o600
CACHE_DIR_MODE = 0o700

_KEY_SIZE = 32
_IV_SIZE = 16


def derive_key(reference: KeyVaultReference) -> bytes:
    """Derive the 32-byte AES key for a reference. A missing version counts as ""."""
    material = "".join(
        [reference.vault_base_url, reference.secret_name, reference.secret_version or ""]
    )
    return hashlib.sha256(material.encode("utf-8")).digest()[:_KEY_SIZE]


def derive_iv(key: bytes) -> bytes:
    """Derive the 16-byte IV from a cache key."""
    return hashlib.sha256(key).digest()[:_IV_SIZE]


def encrypt_value(key: bytes, iv: bytes, value: str) -> bytes:
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(value.encode("utf-8")) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    return encryptor.update(padded) + encryptor.finalize()


def decrypt_value(key: bytes, iv: bytes, contents: bytes) -> str:
    """Decrypt cache contents.

    Raises:
        ValueError: If the contents are not valid ciphertext for this key/IV
            (wrong length, bad padding or invalid UTF-8)
    """
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(contents) + decryptor.finalize()
    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    return (unpadder.update(padded) + unpadder.finalize()).decode("utf-8")


class SecretCache:
    """Content-addressed, encrypted cache of secret values.

    Example:
        >>> cache = SecretCache(Path("/var/tmp/kvconfig"))
        >>> await cache.write(reference, "s3cr3t")
        >>> await cache.read(reference)
        's3cr3t'
    """

    def __init__(self, cache_dir: Path | None = None):
        self.cache_dir = Path(cache_dir) if cache_dir is not None else Path(tempfile.gettempdir())

    def path_for(self, reference: KeyVaultReference) -> Path:
        """Return the cache file path for a reference."""
        iv = derive_iv(derive_key(reference))
        return self.cache_dir / f"{CACHE_FILE_PREFIX}{iv.hex()}"

    async def read(self, reference: KeyVaultReference) -> str | None:
        """Return the cached value, or None on a miss.

        Missing, unreadable and undecryptable files are all misses.
        """
        key = derive_key(reference)
        iv = derive_iv(key)
        path = self.path_for(reference)

        loop = asyncio.get_running_loop()
        try:
            contents = await loop.run_in_executor(None, path.read_bytes)
            return decrypt_value(key, iv, contents)
        except (OSError, ValueError) as e:
            logger.debug(f"Cache miss for secret {reference.secret_name} ({path.name}): {e}")
            return None

    async def write(self, reference: KeyVaultReference, value: str) -> Path:
        """Encrypt and store a value, overwriting any existing entry.

        Errors are propagated to the caller.

        Returns:
            Path of the written cache file
        """
        key = derive_key(reference)
        iv = derive_iv(key)
        path = self.path_for(reference)
        contents = encrypt_value(key, iv, value)

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._write_file, path, contents)
        logger.debug(f"Cached secret {reference.secret_name} at {path}")
        return path

    @staticmethod
    def _write_file(path: Path, contents: bytes) -> None:
        path.parent.mkdir(mode=CACHE_DIR_MODE, parents=True, exist_ok=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, CACHE_FILE_MODE)
        with os.fdopen(fd, "wb") as f:
            f.write(contents)
        # os.open only applies the mode when the file is created
        os.chmod(path, CACHE_FILE_MODE)
