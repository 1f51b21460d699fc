"""
svcrotate.security.encryption
=============================

Standardized in-memory protection routines.

Secrets held by svcrotate are never kept as plain strings. They are kept as
Fernet tokens encrypted under a random key that exists only for the life of the
process, and are decrypted into mutable buffers which are overwritten with
zeros as soon as they are no longer needed.
"""


import ctypes


# For documentation on the cryptography library, or to download it, visit:
#   https://cryptography.io/en/latest/
# To install with pip:
#   pip install cryptography
import cryptography.fernet

from ..exceptions import CryptographyError


__author__ = 'Aaron Hosford'
__all__ = [
    'to_bytes',
    'from_bytes',
    'zero_buffer',
    'new_session_key',
    'protect',
    'unprotect',
]


def to_bytes(data):
    """
    Ensure that a character sequence is represented as a bytes object. If it's already a bytes
    object, no change is made. If it's a string object, it's encoded as a UTF-8 string. Otherwise,
    it is treated as a sequence of character ordinal values.

    :param data: The data to be converted to bytes.
    :return: The data, converted to a bytes instance.
    """

    if isinstance(data, str):
        return data.encode()
    else:
        return bytes(data)


def from_bytes(data):
    """
    Ensure that a character sequence is represented as a string object. If it's already a string
    object, no change is made. If it's a data object, it's decoded as a UTF-8 string. Otherwise, it
    is treated as a sequence of character ordinal values and decoded as a UTF-8 string.

    :param data: The data to be converted.
    :return: The data, converted to a str instance.
    """

    if isinstance(data, str):
        return data
    else:
        return bytes(data).decode()


def zero_buffer(buffer):
    """
    Overwrite the contents of a mutable byte buffer with zeros, in place.

    :param buffer: A bytearray (or other writable buffer) to be scrubbed.
    :return: None
    """

    if buffer is None:
        return
    length = len(buffer)
    if not length:
        return
    view = (ctypes.c_char * length).from_buffer(buffer)
    ctypes.memset(ctypes.addressof(view), 0, length)
    del view


def new_session_key():
    """
    Generate a new random encryption key, in the base64 URL-safe encoding expected by Fernet.

    :return: The new key.
    """
    return cryptography.fernet.Fernet.generate_key()


def protect(data, key):
    """
    Encrypt the data under the given session key. Note that this function returns a bytes
    instance, not a unicode string.

    :param data: The data to be encrypted.
    :param key: The session key, as returned by new_session_key().
    :return: The encrypted token.
    """

    symmetric_encoding = cryptography.fernet.Fernet(key)
    del key
    return symmetric_encoding.encrypt(to_bytes(data))


def unprotect(token, key):
    """
    Decrypt a token produced by protect() and return the plaintext in a new mutable bytearray,
    which the caller is responsible for scrubbing with zero_buffer().

    :param token: The encrypted token.
    :param key: The session key the token was encrypted under.
    :return: The decrypted data, as a bytearray.
    """

    symmetric_encoding = cryptography.fernet.Fernet(key)
    del key

    # An error here indicates that the token was produced under a different session key.
    try:
        plaintext = symmetric_encoding.decrypt(token)
    except cryptography.fernet.InvalidToken as exc:
        raise CryptographyError("Protected data could not be decrypted.") from exc

    try:
        return bytearray(plaintext)
    finally:
        del plaintext
