"""
Correlation id generation for operation logs.
"""
import time
import random

ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"


def base32_encode(num: int, length: int) -> str:
    """Crockford base32 encoding, left-padded with zeros to length."""
    result = []
    while num > 0 and len(result) < length:
        num, remainder = divmod(num, 32)
        result.append(ALPHABET[remainder])
    while len(result) < length:
        result.append("0")
    return "".join(reversed(result))


def operation_id() -> str:
    """
    Generate a ULID-like id: millisecond timestamp (10 chars) + random (16 chars).
    Sorts by creation time, so ids from one session read in order in the logs.
    """
    timestamp_part = base32_encode(int(time.time() * 1000), 10)
    random_part = "".join(random.choices(ALPHABET, k=16))
    return f"{timestamp_part}{random_part}"
