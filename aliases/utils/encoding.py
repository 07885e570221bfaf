import secrets
import uuid


def random_string(chars: str, length: int) -> str:
    """Sample ``length`` characters from ``chars`` uniformly, with replacement."""
    return ''.join(secrets.choice(chars) for _ in range(length))


def random_uuid() -> str:
    """Random UUID v4 in its canonical textual form."""
    return str(uuid.uuid4())


def encode_decimal(num: int) -> str:
    return str(num)
