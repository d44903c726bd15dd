import secrets
import string


# Uppercase letters and digits without look-alikes (0/O, 1/I) for reading aloud at the counter
PICKUP_CODE_ALPHABET = ''.join(
    ch for ch in string.ascii_uppercase + string.digits if ch not in {'0', 'O', '1', 'I'}
)


def generate_pickup_code(length: int = 6) -> str:
    if length < 4:
        raise ValueError('Pickup code must be at least 4 characters long')
    return ''.join(secrets.choice(PICKUP_CODE_ALPHABET) for _ in range(length))


def normalize_pickup_code(code: str) -> str:
    return code.strip().upper()
