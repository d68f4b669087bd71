import secrets
import string

SYMBOLS = "!@#$%^&*"
PASSWORD_ALPHABET = string.ascii_letters + string.digits + SYMBOLS


def generate_password(length: int = 12) -> str:
    """Random password with at least one lowercase, uppercase, digit and symbol."""
    if length < 4:
        raise ValueError("Password length must be at least 4")

    chars = [
        secrets.choice(string.ascii_lowercase),
        secrets.choice(string.ascii_uppercase),
        secrets.choice(string.digits),
        secrets.choice(SYMBOLS),
    ]
    chars.extend(secrets.choice(PASSWORD_ALPHABET) for _ in range(length - len(chars)))
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)
