import hashlib
import hmac
import secrets


def sha256(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def pin_hash(salt: str, username: str, pin: str) -> str:
    # username приводится к нижнему регистру: хэш не зависит от написания имени
    return sha256(f"{salt}::{username.lower()}::{pin}")


def admin_pin_hash(salt: str, pin: str) -> str:
    return sha256(f"{salt}::ADMIN::{pin}")


def digests_match(expected: str, actual: str) -> bool:
    return hmac.compare_digest(expected.encode("utf-8"), actual.encode("utf-8"))


def generate_pin() -> str:
    """Случайный 4-значный PIN в диапазоне 1000..9999."""
    return str(1000 + secrets.randbelow(9000))
