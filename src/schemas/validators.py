NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50


def normalize_email(value):
    """Runs before EmailStr; only trims and lowercases."""
    if not isinstance(value, str):
        return value
    email = value.strip().lower()
    if not email:
        raise ValueError("Email is required")
    return email


def normalize_name(value: str) -> str:
    name = value.strip()
    if not name:
        raise ValueError("Name is required")
    if len(name) < NAME_MIN_LENGTH:
        raise ValueError(f"Name must be at least {NAME_MIN_LENGTH} characters")
    if len(name) > NAME_MAX_LENGTH:
        raise ValueError(f"Name cannot exceed {NAME_MAX_LENGTH} characters")
    return name
