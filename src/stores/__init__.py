class DuplicateEmailError(Exception):
    """Raised when an insert or update collides with the unique email index."""
    pass
