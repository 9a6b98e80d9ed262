class ValidationError(ValueError):
    """User input that cannot be submitted. The message is shown inline."""


class PersistenceError(ValueError):
    """A stored cart snapshot that cannot be decoded."""
