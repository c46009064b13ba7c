class DomainError(Exception):
    """
    Base class for every exception raised by structured_chat.
    Lets callers catch package-specific failures in one place.
    """

    pass
