class NotFoundError(LookupError):
    """A referenced record (user, workshop, activity, enrollment) does not exist."""


class AlreadyEnrolledError(ValueError):
    pass


class EmailAlreadyRegisteredError(ValueError):
    pass
