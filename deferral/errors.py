# -*- coding: utf-8 -*-


class TimeoutError(Exception):
    """A Deferred has not been settled within the time allowed."""
    pass


class InvalidStateError(Exception):
    """The operation is not allowed in the current state of the Deferred."""
    pass


class RejectionError(Exception):
    """A Deferred has been rejected with a value who is not an exception.

    Attributes:
        reason: the original rejection value.
    """

    def __init__(self, reason):
        Exception.__init__(self, 'Deferred rejected with %r' % (reason,))
        self.reason = reason
