# -*- coding: utf-8 -*-

import functools

from .deferred import Deferred


def wrap_deferred(f):
    """Decorator who converts the result in a Deferred object.

    If the function decorated returns a thenable, it's transmitted as is.
    Else, a new Deferred is created with the returned value as result. An
    exception raised by the function gives a rejected Deferred.
    """
    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return Deferred.resolved(f(*args, **kwargs))
        except Exception as error:
            return Deferred.rejected(error)

    return wrapper
