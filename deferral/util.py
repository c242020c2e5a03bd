# -*- coding: utf-8 -*-


def is_thenable(value):
    """Check if an object can be chained, like a Deferred, or is a "result".

    Used to differentiate "chainable" objects and direct values, when a
    callback can return both.

    Returns:
        boolean: True if the value has an attribute 'then' who is callable.
            False if not.
    """
    return callable(getattr(value, 'then', None))
