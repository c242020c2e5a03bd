# -*- coding: utf-8 -*-

import functools

from .completer import Completer
from .deferred import Deferred
from .errors import RejectionError
from .util import is_thenable


def reduce_coroutine(safeguard=False):
    """Decorator who converts a coroutine of Deferreds into a single Deferred.

    It allows to write a function in a synchronous-like style, using many
    asynchronous Deferreds: each Deferred yielded is waited, then its value is
    sent back into the generator (or its rejection reason is raised at the
    `yield` expression).

    The result of the whole process is the first non-thenable value yielded,
    or the value returned by the generator. A generator returning None
    (explicitly or by reaching its end) gives the value of the last Deferred
    it received, or None if the last one was rejected. The generator is
    closed as soon as the result is known.

    Args:
        safeguard (boolean): if true, use `Deferred.safeguard()` on the
            resulting Deferred.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            """
            Returns:
                Deferred<*>
            """
            completer = Completer(_name='COROUTINE %s' % func.__name__)
            if safeguard:
                completer.deferred.safeguard()

            try:
                gen = func(*args, **kwargs)
            except Exception as error:
                completer.reject(error)
                return completer.deferred

            # Value sent into the generator by the last step, None after a
            # thrown error.
            last_value = [None]

            def step(send, arg):
                # Already settled Deferreds are consumed in this loop; only
                # pending thenables need a continuation.
                while True:
                    try:
                        value = send(arg)
                    except StopIteration as stop:
                        if stop.value is not None:
                            return completer.resolve(stop.value)
                        return completer.resolve(last_value[0])
                    except Exception as error:
                        return completer.reject(error)

                    if not is_thenable(value):
                        gen.close()
                        return completer.resolve(value)

                    state = (value.state if isinstance(value, Deferred)
                             else Deferred.PENDING)
                    if state == Deferred.FULFILLED:
                        send, arg = gen.send, value.outcome
                        last_value[0] = arg
                    elif state == Deferred.REJECTED:
                        send, arg = gen.throw, _as_exception(value.outcome)
                        last_value[0] = None
                    else:
                        value.then(on_value, on_error)
                        return

            def on_value(value):
                last_value[0] = value
                step(gen.send, value)

            def on_error(error):
                last_value[0] = None
                step(gen.throw, _as_exception(error))

            step(gen.send, None)
            return completer.deferred

        return wrapper
    return decorator


def _as_exception(reason):
    if isinstance(reason, BaseException):
        return reason
    return RejectionError(reason)
