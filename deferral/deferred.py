# -*- coding: utf-8 -*-

from collections import deque, namedtuple
import logging
from threading import Condition, local

from .errors import InvalidStateError, RejectionError, TimeoutError
from .util import is_thenable

_logger = logging.getLogger(__name__)


# One registered continuation. Either half can be None.
_Continuation = namedtuple('_Continuation', ['on_fulfilled', 'on_rejected'])

# Per-thread queue of (continuation, state, outcome) waiting to run. It only
# exists while the outermost settlement of the thread drains it.
_pending_runs = local()


class Resolver(object):
    """Capability handle used to settle a Deferred.

    The setup routine of a Deferred receives the bound methods `resolve` and
    `reject` of a Resolver, never the Deferred itself.
    """

    def __init__(self, deferred):
        self._deferred = deferred

    def resolve(self, value):
        """Fulfill the Deferred with `value`, unless it's already settled."""
        self._deferred._settle(Deferred.FULFILLED, value)

    def reject(self, error):
        """Reject the Deferred with `error`, unless it's already settled."""
        self._deferred._settle(Deferred.REJECTED, error)


class Deferred(object):
    """Eventual result of an asynchronous operation.

    A Deferred starts pending, then is either fulfilled with a value or
    rejected with a reason. This transition happens only once. Continuations
    can be chained with `then()` and `catch()` at any time, before or after
    the settlement.

    All calls to the methods are thread-safe. The continuations are executed
    in the thread who settles the Deferred, or in the thread calling `then()`
    if the Deferred is already settled. When a continuation settles another
    Deferred, the continuations of the latter run after it returns, in a loop
    owned by the outermost settlement of the thread: chains of any length are
    settled without growing the stack.
    """

    PENDING = 'pending'
    FULFILLED = 'fulfilled'
    REJECTED = 'rejected'

    def __init__(self, setup, _name=None, _previous=None):
        """Constructor of the Deferred.

        The `setup` routine is fully executed before the constructor returns.
        If it raises an exception, the Deferred is rejected with it.

        Args:
            setup (callable): Takes 2 callable arguments, `resolve(value)` and
                `reject(error)`. It can call one of them immediately, or keep
                them to settle the Deferred later.
            _name (str): if set, name used when converted to text.
            _previous (Deferred): if set, Deferred this one is chained to.
        """
        self._state = self.PENDING
        self._outcome = None
        self._condition = Condition()
        self._continuations = []
        self._name = _name or getattr(setup, '__name__', '???')
        self._previous = _previous

        resolver = Resolver(self)
        try:
            setup(resolver.resolve, resolver.reject)
        except Exception as error:
            resolver.reject(error)

    @property
    def state(self):
        """str: one of PENDING, FULFILLED or REJECTED."""
        with self._condition:
            return self._state

    @property
    def outcome(self):
        """Value or rejection reason of a settled Deferred.

        Raises:
            InvalidStateError: if the Deferred is still pending.
        """
        with self._condition:
            if self._state == self.PENDING:
                raise InvalidStateError('Deferred %r is still pending' % self)
            return self._outcome

    def is_pending(self):
        return self.state == self.PENDING

    def is_fulfilled(self):
        return self.state == self.FULFILLED

    def is_rejected(self):
        return self.state == self.REJECTED

    def result(self, timeout=None):
        """Wait for the result and returns it as soon as it's available.

        Args:
            timeout (float, optional): if set, maximum time to wait for the
                Deferred to be settled. By default, it waits indefinitely.
        Returns:
            *: the fulfillment value.
        Raises:
            TimeoutError: if the Deferred is not settled within the delay.
            RejectionError: if the Deferred is rejected with a value who is
                not an exception.
            *: If the Deferred is rejected, the rejection reason is raised.
        """
        with self._condition:
            self._wait(timeout)
            if self._state == self.FULFILLED:
                return self._outcome
            error = self._outcome

        if isinstance(error, BaseException):
            raise error
        raise RejectionError(error)

    def exception(self, timeout=None):
        """Wait for the Deferred to be settled and returns its reason.

        Args:
            timeout (float, optional): if set, maximum time to wait for the
                Deferred to be settled. By default, it waits indefinitely.
        Returns:
            *: the rejection reason, or None if the Deferred is fulfilled.
        Raises:
            TimeoutError: if the Deferred is not settled within the delay.
        """
        with self._condition:
            self._wait(timeout)
            if self._state == self.REJECTED:
                return self._outcome
            return None

    def then(self, on_fulfilled=None, on_rejected=None):
        """Create a new Deferred from callbacks called when this one settles.

        If this Deferred is fulfilled, `on_fulfilled` is called with the
        value. If it's rejected, `on_rejected` is called with the reason.
        The value returned by the callback fulfills the new Deferred, even
        when it comes from `on_rejected`: the error is considered handled.
        If the callback raises an exception, the new Deferred is rejected
        with it.

        A missing callback transfers the state of this Deferred (and its
        value or reason) to the new Deferred.

        Args:
            on_fulfilled (callable, optional): receives the value of this
                Deferred.
            on_rejected (callable, optional): receives the rejection reason of
                this Deferred.
        Returns:
            Deferred: new Deferred depending on this one.
        """

        def chained_setup(resolve, reject):

            def callback(value):
                if on_fulfilled is None:
                    return resolve(value)
                try:
                    new_value = on_fulfilled(value)
                except Exception as error:
                    return reject(error)
                resolve(new_value)

            def errback(error):
                if on_rejected is None:
                    return reject(error)
                try:
                    new_value = on_rejected(error)
                except Exception as new_error:
                    return reject(new_error)
                resolve(new_value)

            self._add_continuation(_Continuation(callback, errback))

        if not on_rejected:
            name = getattr(on_fulfilled, '__name__', 'THEN')
        elif not on_fulfilled:
            name = '<None, %s>' % getattr(on_rejected, '__name__', '???')
        else:
            name = '<%s, %s>' % (getattr(on_fulfilled, '__name__', '???'),
                                 getattr(on_rejected, '__name__', '???'))
        return Deferred(chained_setup, _name=name, _previous=self)

    def catch(self, on_rejected):
        """Create a new Deferred with a callback called when an error occurs.

        Alias of `self.then(None, on_rejected)`
        """
        return self.then(None, on_rejected)

    def safeguard(self):
        """Log the rejection of this Deferred, with as many details as possible.

        A rejection without any handler is silently ignored. Calling
        `safeguard()` on the last Deferred of a chain logs such errors as
        ERROR, with their traceback.
        """
        def guard(error):
            if isinstance(error, BaseException):
                _logger.error('[SAFEGUARD] %r' % self,
                              exc_info=(type(error), error,
                                        error.__traceback__))
            else:
                _logger.error('[SAFEGUARD] %r rejected with: %r'
                              % (self, error))

        self._add_continuation(_Continuation(None, guard))

    def __repr__(self):
        return 'Deferred(%s)' % self._inner_print()

    def _inner_print(self):
        links = []
        deferred = self
        while deferred is not None:
            with deferred._condition:
                state = deferred._state[0].upper()
            links.append('%s %s' % (deferred._name, state))
            deferred = deferred._previous
        return ' -> '.join(reversed(links))

    @classmethod
    def resolved(cls, value):
        """Create a Deferred already fulfilled with `value`.

        Args:
            value: result of the Deferred. If it's a thenable, it's returned
                as is.
        Returns:
            Deferred
        """
        if is_thenable(value):
            return value
        return cls(lambda resolve, reject: resolve(value), _name='RESOLVED')

    @classmethod
    def rejected(cls, reason):
        """Create a Deferred already rejected with `reason`."""
        return cls(lambda resolve, reject: reject(reason), _name='REJECTED')

    def _wait(self, timeout):
        # Must be called with self._condition acquired.
        if self._state == self.PENDING:
            self._condition.wait_for(lambda: self._state != self.PENDING,
                                     timeout)
        if self._state == self.PENDING:
            raise TimeoutError()

    def _settle(self, state, outcome):
        with self._condition:
            if self._state != self.PENDING:
                _logger.debug('%r already settled. New %s outcome ignored: %r',
                              self, state, outcome)
                return
            self._state = state
            self._outcome = outcome
            continuations, self._continuations = self._continuations, None
            self._condition.notify_all()

        if state == self.REJECTED and not isinstance(outcome, BaseException):
            _logger.debug('%r rejected with non-exception value: %r',
                          self, outcome)

        queue = getattr(_pending_runs, 'queue', None)
        if queue is not None:
            # Settled from a continuation: the outermost _settle() runs them.
            queue.extend((continuation, state, outcome)
                         for continuation in continuations)
            return

        _pending_runs.queue = queue = deque(
            (continuation, state, outcome) for continuation in continuations)
        try:
            while queue:
                self._run(*queue.popleft())
        finally:
            _pending_runs.queue = None

    def _add_continuation(self, continuation):
        with self._condition:
            if self._state == self.PENDING:
                self._continuations.append(continuation)
                return
            state, outcome = self._state, self._outcome

        self._run(continuation, state, outcome)

    @staticmethod
    def _run(continuation, state, outcome):
        if state == Deferred.FULFILLED:
            handler = continuation.on_fulfilled
        else:
            handler = continuation.on_rejected
        if handler is None:
            return
        try:
            handler(outcome)
        except Exception:
            _logger.exception('Deferred continuation raised an exception!')
