# -*- coding: utf-8 -*-

from .deferred import Deferred


class Completer(object):
    """Creator side of a Deferred.

    The Deferred represents the asynchronous value from the consumer side,
    whereas a Completer keeps the capabilities to settle it, for code who
    can't do it from a setup routine.

    Attributes:
        deferred (Deferred): the Deferred associated to the Completer.
        resolve (callable): fulfill `deferred` with a value.
        reject (callable): reject `deferred` with a reason.
    """

    def __init__(self, _name=None):
        self.deferred = Deferred(self._setup, _name=_name or 'COMPLETER')

    def _setup(self, resolve, reject):
        self.resolve = resolve
        self.reject = reject
