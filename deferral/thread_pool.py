# -*- coding: utf-8 -*-

from concurrent.futures import ThreadPoolExecutor as Executor

from .completer import Completer


class ThreadPoolExecutor(object):
    """Execute callables asynchronously on demand, in other threads."""

    def __init__(self, max_workers):
        """Initialize the thread pool

        Args:
            max_workers: The maximum number of threads that can be used to
                execute the given calls.
        """
        self._executor = Executor(max_workers)

    def submit(self, callback, *args, **kwargs):
        """Schedule the callable to be executed and return a Deferred.

        Args:
            callback (callable): callback who will run in another thread.
            *args: argument passed to callback.
            **kwargs: keywords arguments passed to callback.
        Returns:
            Deferred: fulfilled with the value returned by the callback, once
                executed. If the callback raises an exception, the Deferred is
                rejected with this exception.
        """
        completer = Completer(_name='SUBMIT %s'
                              % getattr(callback, '__name__', '???'))

        def on_future_done(future):
            error = future.exception()
            if error is None:
                completer.resolve(future.result())
            else:
                completer.reject(error)

        future = self._executor.submit(callback, *args, **kwargs)
        future.add_done_callback(on_future_done)

        return completer.deferred

    def shutdown(self, wait=True):
        """Free the resources once the pending callables are done."""
        self._executor.shutdown(wait)
