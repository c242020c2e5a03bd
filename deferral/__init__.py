# -*- coding: utf-8 -*-

from .__version__ import __version__
from .completer import Completer
from .decorators import wrap_deferred
from .deferred import Deferred, Resolver
from .errors import InvalidStateError, RejectionError, TimeoutError
from .reduce_coroutine import reduce_coroutine
from .thread_pool import ThreadPoolExecutor
from .util import is_thenable

__all__ = ['__version__', 'is_thenable', 'Completer', 'Deferred',
           'InvalidStateError', 'RejectionError', 'Resolver', 'TimeoutError',
           'ThreadPoolExecutor', 'reduce_coroutine', 'wrap_deferred']
