########################################################################
# File name: callbacks.py
# This file is part of: pubsubbridge
#
# LICENSE
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Lesser General Public License as
# published by the Free Software Foundation, either version 3 of the
# License, or (at your option) any later version.
#
# This program is distributed in the hope that it will be useful, but
# WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public
# License along with this program.  If not, see
# <http://www.gnu.org/licenses/>.
#
########################################################################
"""
:mod:`~pubsubbridge.callbacks` -- Tag dispatch and signals
##########################################################

This module provides the two callback mechanisms of the adapter: the
:class:`TagDispatcher`, which delivers data to exactly one listener per tag
(used to correlate responses with requests), and signals, to which any
number of listeners can connect (used for push notifications).

Tag dispatching
===============

.. autoclass:: TagDispatcher

.. autoclass:: TagListener

.. autoclass:: OneshotTagListener

.. autoclass:: Correlator

Signals
=======

Descriptors can be used as class attributes and will create ad-hoc signals
dynamically for each instance:

.. code-block:: python

   class Emitter:
       on_event = callbacks.Signal()

   def handler():
       pass

   emitter1 = Emitter()
   emitter2 = Emitter()
   emitter1.on_event.connect(handler)

   emitter1.on_event()  # calls `handler`
   emitter2.on_event()  # does not call `handler`

.. autoclass:: Signal

.. autoclass:: AdHocSignal

"""

import abc
import collections
import functools
import logging
import types
import weakref

from . import errors, structs


logger = logging.getLogger(__name__)


class TagListener:
    """
    Listener calling `ondata` with the data unicast to its tag and `onerror`
    (if given) with errors unicast to its tag.

    A plain :class:`TagListener` stays registered after receiving data.
    """

    def __init__(self, ondata, onerror=None):
        self._ondata = ondata
        self._onerror = onerror

    def data(self, data):
        return self._ondata(data)

    def error(self, exc):
        if self._onerror is not None:
            return self._onerror(exc)

    def is_valid(self):
        return True


class OneshotTagListener(TagListener):
    """
    Listener which is removed from the dispatcher after it received either
    data or an error, and which can be cancelled beforehand.
    """

    def __init__(self, ondata, onerror=None, **kwargs):
        super().__init__(ondata, onerror=onerror, **kwargs)
        self._cancelled = False

    def data(self, data):
        super().data(data)
        return True

    def error(self, exc):
        super().error(exc)
        return True

    def cancel(self):
        self._cancelled = True

    def is_valid(self):
        return not self._cancelled and super().is_valid()


class TagDispatcher:
    """
    Deliver data to at most one listener per tag.

    .. automethod:: add_listener

    .. automethod:: unicast

    .. automethod:: unicast_error

    .. automethod:: remove_listener
    """

    def __init__(self):
        self._listeners = {}

    def __contains__(self, tag):
        try:
            return self._listeners[tag].is_valid()
        except KeyError:
            return False

    def __len__(self):
        return len(self._listeners)

    def tags(self):
        return list(self._listeners)

    def add_listener(self, tag, listener):
        """
        Register `listener` for `tag`.

        :raises ValueError: if a valid listener is already registered for
            `tag`
        """
        try:
            existing = self._listeners[tag]
            if not existing.is_valid():
                raise KeyError()
        except KeyError:
            self._listeners[tag] = listener
        else:
            raise ValueError("only one listener is allowed per tag")

    def unicast(self, tag, data):
        """
        Deliver `data` to the listener registered for `tag`.

        :raises KeyError: if there is no valid listener for `tag`
        """
        cb = self._listeners[tag]
        if not cb.is_valid():
            del self._listeners[tag]
            self._listeners[tag]
        if cb.data(data):
            del self._listeners[tag]

    def unicast_error(self, tag, exc):
        """
        Deliver the error `exc` to the listener registered for `tag`.

        :raises KeyError: if there is no valid listener for `tag`
        """
        cb = self._listeners[tag]
        if not cb.is_valid():
            del self._listeners[tag]
            self._listeners[tag]
        if cb.error(exc):
            del self._listeners[tag]

    def remove_listener(self, tag):
        del self._listeners[tag]


class AbstractAdHocSignal:
    def __init__(self):
        super().__init__()
        self._connections = collections.OrderedDict()
        self.logger = logger

    def _connect(self, wrapper):
        token = object()
        self._connections[token] = wrapper
        return token

    def disconnect(self, token):
        """
        Disconnect the connection identified by `token`. This never raises,
        even if an invalid `token` is passed.
        """
        try:
            del self._connections[token]
        except KeyError:
            pass


class AdHocSignal(AbstractAdHocSignal):
    """
    An ad-hoc signal is a single emitter. This is where callables are connected
    to, using the :meth:`connect` method of the :class:`AdHocSignal`.

    .. automethod:: fire

    .. automethod:: connect

    .. automethod:: context_connect

    .. automethod:: disconnect

    .. attribute:: logger

       The :class:`logging.Logger` to which exceptions raised by listeners
       are logged.

    Callables can be connected in the following modes:

    .. attribute:: STRONG

       A strong reference to the callable is kept and the callable is called
       directly.

    .. attribute:: WEAK

       A weak reference to the callable is kept (:class:`weakref.WeakMethod`
       for bound methods). Dead references are removed automatically.

    For both :attr:`STRONG` and :attr:`WEAK` holds: if the callable returns a
    true value, it is disconnected from the signal.
    """

    @classmethod
    def STRONG(cls, f):
        if not hasattr(f, "__call__"):
            raise TypeError("must be callable, got {!r}".format(f))
        return functools.partial(cls._strong_wrapper, f)

    @classmethod
    def WEAK(cls, f):
        if not hasattr(f, "__call__"):
            raise TypeError("must be callable, got {!r}".format(f))
        if isinstance(f, types.MethodType):
            ref = weakref.WeakMethod(f)
        else:
            ref = weakref.ref(f)
        return functools.partial(cls._weakref_wrapper, ref)

    @staticmethod
    def _weakref_wrapper(fref, args, kwargs):
        f = fref()
        if f is None:
            return False
        return not f(*args, **kwargs)

    @staticmethod
    def _strong_wrapper(f, args, kwargs):
        return not f(*args, **kwargs)

    def connect(self, f, mode=None):
        """
        Connect an object `f` to the signal. The type the object needs to have
        depends on `mode`, but usually it needs to be a callable.

        :meth:`connect` returns an opaque token which can be used with
        :meth:`disconnect` to disconnect the object from the signal.

        The default value for `mode` is :attr:`STRONG`.
        """

        mode = mode or self.STRONG
        self.logger.debug("connecting %r with mode %r", f, mode)
        return self._connect(mode(f))

    def context_connect(self, f, mode=None):
        """
        This returns a *context manager*. When entering the context, `f` is
        connected to the :class:`AdHocSignal` using `mode`. When leaving the
        context (no matter whether with or without exception), the connection
        is disconnected.
        """
        return SignalConnectionContext(self, f, mode=mode)

    def fire(self, *args, **kwargs):
        """
        Emit the signal, calling all connected objects in-line with the given
        arguments and in the order they were registered.

        :class:`AdHocSignal` provides full isolation with respect to
        exceptions. If a connected listener raises an exception, the other
        listeners are executed as normal, but the raising listener is removed
        from the signal. The exception is logged to :attr:`logger` and *not*
        re-raised, so that the caller of the signal is also not affected.

        Instead of calling :meth:`fire` explicitly, the ad-hoc signal object
        itself can be called, too.
        """
        for token, wrapper in list(self._connections.items()):
            try:
                keep = wrapper(args, kwargs)
            except Exception:
                self.logger.exception("listener attached to signal raised")
                keep = False
            if not keep:
                del self._connections[token]

    __call__ = fire


class SignalConnectionContext:
    def __init__(self, signal, *args, **kwargs):
        self._signal = signal
        self._args = args
        self._kwargs = kwargs

    def __enter__(self):
        try:
            token = self._signal.connect(*self._args, **self._kwargs)
        finally:
            del self._args
            del self._kwargs
        self._token = token
        return token

    def __exit__(self, exc_type, exc_value, traceback):
        self._signal.disconnect(self._token)
        return False


class AbstractSignal(metaclass=abc.ABCMeta):
    def __init__(self, *, doc=None):
        super().__init__()
        self.__doc__ = doc
        self._instances = weakref.WeakKeyDictionary()

    @classmethod
    @abc.abstractmethod
    def make_adhoc_signal(cls):
        pass

    def __get__(self, instance, owner):
        if instance is None:
            return self
        try:
            return self._instances[instance]
        except KeyError:
            new = self.make_adhoc_signal()
            self._instances[instance] = new
            return new

    def __set__(self, instance, value):
        raise AttributeError("cannot override Signal attribute")

    def __delete__(self, instance):
        raise AttributeError("cannot override Signal attribute")


class Signal(AbstractSignal):
    """
    A descriptor which returns per-instance :class:`AdHocSignal` objects on
    attribute access.

    Example use:

    .. code-block:: python

       class Foo:
           on_event = Signal()

       f = Foo()
       assert isinstance(f.on_event, AdHocSignal)
       assert f.on_event is f.on_event
       assert Foo().on_event is not f.on_event

    """

    @classmethod
    def make_adhoc_signal(cls):
        return AdHocSignal()


class Correlator:
    """
    Table of pending requests, keyed by the id of the request stanza.

    :param loop: Event loop used to schedule timeouts.
    :param timeout: Number of seconds after which a pending request is
        rejected, or :data:`None` to wait indefinitely.
    :param logger: Logger to use; defaults to the module logger.
    :raises ValueError: if `timeout` is given without `loop`

    Each id is consumed at most once: by a response (:meth:`resolve`), by
    :meth:`reject` or by the timeout, whichever comes first. Afterwards, the
    id is free again.

    .. automethod:: register

    .. automethod:: resolve

    .. automethod:: reject

    .. automethod:: reject_all

    .. automethod:: discard

    .. automethod:: pending_ids
    """

    def __init__(self, *, loop=None, timeout=None, logger=None):
        super().__init__()
        if timeout is not None and loop is None:
            raise ValueError("a loop is required to schedule timeouts")
        self._dispatcher = TagDispatcher()
        self._timers = {}
        self.loop = loop
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

    def __contains__(self, id_):
        return id_ in self._dispatcher

    def __len__(self):
        return len(self._dispatcher)

    def pending_ids(self):
        return self._dispatcher.tags()

    def register(self, id_, on_response, on_error):
        """
        Register a pending request with the stanza id `id_`.

        `on_response` is called with the response stanza, `on_error` with an
        :class:`~.errors.ErrorDescriptor` if the request is rejected locally.

        :raises ValueError: if a request with the same id is still pending
        """
        self._dispatcher.add_listener(
            id_,
            OneshotTagListener(on_response, on_error)
        )
        if self.timeout is not None:
            self._timers[id_] = self.loop.call_later(
                self.timeout,
                self._expire,
                id_,
            )
        self.logger.debug("awaiting response for %r", id_)

    def _cancel_timer(self, id_):
        try:
            handle = self._timers.pop(id_)
        except KeyError:
            return
        handle.cancel()

    def _expire(self, id_):
        self._timers.pop(id_, None)
        self.logger.debug("request %r timed out", id_)
        self.reject(
            id_,
            errors.ErrorDescriptor(
                structs.ErrorType.WAIT,
                "remote-server-timeout",
                description="Request timed out",
            )
        )

    def resolve(self, stanza):
        """
        Hand the response `stanza` to the handler registered for its id.

        :return: :data:`True` if a pending request was resolved,
            :data:`False` if the id is unknown.
        """
        id_ = stanza.get("id")
        if id_ is None or id_ not in self._dispatcher:
            return False
        self._cancel_timer(id_)
        self.logger.debug("resolving %r", id_)
        self._dispatcher.unicast(id_, stanza)
        return True

    def reject(self, id_, descriptor):
        """
        Hand the :class:`~.errors.ErrorDescriptor` `descriptor` to the error
        handler registered for `id_`.

        :return: :data:`True` if a pending request was rejected,
            :data:`False` if the id is unknown.
        """
        if id_ not in self._dispatcher:
            return False
        self._cancel_timer(id_)
        self._dispatcher.unicast_error(id_, descriptor)
        return True

    def discard(self, id_):
        """
        Remove the pending request `id_` without invoking any handler.
        """
        self._cancel_timer(id_)
        try:
            self._dispatcher.remove_listener(id_)
        except KeyError:
            pass

    def reject_all(self, descriptor):
        """
        Reject all pending requests with `descriptor`.
        """
        for id_ in self.pending_ids():
            self.reject(id_, descriptor)
