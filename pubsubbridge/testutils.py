########################################################################
# File name: testutils.py
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
This module contains utilities used for testing pubsubbridge code and code
built on it.
"""
import asyncio
import logging
import unittest.mock

import pubsubbridge.callbacks as callbacks

from pubsubbridge.utils import etree, namespaces


logger = logging.getLogger(__name__)


DEFAULT_TIMEOUT = 1.0


def run_coroutine(coroutine, timeout=DEFAULT_TIMEOUT, loop=None):
    """
    Run `coroutine` to completion on `loop`, or on a fresh event loop which
    is closed afterwards.
    """
    if loop is not None:
        return loop.run_until_complete(
            asyncio.wait_for(coroutine, timeout=timeout)
        )

    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(
            asyncio.wait_for(coroutine, timeout=timeout)
        )
    finally:
        loop.close()


def make_listener(instance):
    """
    Return a :class:`unittest.mock.Mock` which has children connected to each
    :class:`pubsubbridge.callbacks.Signal` of `instance`.

    The children are named exactly like the signals.
    """
    result = unittest.mock.Mock([])
    names = {
        name
        for type_ in type(instance).__mro__
        for name in type_.__dict__
    }
    for name in names:
        signal = getattr(instance, name)
        if not isinstance(signal, callbacks.AdHocSignal):
            continue
        cb = unittest.mock.Mock()
        setattr(result, name, cb)
        cb.return_value = None
        signal.connect(cb)
    return result


class TransportMock:
    """
    Transport which records the stanzas sent through it.

    .. attribute:: sent

       List of the sent :mod:`lxml.etree` elements.

    .. attribute:: on_send

       Optional callable invoked with every sent stanza, for example to
       answer it synchronously.
    """

    def __init__(self, on_send=None):
        self.sent = []
        self.on_send = on_send

    def send(self, stanza):
        logger.debug("sent: %s", etree.tostring(stanza))
        self.sent.append(stanza)
        if self.on_send is not None:
            self.on_send(stanza)

    @property
    def last(self):
        return self.sent[-1]


def make_response(request, payload=None, type_="result"):
    """
    Return the lxml response to the lxml `request` stanza.

    `payload` is an XML string appended to the response.
    """
    response = etree.Element(
        "{{{}}}iq".format(namespaces.client),
        nsmap={None: namespaces.client},
    )
    response.set("type", type_)
    response.set("id", request.get("id"))
    if request.get("to") is not None:
        response.set("from", request.get("to"))
    if payload is not None:
        response.append(etree.fromstring(payload))
    return response


def make_error_response(request, type_="cancel",
                        condition="item-not-found",
                        text=None,
                        application=None):
    """
    Return an ``error`` response to `request`.

    `application` is the local name of an optional pubsub error condition.
    """
    parts = ['<error xmlns="{}" type="{}">'.format(namespaces.client, type_)]
    parts.append('<{} xmlns="{}"/>'.format(condition, namespaces.stanzas))
    if application is not None:
        parts.append('<{} xmlns="{}"/>'.format(
            application,
            "http://jabber.org/protocol/pubsub#errors",
        ))
    if text is not None:
        parts.append('<text xmlns="{}">{}</text>'.format(
            namespaces.stanzas, text,
        ))
    parts.append("</error>")
    return make_response(request, "".join(parts), type_="error")
