########################################################################
# File name: stanza.py
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
:mod:`~pubsubbridge.stanza` --- Stanza envelopes
################################################

Outgoing envelopes are built as :class:`~.xml.Element` trees in the
``jabber:client`` namespace.

.. autofunction:: make_id

.. autofunction:: make_iq

.. autofunction:: make_message

Incoming stanzas
================

The transport hands over :mod:`lxml.etree` elements. The envelope namespace
is not checked, so that transports which strip it work, too.

.. autofunction:: stanza_kind

.. autofunction:: get_id

.. autofunction:: get_type

.. autofunction:: get_from

.. autofunction:: is_response

.. autodata:: RANDOM_ID_BYTES
"""
import random

from . import structs, xml

from .utils import namespaces, to_nmtoken

#: The number of bytes of randomness used when generating stanza IDs.
RANDOM_ID_BYTES = 120 // 8


def make_id():
    """
    Return a fresh stanza id: :data:`RANDOM_ID_BYTES` of random data, encoded
    by :func:`~.utils.to_nmtoken`.
    """
    return to_nmtoken(random.getrandbits(8*RANDOM_ID_BYTES))


def _format_type(type_):
    if isinstance(type_, (structs.IQType, structs.MessageType)):
        return type_.value
    return type_


def make_iq(type_, to, payload=None, id_=None):
    """
    Build an ``<iq/>`` envelope.

    :param type_: The IQ type.
    :type type_: :class:`~.IQType` or :class:`str`
    :param to: The recipient.
    :type to: :class:`~.JID` or :class:`str`
    :param payload: The single child element, if any.
    :type payload: :class:`~.xml.Element`
    :param id_: The stanza id.
    :rtype: :class:`~.xml.Element`
    """
    return xml.E(
        (namespaces.client, "iq"),
        payload,
        type=_format_type(type_),
        to=to,
        id=id_,
    )


def make_message(to, *payload, id_=None, type_=None):
    """
    Build a ``<message/>`` envelope carrying the `payload` elements.
    """
    return xml.E(
        (namespaces.client, "message"),
        *payload,
        type=_format_type(type_),
        to=to,
        id=id_,
    )


def stanza_kind(el):
    """
    Return the local name of the envelope, i.e. ``"iq"``, ``"message"`` or
    ``"presence"``.
    """
    return xml.localname(el)


def get_id(el):
    return el.get("id")


def get_type(el):
    return el.get("type")


def get_from(el):
    return el.get("from")


def is_response(el):
    """
    Return true if `el` is an ``<iq/>`` of type ``result`` or ``error``.
    """
    if stanza_kind(el) != "iq":
        return False
    try:
        return structs.IQType(get_type(el)).is_response
    except ValueError:
        return False
