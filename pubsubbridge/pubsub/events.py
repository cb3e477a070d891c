########################################################################
# File name: events.py
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
Classification and parsing of unsolicited pubsub messages.

:func:`handles` and :func:`classify` are pure; they never raise for
well-formed XML, whatever its content.
"""
import enum

from .. import forms, shim, stanza, structs, xml

from ..utils import namespaces

from . import xso  # NOQA: F401


class EventKind(enum.Enum):
    """
    The push categories.
    """

    ITEM = "item"
    RETRACT = "retract"
    SUBSCRIPTION = "subscription"
    AFFILIATION = "affiliation"
    CONFIGURATION = "configuration"
    DELETE = "delete"
    PURGE = "purge"
    AUTHORISATION = "authorisation"


def _event(message):
    return xml.child(message, namespaces.xep0060_event, "event")


def _is_authorisation_form(x):
    for field in xml.children(x, name="field"):
        if field.get("type") != forms.FieldType.HIDDEN.value:
            continue
        for value in xml.children(field, name="value"):
            if value.text == namespaces.xep0060_subscribe_authorization:
                return True
    return False


def _authorisation_form(message):
    for x in xml.children(message, name="x"):
        if _is_authorisation_form(x):
            return x
    return None


def handles(el):
    """
    Return true if `el` is a ``<message/>`` carrying a pubsub event or a
    subscription authorisation request.
    """
    if stanza.stanza_kind(el) != "message":
        return False
    if _event(el) is not None:
        return True
    return _authorisation_form(el) is not None


_EVENT_KINDS = {
    "subscription": EventKind.SUBSCRIPTION,
    "affiliations": EventKind.AFFILIATION,
    "configuration": EventKind.CONFIGURATION,
    "delete": EventKind.DELETE,
    "purge": EventKind.PURGE,
}


def _classify_event(child):
    name = xml.localname(child)
    if name == "items":
        if xml.child(child, namespaces.xep0060_event, "item") is not None:
            return EventKind.ITEM
        if xml.child(child, namespaces.xep0060_event, "retract") is not None:
            return EventKind.RETRACT
        return None
    return _EVENT_KINDS.get(name)


def classify(el):
    """
    Return the :class:`EventKind` of the stanza `el`, or :data:`None` if it
    is out of scope.

    A notification which carries both new and retracted items is classified
    as :attr:`EventKind.ITEM`; :func:`parse_event` reports both.
    """
    if stanza.stanza_kind(el) != "message":
        return None
    event = _event(el)
    if event is None:
        if _authorisation_form(el) is not None:
            return EventKind.AUTHORISATION
        return None
    for child in xml.children(event, namespaces.xep0060_event):
        kind = _classify_event(child)
        if kind is not None:
            return kind
    return None


def _headers(message):
    headers_el = shim.find_headers(message)
    if headers_el is None:
        return None
    return shim.headers_as_list(shim.parse_headers(headers_el))


def _delay(message):
    delay = xml.child(message, name="delay")
    if delay is None:
        return None
    return delay.get("stamp")


def _base(message, node):
    return {
        "from": stanza.get_from(message),
        "node": node,
    }


def _parse_items(message, items, item_parser):
    node = items.get("node")
    headers = _headers(message)
    delay = _delay(message)

    for child in xml.children(items, namespaces.xep0060_event):
        name = xml.localname(child)
        if name == "item":
            payload = _base(message, node)
            payload["id"] = child.get("id")
            entry = item_parser.parse(child)
            if entry is not None:
                payload["entry"] = entry
            if child.get("publisher") is not None:
                payload["publisher"] = structs.parse_jid(
                    child.get("publisher")
                )
            if delay is not None:
                payload["delay"] = delay
            if headers is not None:
                payload["headers"] = headers
            yield EventKind.ITEM, payload
        elif name == "retract":
            payload = _base(message, node)
            payload["id"] = child.get("id")
            if headers is not None:
                payload["headers"] = headers
            yield EventKind.RETRACT, payload


def _parse_subscription(message, subscription):
    payload = _base(message, subscription.get("node"))
    payload["subscription"] = subscription.get("subscription")
    payload["jid"] = structs.parse_jid(subscription.get("jid"))
    if subscription.get("subid") is not None:
        payload["id"] = subscription.get("subid")
    if subscription.get("expiry") is not None:
        payload["expiry"] = subscription.get("expiry")
    yield EventKind.SUBSCRIPTION, payload


def _parse_affiliations(message, affiliations):
    for affiliation in xml.children(affiliations,
                                    namespaces.xep0060_event,
                                    "affiliation"):
        payload = _base(message, affiliations.get("node"))
        payload["affiliation"] = affiliation.get("affiliation")
        payload["jid"] = structs.parse_jid(affiliation.get("jid"))
        yield EventKind.AFFILIATION, payload


def _parse_configuration(message, configuration):
    payload = _base(message, configuration.get("node"))
    x = forms.find_form(configuration)
    if x is not None:
        payload["configuration"] = forms.parse_form(x)
    yield EventKind.CONFIGURATION, payload


def _parse_delete(message, delete):
    payload = _base(message, delete.get("node"))
    redirect = xml.child(delete, namespaces.xep0060_event, "redirect")
    if redirect is not None and redirect.get("uri") is not None:
        payload["redirect"] = redirect.get("uri")
    yield EventKind.DELETE, payload


def _parse_purge(message, purge):
    yield EventKind.PURGE, _base(message, purge.get("node"))


def parse_event(message, item_parser):
    """
    Iterate over the ``(kind, payload)`` pairs reported by the event
    `message`. Every payload carries ``"from"`` and ``"node"``.

    Notifications about several items yield one pair per item.

    :raises ValueError: if an address in the notification is malformed
    """
    event = _event(message)
    if event is None:
        return

    for child in xml.children(event, namespaces.xep0060_event):
        name = xml.localname(child)
        if name == "items":
            yield from _parse_items(message, child, item_parser)
        elif name == "subscription":
            yield from _parse_subscription(message, child)
        elif name == "affiliations":
            yield from _parse_affiliations(message, child)
        elif name == "configuration":
            yield from _parse_configuration(message, child)
        elif name == "delete":
            yield from _parse_delete(message, child)
        elif name == "purge":
            yield from _parse_purge(message, child)


def parse_authorisation(message):
    """
    Return the subscription authorisation request carried by `message` as
    mapping with the keys ``"id"``, ``"from"`` and ``"form"``.
    """
    x = _authorisation_form(message)
    return {
        "id": stanza.get_id(message),
        "from": stanza.get_from(message),
        "form": forms.parse_form(x),
    }
