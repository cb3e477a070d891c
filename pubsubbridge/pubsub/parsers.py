########################################################################
# File name: parsers.py
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
Parsers for ``type="result"`` responses.

All parsers take the response stanza (an lxml element), the request and the
:class:`~.xso.BuildContext` and return a pair ``(data, rsm)``, where `rsm`
is the parsed result set or :data:`None`. Malformed responses raise
:class:`ValueError`.
"""
from .. import forms, rsm, structs, xml

from ..utils import namespaces


def _payload(stanza):
    for ns in (namespaces.xep0060, namespaces.xep0060_owner):
        found = xml.child(stanza, ns, "pubsub")
        if found is not None:
            return found
    return None


def _rsm(payload):
    set_el = rsm.find_set(payload)
    if set_el is None:
        return None
    return rsm.parse_set(set_el)


def _child(payload, name):
    if payload is None:
        return None
    return xml.child(payload, xml.namespace(payload), name)


def parse_boolean(stanza, request, context):
    return True, None


def parse_publish(stanza, request, context):
    id_ = None
    publish = _child(_payload(stanza), "publish")
    if publish is not None:
        item = xml.child(publish, xml.namespace(publish), "item")
        if item is not None:
            id_ = item.get("id")
    if id_ is None:
        id_ = request.id
    if id_ is None:
        return {}, None
    return {"id": str(id_)}, None


def parse_subscribe(stanza, request, context):
    subscription = _child(_payload(stanza), "subscription")
    if subscription is None:
        raise ValueError("response lacks <subscription/>")

    result = {"subscription": subscription.get("subscription")}
    if subscription.get("subid") is not None:
        result["id"] = subscription.get("subid")

    options = xml.child(subscription, namespaces.xep0060, "subscribe-options")
    if (options is not None and
            xml.child(options, namespaces.xep0060, "required") is not None):
        result["configuration"] = {"required": True}

    return result, None


def parse_items(stanza, request, context):
    payload = _payload(stanza)
    items = _child(payload, "items")
    if items is None:
        return [], None

    result = []
    for item in xml.children(items, xml.namespace(items), "item"):
        record = {
            "id": item.get("id"),
            "entry": context.item_parser.parse(item),
        }
        if item.get("publisher") is not None:
            record["publisher"] = structs.parse_jid(item.get("publisher"))
        result.append(record)

    return result, _rsm(payload)


def parse_subscriptions(stanza, request, context):
    payload = _payload(stanza)
    subscriptions = _child(payload, "subscriptions")
    if subscriptions is None:
        return [], None

    result = []
    for item in xml.children(subscriptions, xml.namespace(subscriptions),
                             "subscription"):
        jid = item.get("jid")
        if jid is None:
            raise ValueError("<subscription/> lacks jid")
        record = {}
        node = item.get("node") or subscriptions.get("node")
        if node is not None:
            record["node"] = node
        record["jid"] = structs.parse_jid(jid)
        record["subscription"] = item.get("subscription")
        if item.get("subid") is not None:
            record["id"] = item.get("subid")
        result.append(record)

    return result, _rsm(payload)


def parse_affiliations(stanza, request, context):
    payload = _payload(stanza)
    affiliations = _child(payload, "affiliations")
    if affiliations is None:
        return [], None

    result = []
    for item in xml.children(affiliations, xml.namespace(affiliations),
                             "affiliation"):
        record = {}
        node = item.get("node") or affiliations.get("node")
        if node is not None:
            record["node"] = node
        record["affiliation"] = item.get("affiliation")
        if item.get("jid") is not None:
            record["jid"] = structs.parse_jid(item.get("jid"))
        result.append(record)

    return result, _rsm(payload)


def parse_data_form(stanza, request, context):
    payload = _payload(stanza)
    if payload is None:
        raise ValueError("response lacks <pubsub/>")
    x = next(
        payload.iter("{{{}}}x".format(namespaces.xep0004_data)),
        None
    )
    if x is None:
        raise ValueError("response lacks a data form")
    return forms.parse_form(x), None
