########################################################################
# File name: xso.py
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
import collections
import logging

from .. import errors, forms, rsm, structs, xml

from ..utils import etree, namespaces


logger = logging.getLogger(__name__)


namespaces.xep0060 = "http://jabber.org/protocol/pubsub"
namespaces.xep0060_errors = "http://jabber.org/protocol/pubsub#errors"
namespaces.xep0060_event = "http://jabber.org/protocol/pubsub#event"
namespaces.xep0060_owner = "http://jabber.org/protocol/pubsub#owner"
namespaces.xep0060_node_config = \
    "http://jabber.org/protocol/pubsub#node_config"
namespaces.xep0060_subscribe_options = \
    "http://jabber.org/protocol/pubsub#subscribe_options"
namespaces.xep0060_publish_options = \
    "http://jabber.org/protocol/pubsub#publish-options"
namespaces.xep0060_subscribe_authorization = \
    "http://jabber.org/protocol/pubsub#subscribe_authorization"


#: Everything a builder needs besides the request itself.
BuildContext = collections.namedtuple(
    "BuildContext",
    ["local_jid", "item_parser"]
)


def _request(*children):
    return xml.E((namespaces.xep0060, "pubsub"), *children)


def _owner_request(*children):
    return xml.E((namespaces.xep0060_owner, "pubsub"), *children)


def _listing_request(request, *children):
    if request.owner:
        return _owner_request(*children)
    return _request(*children)


def _rsm(request):
    if request.rsm is None:
        return None
    return rsm.build_set(request.rsm)


def _jid_or_local(jid, context):
    if jid is not None:
        return jid
    if context.local_jid is None:
        raise errors.ClientError("Missing 'jid' key")
    return context.local_jid.bare()


def build_create(request, context):
    configure = None
    if request.options is not None:
        configure = xml.E(
            "configure",
            forms.build_form(
                request.options,
                namespaces.xep0060_node_config,
            )
        )
    return structs.IQType.SET, _request(
        xml.E("create", node=request.node),
        configure,
    )


def build_delete(request, context):
    redirect = None
    if request.redirect is not None:
        redirect = xml.E("redirect", uri=request.redirect)
    return structs.IQType.SET, _owner_request(
        xml.E("delete", redirect, node=request.node),
    )


def build_purge(request, context):
    return structs.IQType.SET, _request(
        xml.E("purge", node=request.node),
    )


def build_get_config(request, context):
    return structs.IQType.GET, _owner_request(
        xml.E("configure", node=request.node),
    )


def build_set_config(request, context):
    return structs.IQType.SET, _owner_request(
        xml.E(
            "configure",
            forms.build_form(request.form, namespaces.xep0060_node_config),
            node=request.node,
        ),
    )


def _build_payload(request, context):
    try:
        payload = list(context.item_parser.build(request.content))
        for el in payload:
            # lxml only checks names and text when building the tree
            xml.to_etree(el)
        return payload
    except (ValueError, TypeError, etree.LxmlError) as exc:
        logger.debug("item parser failed to build payload: %s", exc)
        raise errors.ClientError("Could not parse content to stanza")


def build_publish(request, context):
    publish_options = None
    if request.options is not None:
        publish_options = xml.E(
            "publish-options",
            forms.build_form(
                request.options,
                namespaces.xep0060_publish_options,
            )
        )
    return structs.IQType.SET, _request(
        xml.E(
            "publish",
            xml.E("item", *_build_payload(request, context), id=request.id),
            node=request.node,
        ),
        publish_options,
    )


def _item_ids(value):
    if value is None:
        return []
    if isinstance(value, (str, int)):
        return [value]
    return list(value)


def build_retrieve(request, context):
    return structs.IQType.GET, _request(
        xml.E(
            "items",
            *(xml.E("item", id=id_) for id_ in _item_ids(request.id)),
            node=request.node,
            max_items=request.max_items,
        ),
        _rsm(request),
    )


def build_delete_item(request, context):
    return structs.IQType.SET, _request(
        xml.E(
            "retract",
            xml.E("item", id=request.id),
            node=request.node,
            notify=request.notify,
        ),
    )


def _subscribe_options(request, jid):
    if request.options is None:
        return None
    return xml.E(
        "options",
        forms.build_form(
            request.options,
            namespaces.xep0060_subscribe_options,
        ),
        node=request.node,
        jid=jid,
    )


def build_subscribe(request, context):
    jid = _jid_or_local(request.jid, context)
    return structs.IQType.SET, _request(
        xml.E("subscribe", node=request.node, jid=jid),
        _subscribe_options(request, jid),
    )


def build_unsubscribe(request, context):
    return structs.IQType.SET, _request(
        xml.E(
            "unsubscribe",
            node=request.node,
            jid=_jid_or_local(request.jid, context),
            subid=request.id,
        ),
    )


def build_list_subscriptions(request, context):
    return structs.IQType.GET, _listing_request(
        request,
        xml.E("subscriptions", node=request.node),
        _rsm(request),
    )


def build_set_subscription(request, context):
    return structs.IQType.SET, _owner_request(
        xml.E(
            "subscriptions",
            xml.E(
                "subscription",
                jid=request.jid,
                subscription=request.subscription,
                subid=request.id,
            ),
            node=request.node,
        ),
    )


def build_default_subscription_config(request, context):
    return structs.IQType.GET, _request(
        xml.E("default", node=request.node),
    )


def build_get_subscription_config(request, context):
    return structs.IQType.GET, _request(
        xml.E(
            "options",
            node=request.node,
            jid=_jid_or_local(request.jid, context),
            subid=request.id,
        ),
    )


def build_set_subscription_config(request, context):
    return structs.IQType.SET, _request(
        xml.E(
            "options",
            forms.build_form(
                request.form,
                namespaces.xep0060_subscribe_options,
            ),
            node=request.node,
            jid=_jid_or_local(request.jid, context),
            subid=request.id,
        ),
    )


def build_list_affiliations(request, context):
    return structs.IQType.GET, _listing_request(
        request,
        xml.E("affiliations", node=request.node),
        _rsm(request),
    )


def build_set_affiliation(request, context):
    return structs.IQType.SET, _owner_request(
        xml.E(
            "affiliations",
            xml.E(
                "affiliation",
                jid=request.jid,
                affiliation=request.affiliation,
            ),
            node=request.node,
        ),
    )


def build_authorisation_reply(fields):
    """
    Build the submitted form answering a subscription authorisation request.

    :raises ~.errors.ClientError: if `fields` is not a field list
    """
    return forms.build_form(
        fields,
        namespaces.xep0060_subscribe_authorization,
    )
