########################################################################
# File name: requests.py
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
Request classes, one per operation.

Each class lists the payload keys it carries in :attr:`Request.FIELDS` and
the validation rules in :attr:`Request.RULES`. The rules are run in order
and the first failing rule wins; the order is part of the contract, since
applications rely on the reported message.
"""
import collections.abc

from .. import errors, forms


def missing(key):
    return errors.ClientError("Missing '{}' key".format(key))


def require(key):
    """
    Rule: `key` must be present and not :data:`None`.
    """
    def rule(payload):
        if payload.get(key) is None:
            raise missing(key)
    rule.__name__ = "require_{}".format(key)
    return rule


def require_content(payload):
    content = payload.get("content")
    if content is None or content == "":
        raise errors.ClientError("Missing message content")


def field_list(key, required=False):
    """
    Rule: `key` must be a data form field list. If `required` is false, the
    key may also be absent.
    """
    def rule(payload):
        value = payload.get(key)
        if value is None:
            if required:
                raise missing(key)
            return
        if (isinstance(value, (str, bytes)) or
                not isinstance(value, collections.abc.Sequence)):
            raise errors.ClientError(forms.BADLY_FORMATTED)
    rule.__name__ = "field_list_{}".format(key)
    return rule


def owner_needs_node(payload):
    if payload.get("owner") and payload.get("node") is None:
        raise errors.ClientError("Can only do 'owner' for a node")


def _is_item_id(value):
    return isinstance(value, (str, int)) and not isinstance(value, bool)


def item_ids(payload):
    value = payload.get("id")
    if value is None or _is_item_id(value):
        return
    if (isinstance(value, collections.abc.Sequence) and
            not isinstance(value, (str, bytes)) and
            all(map(_is_item_id, value))):
        return
    raise errors.ClientError("ID should be string or array of strings")


class Request:
    """
    Base class for requests.

    .. attribute:: NAME

       The operation name used by applications.

    .. attribute:: FIELDS

       The payload keys copied onto the instance. An entry may be a pair
       ``(attribute, key)`` if the attribute name differs from the key.

    .. attribute:: RULES

       The validation rules, in the order in which they are checked.

    .. attribute:: raw

       The original payload, reported back in error descriptors.

    .. automethod:: from_mapping
    """

    NAME = None
    FIELDS = ()
    RULES = ()

    def __init__(self, raw):
        super().__init__()
        self.raw = raw
        for field in self.FIELDS:
            if isinstance(field, tuple):
                attr, key = field
            else:
                attr = key = field
            setattr(self, attr, raw.get(key))

    @classmethod
    def from_mapping(cls, payload):
        """
        Validate `payload` and return a new request.

        A payload which is not a mapping is treated like an empty one, so that
        the first rule reports it.

        :raises ~.errors.ClientError: from the first failing rule
        """
        if not isinstance(payload, collections.abc.Mapping):
            payload = {}
        for rule in cls.RULES:
            rule(payload)
        return cls(payload)

    def __repr__(self):
        return "<{}.{} {!r}>".format(
            type(self).__module__,
            type(self).__qualname__,
            self.raw,
        )


class CreateNode(Request):
    NAME = "xmpp.pubsub.create"
    FIELDS = ("to", "node", "options")
    RULES = (require("to"), require("node"), field_list("options"))


class DeleteNode(Request):
    NAME = "xmpp.pubsub.delete"
    FIELDS = ("to", "node", "redirect")
    RULES = (require("to"), require("node"))


class PurgeNode(Request):
    NAME = "xmpp.pubsub.purge"
    FIELDS = ("to", "node")
    RULES = (require("to"), require("node"))


class GetNodeConfig(Request):
    NAME = "xmpp.pubsub.config.get"
    FIELDS = ("to", "node")
    RULES = (require("to"), require("node"))


class SetNodeConfig(Request):
    NAME = "xmpp.pubsub.config.set"
    FIELDS = ("to", "node", "form")
    RULES = (
        require("to"),
        require("node"),
        field_list("form", required=True),
    )


class Publish(Request):
    NAME = "xmpp.pubsub.publish"
    FIELDS = ("to", "node", "content", "id", "options")
    RULES = (
        require("to"),
        require("node"),
        require_content,
        field_list("options"),
    )


class RetrieveItems(Request):
    NAME = "xmpp.pubsub.retrieve"
    FIELDS = ("to", "node", "id", ("max_items", "maxItems"), "rsm")
    RULES = (require("to"), require("node"), item_ids)


class DeleteItem(Request):
    NAME = "xmpp.pubsub.item.delete"
    FIELDS = ("to", "node", "id", "notify")
    RULES = (require("to"), require("node"), require("id"))


class Subscribe(Request):
    NAME = "xmpp.pubsub.subscribe"
    FIELDS = ("to", "node", "jid", "options")
    RULES = (require("to"), require("node"), field_list("options"))


class Unsubscribe(Request):
    NAME = "xmpp.pubsub.unsubscribe"
    FIELDS = ("to", "node", "jid", "id")
    RULES = (require("to"), require("node"))


class ListSubscriptions(Request):
    NAME = "xmpp.pubsub.subscriptions"
    FIELDS = ("to", "node", "owner", "rsm")
    RULES = (require("to"), owner_needs_node)


class SetSubscription(Request):
    NAME = "xmpp.pubsub.subscription"
    FIELDS = ("to", "node", "jid", "subscription", "id")
    RULES = (
        require("to"),
        require("node"),
        require("jid"),
        require("subscription"),
    )


class GetDefaultSubscriptionConfig(Request):
    NAME = "xmpp.pubsub.subscription.config.default"
    FIELDS = ("to", "node")
    RULES = (require("to"),)


class GetSubscriptionConfig(Request):
    NAME = "xmpp.pubsub.subscription.config.get"
    FIELDS = ("to", "node", "jid", "id")
    RULES = (require("to"), require("node"))


class SetSubscriptionConfig(Request):
    NAME = "xmpp.pubsub.subscription.config.set"
    FIELDS = ("to", "node", "jid", "id", "form")
    RULES = (
        require("to"),
        require("node"),
        field_list("form", required=True),
    )


class ListAffiliations(Request):
    NAME = "xmpp.pubsub.affiliations"
    FIELDS = ("to", "node", "owner", "rsm")
    RULES = (require("to"), owner_needs_node)


class SetAffiliation(Request):
    NAME = "xmpp.pubsub.affiliation"
    FIELDS = ("to", "node", "jid", "affiliation")
    RULES = (
        require("to"),
        require("node"),
        require("jid"),
        require("affiliation"),
    )


REQUEST_CLASSES = (
    CreateNode,
    DeleteNode,
    PurgeNode,
    GetNodeConfig,
    SetNodeConfig,
    Publish,
    RetrieveItems,
    DeleteItem,
    Subscribe,
    Unsubscribe,
    ListSubscriptions,
    SetSubscription,
    GetDefaultSubscriptionConfig,
    GetSubscriptionConfig,
    SetSubscriptionConfig,
    ListAffiliations,
    SetAffiliation,
)
