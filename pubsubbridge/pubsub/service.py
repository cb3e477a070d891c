########################################################################
# File name: service.py
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
import asyncio
import collections
import functools
import logging

from .. import callbacks, errors, stanza, structs, xml

from . import events, items, parsers, requests, xso


Operation = collections.namedtuple(
    "Operation",
    ["request_cls", "builder", "parser"]
)


def _operations(*entries):
    return collections.OrderedDict(
        (request_cls.NAME, Operation(request_cls, builder, parser))
        for request_cls, builder, parser in entries
    )


#: Operation name -> :class:`Operation`.
OPERATIONS = _operations(
    (requests.CreateNode, xso.build_create, parsers.parse_boolean),
    (requests.DeleteNode, xso.build_delete, parsers.parse_boolean),
    (requests.PurgeNode, xso.build_purge, parsers.parse_boolean),
    (requests.GetNodeConfig, xso.build_get_config,
     parsers.parse_data_form),
    (requests.SetNodeConfig, xso.build_set_config, parsers.parse_boolean),
    (requests.Publish, xso.build_publish, parsers.parse_publish),
    (requests.RetrieveItems, xso.build_retrieve, parsers.parse_items),
    (requests.DeleteItem, xso.build_delete_item, parsers.parse_boolean),
    (requests.Subscribe, xso.build_subscribe, parsers.parse_subscribe),
    (requests.Unsubscribe, xso.build_unsubscribe, parsers.parse_boolean),
    (requests.ListSubscriptions, xso.build_list_subscriptions,
     parsers.parse_subscriptions),
    (requests.SetSubscription, xso.build_set_subscription,
     parsers.parse_boolean),
    (requests.GetDefaultSubscriptionConfig,
     xso.build_default_subscription_config,
     parsers.parse_data_form),
    (requests.GetSubscriptionConfig, xso.build_get_subscription_config,
     parsers.parse_data_form),
    (requests.SetSubscriptionConfig, xso.build_set_subscription_config,
     parsers.parse_boolean),
    (requests.ListAffiliations, xso.build_list_affiliations,
     parsers.parse_affiliations),
    (requests.SetAffiliation, xso.build_set_affiliation,
     parsers.parse_boolean),
)


def _serialize(el):
    try:
        return xml.to_etree(el)
    except (ValueError, TypeError) as exc:
        raise errors.ClientError(
            "Could not parse content to stanza"
        ) from exc


_EVENT_SIGNALS = {
    events.EventKind.ITEM: "on_item_published",
    events.EventKind.RETRACT: "on_item_retracted",
    events.EventKind.SUBSCRIPTION: "on_subscription_update",
    events.EventKind.AFFILIATION: "on_affiliation_update",
    events.EventKind.CONFIGURATION: "on_configuration_update",
    events.EventKind.DELETE: "on_node_deleted",
    events.EventKind.PURGE: "on_node_purged",
}


class PubSubAdapter:
    """
    Translate between application requests and :xep:`60` stanzas.

    :param transport: Object with a ``send(stanza)`` method which accepts
        :mod:`lxml.etree` elements.
    :param local_jid: The address of the connected account; its bare form is
        used wherever a request may omit ``jid``.
    :type local_jid: :class:`~.JID` or :class:`str`
    :param item_parser: Converter for item payloads, defaults to
        :class:`~.items.ItemParser`.
    :param timeout: Seconds after which pending requests fail with
        ``remote-server-timeout``; :data:`None` waits indefinitely.
        Requires `loop`.
    :param loop: Event loop for timeouts and :meth:`request`.
    :param logger: Logger to use.

    Requests are issued by operation name (see :data:`OPERATIONS`) with a
    mapping payload:

    .. automethod:: send_request

    .. automethod:: request

    Incoming stanzas must be handed to the adapter by the transport:

    .. automethod:: handle_stanza

    .. automethod:: handles

    .. automethod:: reply

    .. automethod:: set_item_parser

    .. automethod:: cancel_all

    Callbacks are called as ``callback(error, data)``, or as
    ``callback(None, data, rsm)`` if the response carried a result set.
    `error` is an :class:`~.errors.ErrorDescriptor` or :data:`None`.

    .. note::

       Signal handlers attached to any of the signals below **must** accept
       arbitrary keyword arguments for forward compatibility.

    .. signal:: on_item_published(data, *, message=None)

       Fires for every item in a notification. `data` has the keys
       ``"from"``, ``"node"``, ``"id"`` and, if present, ``"entry"``,
       ``"publisher"``, ``"delay"`` and ``"headers"``.

       `message` is the lxml element of the notification.

    .. signal:: on_item_retracted(data, *, message=None)

       Fires for every retracted item, with the keys ``"from"``, ``"node"``,
       ``"id"`` and possibly ``"headers"``.

    .. signal:: on_subscription_update(data, *, message=None)

       Fires when the subscription state changed, with the keys ``"from"``,
       ``"node"``, ``"subscription"`` and ``"jid"``.

    .. signal:: on_affiliation_update(data, *, message=None)

       Fires when an affiliation changed, with the keys ``"from"``,
       ``"node"``, ``"affiliation"`` and ``"jid"``.

    .. signal:: on_configuration_update(data, *, message=None)

       Fires when the node configuration changed. ``"configuration"``
       holds the parsed form, if the service included it.

    .. signal:: on_node_deleted(data, *, message=None)

       Fires when a node was deleted. ``"redirect"`` holds the redirect URI,
       if any.

    .. signal:: on_node_purged(data, *, message=None)

       Fires when all items of a node were removed.

    .. signal:: on_authorisation_request(data, reply, *, message=None)

       Fires when the service asks to approve a subscription. `data` has the
       keys ``"id"``, ``"from"`` and ``"form"``. Calling `reply` with a field
       list sends the submitted form back.

    .. signal:: on_client_error(error)

       Fires with an :class:`~.errors.ErrorDescriptor` for local errors
       which cannot be reported to a callback.
    """

    on_item_published = callbacks.Signal()
    on_item_retracted = callbacks.Signal()
    on_subscription_update = callbacks.Signal()
    on_affiliation_update = callbacks.Signal()
    on_configuration_update = callbacks.Signal()
    on_node_deleted = callbacks.Signal()
    on_node_purged = callbacks.Signal()
    on_authorisation_request = callbacks.Signal()
    on_client_error = callbacks.Signal()

    def __init__(self, transport, *,
                 local_jid=None,
                 item_parser=None,
                 timeout=None,
                 loop=None,
                 logger=None):
        super().__init__()
        if isinstance(local_jid, str):
            local_jid = structs.JID.fromstr(local_jid)
        self.logger = logger or logging.getLogger(".".join([
            type(self).__module__, type(self).__qualname__
        ]))
        self.local_jid = local_jid
        self._transport = transport
        self._loop = loop
        self._item_parser = item_parser or items.ItemParser()
        self._correlator = callbacks.Correlator(
            loop=loop,
            timeout=timeout,
            logger=self.logger,
        )

    @property
    def correlator(self):
        """
        The :class:`~.callbacks.Correlator` holding the pending requests.
        """
        return self._correlator

    @property
    def item_parser(self):
        return self._item_parser

    def set_item_parser(self, item_parser=None):
        """
        Replace the item parser; :data:`None` restores the default.
        """
        self._item_parser = item_parser or items.ItemParser()

    def _context(self):
        return xso.BuildContext(self.local_jid, self._item_parser)

    def _invoke(self, callback, *args):
        try:
            callback(*args)
        except Exception:
            self.logger.exception("request callback raised")

    def _reject(self, callback, descriptor):
        self._invoke(callback, descriptor, None)

    def _new_id(self):
        id_ = stanza.make_id()
        while id_ in self._correlator:
            id_ = stanza.make_id()
        return id_

    def send_request(self, name, payload, callback=None):
        """
        Validate `payload`, send the request stanza for the operation `name`
        and arrange for `callback` to be called with the result.

        :return: The id of the request stanza, or :data:`None` if nothing was
            sent.

        If `callback` is not callable, :meth:`on_client_error` fires and
        nothing else happens. All other local errors are reported to
        `callback` before this method returns.
        """
        if not callable(callback):
            self.logger.debug("%s issued without callback", name)
            self.on_client_error(
                errors.ErrorDescriptor.client_error("Missing callback", {})
            )
            return None

        try:
            operation = OPERATIONS[name]
        except KeyError:
            self._invoke(
                callback,
                errors.ErrorDescriptor.client_error(
                    "Unknown operation",
                    payload,
                ),
                None,
            )
            return None

        try:
            request = operation.request_cls.from_mapping(payload)
            type_, iq_payload = operation.builder(request, self._context())
            id_ = self._new_id()
            iq = _serialize(stanza.make_iq(type_, request.to, iq_payload, id_))
        except errors.ClientError as exc:
            self.logger.debug("rejecting %s: %s", name, exc.description)
            self._invoke(
                callback,
                errors.ErrorDescriptor.client_error(exc.description, payload),
                None,
            )
            return None

        self._correlator.register(
            id_,
            functools.partial(self._handle_response,
                              operation, request, callback),
            functools.partial(self._reject, callback),
        )
        self.logger.debug("sending %s as %r", name, id_)
        try:
            self._transport.send(iq)
        except Exception:
            self._correlator.discard(id_)
            raise
        return id_

    def _handle_response(self, operation, request, callback, response):
        if stanza.get_type(response) == structs.IQType.ERROR.value:
            self._invoke(
                callback,
                errors.ErrorDescriptor.from_stanza(response),
                None,
            )
            return

        try:
            data, rsm = operation.parser(response, request, self._context())
        except Exception:
            self.logger.warning("unparsable response to %r", request,
                                exc_info=True)
            self._invoke(
                callback,
                errors.ErrorDescriptor(
                    structs.ErrorType.CANCEL,
                    errors.UNDEFINED_CONDITION,
                    description="Unparsable response",
                ),
                None,
            )
            return

        if rsm is None:
            self._invoke(callback, None, data)
        else:
            self._invoke(callback, None, data, rsm)

    async def request(self, name, payload):
        """
        Send a request and wait for the result.

        :raises ~.errors.PubSubError: if the request fails
        :return: The result, or a pair ``(result, rsm)`` if the response
            carried a result set.
        """
        loop = self._loop or asyncio.get_running_loop()
        fut = loop.create_future()

        def callback(error, data, rsm=None):
            if fut.done():
                return
            if error is not None:
                fut.set_exception(errors.PubSubError.from_descriptor(error))
            elif rsm is not None:
                fut.set_result((data, rsm))
            else:
                fut.set_result(data)

        self.send_request(name, payload, callback)
        return await fut

    def handles(self, el):
        """
        Return true if `el` is a notification handled by the adapter.
        """
        return events.handles(el)

    def handle_stanza(self, el):
        """
        Process the incoming lxml element `el`.

        Responses to pending requests are dispatched to their callback;
        notifications fire the corresponding signal. Anything else is
        dropped.

        :return: :data:`True` if the stanza was consumed.
        """
        if stanza.is_response(el):
            if self._correlator.resolve(el):
                return True
            self.logger.info("dropping response with unknown id %r",
                             stanza.get_id(el))
            return False

        kind = events.classify(el)
        if kind is None:
            self.logger.debug("dropping unhandled %s stanza",
                              stanza.stanza_kind(el))
            return False

        if kind == events.EventKind.AUTHORISATION:
            data = events.parse_authorisation(el)
            self.on_authorisation_request(
                data,
                functools.partial(self.reply, data),
                message=el,
            )
            return True

        try:
            notifications = list(events.parse_event(el, self._item_parser))
        except Exception:
            self.logger.warning("dropping malformed notification",
                                exc_info=True)
            return False

        for kind, payload in notifications:
            signal = getattr(self, _EVENT_SIGNALS[kind])
            signal(payload, message=el)
        return True

    def reply(self, data, fields):
        """
        Answer the authorisation request `data` with the field list
        `fields`.

        :return: :data:`True` if the reply was sent.

        If `fields` is not a field list, :meth:`on_client_error` fires
        instead.
        """
        try:
            message = _serialize(stanza.make_message(
                data["from"],
                xso.build_authorisation_reply(fields),
                id_=data["id"],
            ))
        except errors.ClientError as exc:
            self.on_client_error(
                errors.ErrorDescriptor.client_error(exc.description, {})
            )
            return False

        self._transport.send(message)
        return True

    def cancel_all(self):
        """
        Fail all pending requests with ``undefined-condition``.
        """
        self._correlator.reject_all(
            errors.ErrorDescriptor(
                structs.ErrorType.CANCEL,
                errors.UNDEFINED_CONDITION,
                description="Adapter shut down",
            )
        )
