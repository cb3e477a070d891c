########################################################################
# File name: errors.py
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
:mod:`~pubsubbridge.errors` --- Error descriptors and exception classes
#######################################################################

Every failure which is observable by the application is reported as an
:class:`ErrorDescriptor`, no matter whether it was detected locally or
reported by the remote service.

.. autoclass:: ErrorDescriptor

Exception classes
=================

.. autoclass:: ClientError

.. autoclass:: PubSubError

.. autoclass:: PubSubAuthError

.. autoclass:: PubSubModifyError

.. autoclass:: PubSubCancelError

.. autoclass:: PubSubWaitError

.. autoclass:: PubSubContinueError

"""
from . import structs, xml

from .utils import namespaces


namespaces.xep0060_errors = "http://jabber.org/protocol/pubsub#errors"

#: Condition used for all locally detected errors.
CLIENT_ERROR = "client-error"

#: Condition used if a service sends an error without a defined condition.
UNDEFINED_CONDITION = "undefined-condition"


class ErrorDescriptor:
    """
    Describe a failed request.

    :param type_: The error type, usually one of the :class:`.ErrorType`
        values.
    :type type_: :class:`str`
    :param condition: The error condition, for example ``"item-not-found"``
        or ``"client-error"``.
    :type condition: :class:`str`
    :param description: Optional human-readable description.
    :param request: The original request payload, for locally detected
        errors.
    :param application: Optional application-specific condition, as
        mapping with the keys ``"condition"`` and ``"xmlns"``.

    Descriptors compare equal if all attributes are equal. Use
    :meth:`to_dict` to obtain the mapping handed to applications.

    .. automethod:: client_error

    .. automethod:: from_stanza

    .. automethod:: to_dict
    """

    __slots__ = ("type_", "condition", "description", "request",
                 "application")

    def __init__(self, type_, condition, *,
                 description=None,
                 request=None,
                 application=None):
        super().__init__()
        if isinstance(type_, structs.ErrorType):
            type_ = type_.value
        self.type_ = type_
        self.condition = condition
        self.description = description
        self.request = request
        self.application = application

    @classmethod
    def client_error(cls, description, request):
        """
        Create the descriptor for an error detected locally, before anything
        was sent.
        """
        return cls(
            structs.ErrorType.MODIFY,
            CLIENT_ERROR,
            description=description,
            request=request,
        )

    @classmethod
    def from_stanza(cls, stanza):
        """
        Create a descriptor from an error-typed response `stanza` (an
        :mod:`lxml.etree` element).

        The ``type`` attribute of the ``<error/>`` child gives the type; the
        first defined condition child gives the condition. A child in the
        pubsub errors namespace is reported as application condition and a
        ``<text/>`` child as description.

        Missing pieces are substituted, this never raises.
        """
        error_el = xml.child(stanza, name="error")
        if error_el is None:
            return cls(structs.ErrorType.CANCEL, UNDEFINED_CONDITION)

        type_ = error_el.get("type") or structs.ErrorType.CANCEL.value
        condition = None
        description = None
        application = None

        for item in xml.children(error_el):
            item_ns = xml.namespace(item)
            item_name = xml.localname(item)
            if item_ns == namespaces.xep0060_errors:
                application = {
                    "condition": item_name,
                    "xmlns": item_ns,
                }
                if item.get("feature") is not None:
                    application["feature"] = item.get("feature")
            elif item_name == "text":
                description = item.text
            elif condition is None:
                condition = item_name

        return cls(
            type_,
            condition or UNDEFINED_CONDITION,
            description=description,
            application=application,
        )

    def to_dict(self):
        """
        Return the descriptor as :class:`dict` with the keys ``"type"``,
        ``"condition"``, ``"description"``, ``"request"`` and
        ``"application"``. Keys with :data:`None` value are omitted.
        """
        result = {
            "type": self.type_,
            "condition": self.condition,
        }
        if self.description is not None:
            result["description"] = self.description
        if self.request is not None:
            result["request"] = self.request
        if self.application is not None:
            result["application"] = self.application
        return result

    def __eq__(self, other):
        if not isinstance(other, ErrorDescriptor):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return "<{}.{} {!r}>".format(
            type(self).__module__,
            type(self).__qualname__,
            self.to_dict(),
        )


class ClientError(ValueError):
    """
    Raised by validation rules and stanza builders when a request cannot be
    turned into a stanza.

    .. attribute:: description

       The human-readable description which is reported to the application.
    """

    def __init__(self, description):
        super().__init__(description)
        self.description = description


class PubSubError(Exception):
    """
    Exception wrapping an :class:`ErrorDescriptor`, raised by the awaitable
    request interface.

    .. attribute:: descriptor

       The :class:`ErrorDescriptor`.

    Use :meth:`from_descriptor` to obtain an instance of the subclass
    matching the error type.
    """

    TYPE = structs.ErrorType.CANCEL

    def __init__(self, descriptor):
        text = "{}/{}".format(descriptor.type_, descriptor.condition)
        if descriptor.description:
            text += " ({!r})".format(descriptor.description)
        super().__init__(text)
        self.descriptor = descriptor

    @property
    def condition(self):
        return self.descriptor.condition

    @classmethod
    def from_descriptor(cls, descriptor):
        try:
            type_ = structs.ErrorType(descriptor.type_)
        except ValueError:
            return PubSubError(descriptor)
        return EXCEPTION_CLS_MAP[type_](descriptor)


class PubSubAuthError(PubSubError, PermissionError):
    TYPE = structs.ErrorType.AUTH


class PubSubModifyError(PubSubError, ValueError):
    TYPE = structs.ErrorType.MODIFY


class PubSubCancelError(PubSubError):
    TYPE = structs.ErrorType.CANCEL


class PubSubWaitError(PubSubError):
    TYPE = structs.ErrorType.WAIT


class PubSubContinueError(PubSubError, UserWarning):
    TYPE = structs.ErrorType.CONTINUE


EXCEPTION_CLS_MAP = {
    structs.ErrorType.MODIFY: PubSubModifyError,
    structs.ErrorType.CANCEL: PubSubCancelError,
    structs.ErrorType.AUTH: PubSubAuthError,
    structs.ErrorType.WAIT: PubSubWaitError,
    structs.ErrorType.CONTINUE: PubSubContinueError,
}
