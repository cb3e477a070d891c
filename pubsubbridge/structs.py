########################################################################
# File name: structs.py
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
:mod:`~pubsubbridge.structs` --- Simple data holders for common data types
##########################################################################

These classes provide a way to hold structured data which is commonly
encountered in the XMPP realm.

Stanza types
============

.. autoclass:: IQType

.. autoclass:: MessageType

.. autoclass:: ErrorType

Jabber IDs
==========

.. autoclass:: JID(localpart, domain, resource)

.. autofunction:: parse_jid

"""

import collections
import enum


class ErrorType(enum.Enum):
    """
    Enumeration for the :rfc:`6120` specified stanza error types.

    .. attribute:: AUTH

       retry after providing credentials

    .. attribute:: CANCEL

       do not retry (the error cannot be remedied)

    .. attribute:: CONTINUE

       proceed (the condition was only a warning)

    .. attribute:: MODIFY

       retry after changing the data sent

    .. attribute:: WAIT

       retry after waiting (the error is temporary)
    """

    AUTH = "auth"
    CANCEL = "cancel"
    CONTINUE = "continue"
    MODIFY = "modify"
    WAIT = "wait"


class MessageType(enum.Enum):
    """
    Enumeration for the :rfc:`6121` specified Message stanza types.

    Pubsub notifications are usually sent as :attr:`NORMAL` or
    :attr:`HEADLINE` messages, but the type is not taken into account when
    classifying them.
    """

    NORMAL = "normal"
    CHAT = "chat"
    GROUPCHAT = "groupchat"
    HEADLINE = "headline"
    ERROR = "error"

    @property
    def is_error(self):
        return self == MessageType.ERROR


class IQType(enum.Enum):
    """
    Enumeration for the :rfc:`6120` specified IQ stanza types.

    .. autoattribute:: is_error

    .. autoattribute:: is_request

    .. autoattribute:: is_response
    """

    GET = "get"
    SET = "set"
    ERROR = "error"
    RESULT = "result"

    @property
    def is_error(self):
        """
        True for the :attr:`ERROR` type, false otherwise.
        """
        return self == IQType.ERROR

    @property
    def is_request(self):
        """
        True for request types (:attr:`GET` and :attr:`SET`), false otherwise.
        """
        return self == IQType.GET or self == IQType.SET

    @property
    def is_response(self):
        """
        True for the response types (:attr:`RESULT` and :attr:`ERROR`), false
        otherwise.
        """
        return self == IQType.RESULT or self == IQType.ERROR


class JID(collections.namedtuple("JID", ["localpart", "domain", "resource"])):
    """
    Represent a :term:`Jabber ID (JID) <Jabber ID>`.

    To construct a :class:`JID`, either use the actual constructor, or use the
    :meth:`fromstr` class method.

    :param localpart: The part in front of the ``@`` of the JID, or
        :data:`None` if the localpart shall be omitted (which is different from
        it being empty, which would be invalid).
    :type localpart: :class:`str` or :data:`None`
    :param domain: The domain of the JID. This is the only mandatory part of
        a JID.
    :type domain: :class:`str`
    :param resource: The resource part of the JID or :data:`None` to omit the
        resource part.
    :type resource: :class:`str` or :data:`None`
    :raises ValueError: if the JID composed of the given parts is invalid

    Unlike a full XMPP client, the adapter only relays addresses between the
    service and the application, so the parts are not stringprep'd; they are
    only checked for emptiness and length.

    :class:`JID` objects are immutable and compare structurally. To obtain a
    JID object with a changed property, use :meth:`bare` or :meth:`replace`.

    .. automethod:: fromstr

    .. automethod:: as_dict

    .. autoattribute:: is_bare

    .. autoattribute:: is_domain
    """

    __slots__ = []

    def __new__(cls, localpart, domain, resource):
        if not domain:
            raise ValueError("domain must not be empty or None")
        if len(domain.encode("utf-8")) > 1023:
            raise ValueError("domain too long")
        if localpart is not None:
            if not localpart:
                raise ValueError("localpart must not be empty")
            if len(localpart.encode("utf-8")) > 1023:
                raise ValueError("localpart too long")
        if resource is not None:
            if not resource:
                raise ValueError("resource must not be empty")
            if len(resource.encode("utf-8")) > 1023:
                raise ValueError("resource too long")

        return super().__new__(cls, localpart, domain, resource)

    def replace(self, **kwargs):
        """
        Construct a new :class:`JID` object, using the values of the current
        JID. Use the arguments to override specific attributes on the new
        object.

        :raises: See :class:`JID`
        :return: A new :class:`JID` object with the corresponding
            substitutions performed.
        """
        unknown = set(kwargs) - set(self._fields)
        if unknown:
            raise TypeError("replace() got an unexpected keyword argument"
                            " {!r}".format(next(iter(unknown))))

        parts = self._asdict()
        parts.update(kwargs)
        return type(self)(**parts)

    def __str__(self):
        result = self.domain
        if self.localpart:
            result = self.localpart + "@" + result
        if self.resource:
            result += "/" + self.resource
        return result

    def bare(self):
        """
        Create a copy of the :class:`JID` which is bare.

        :return: This JID with the :attr:`resource` set to :data:`None`.
        :rtype: :class:`JID`
        """
        return self.replace(resource=None)

    @property
    def is_bare(self):
        """
        :data:`True` if the JID is bare, i.e. has an empty :attr:`resource`
        part.
        """
        return not self.resource

    @property
    def is_domain(self):
        """
        :data:`True` if the JID is a domain, i.e. if both the :attr:`localpart`
        and the :attr:`resource` are empty.
        """
        return not self.resource and not self.localpart

    def as_dict(self):
        """
        Return the application-level representation of the JID.

        :rtype: :class:`dict`

        The result has the keys ``"user"`` (omitted for domain JIDs),
        ``"domain"`` and ``"resource"`` (omitted for bare JIDs).
        """
        result = {"domain": self.domain}
        if self.localpart is not None:
            result["user"] = self.localpart
        if self.resource is not None:
            result["resource"] = self.resource
        return result

    @classmethod
    def fromstr(cls, s):
        """
        Construct a JID out of a string containing it.

        :param s: The string to parse.
        :type s: :class:`str`
        :raises: See :class:`JID`
        :return: The parsed JID
        :rtype: :class:`JID`
        """
        if not isinstance(s, str):
            raise ValueError("JID must be a string, got {!r}".format(s))

        nodedomain, sep, resource = s.partition("/")
        if not sep:
            resource = None

        localpart, sep, domain = nodedomain.partition("@")
        if not sep:
            domain = localpart
            localpart = None
        return cls(localpart, domain, resource)


def parse_jid(s):
    """
    Parse the string `s` as JID and return its :meth:`JID.as_dict`
    representation.

    :raises ValueError: if `s` is not a valid JID
    """
    return JID.fromstr(s).as_dict()
