########################################################################
# File name: xml.py
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
:mod:`~pubsubbridge.xml` --- Element trees for outgoing stanzas
###############################################################

Outgoing stanzas are composed as immutable :class:`Element` trees and then
handed to a single serializer, :func:`to_etree`, which produces
:mod:`lxml.etree` elements for the transport.

Building trees
==============

.. autoclass:: Element

.. autofunction:: E

Serialization
=============

.. autofunction:: to_etree

.. autofunction:: from_etree

.. autofunction:: serialize

Reading incoming stanzas
========================

Incoming stanzas are :mod:`lxml.etree` elements as produced by the
transport. The following helpers are used by all parsers:

.. autofunction:: localname

.. autofunction:: namespace

.. autofunction:: child

.. autofunction:: children

.. autofunction:: child_text

"""

import collections

from .utils import etree


class Element(collections.namedtuple(
        "Element", ["tag", "attrs", "children", "text"])):
    """
    An immutable XML element.

    .. attribute:: tag

       Tuple ``(namespace_uri, localname)``. A namespace of :data:`None`
       means that the element is in the namespace of its parent.

    .. attribute:: attrs

       Tuple of ``(name, value)`` pairs, in insertion order.

    .. attribute:: children

       Tuple of child :class:`Element` objects.

    .. attribute:: text

       Character data of the element or :data:`None`.

    .. automethod:: append

    .. automethod:: with_attrs
    """

    __slots__ = []

    @property
    def localname(self):
        return self.tag[1]

    def get(self, name, default=None):
        for key, value in self.attrs:
            if key == name:
                return value
        return default

    def append(self, *children):
        """
        Return a copy of the element with `children` added after the
        existing children. :data:`None` entries are skipped.
        """
        return self._replace(
            children=self.children + tuple(
                child for child in children if child is not None
            )
        )

    def with_attrs(self, **attrs):
        """
        Return a copy of the element with the attributes from `attrs`
        set. Attributes whose value is :data:`None` are removed.
        """
        new_attrs = collections.OrderedDict(self.attrs)
        for key, value in _format_attrs(attrs):
            new_attrs[key] = value
        for key, value in attrs.items():
            if value is None:
                new_attrs.pop(key, None)
        return self._replace(attrs=tuple(new_attrs.items()))


def _format_value(value):
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _format_attrs(attrs):
    return tuple(
        (key, _format_value(value))
        for key, value in attrs.items()
        if value is not None
    )


def E(tag, *children, text=None, **attrs):
    """
    Create a new :class:`Element`.

    :param tag: The tag as ``(namespace_uri, localname)`` tuple or as bare
        localname, which is then inherited from the parent namespace.
    :param children: Child elements; :data:`None` entries are skipped.
    :param text: Optional character data; non-strings are converted with
        :class:`str`, booleans as ``"true"``/``"false"``.
    :param attrs: Attributes; those with :data:`None` value are skipped.
    """
    if isinstance(tag, str):
        tag = (None, tag)
    if text is not None:
        text = _format_value(text)
    return Element(
        tag,
        _format_attrs(attrs),
        tuple(child for child in children if child is not None),
        text,
    )


def _clark(namespace_uri, localname):
    if namespace_uri:
        return "{{{}}}{}".format(namespace_uri, localname)
    return localname


def _build(el, parent, parent_ns):
    namespace_uri, localname = el.tag
    if namespace_uri is None:
        namespace_uri = parent_ns

    if parent is None:
        nsmap = {None: namespace_uri} if namespace_uri else None
        result = etree.Element(_clark(namespace_uri, localname), nsmap=nsmap)
    elif namespace_uri != parent_ns and namespace_uri:
        result = etree.SubElement(
            parent,
            _clark(namespace_uri, localname),
            nsmap={None: namespace_uri},
        )
    else:
        result = etree.SubElement(parent, _clark(namespace_uri, localname))

    for key, value in el.attrs:
        result.set(key, value)
    if el.text is not None:
        result.text = el.text

    for child_el in el.children:
        _build(child_el, result, namespace_uri)

    return result


def to_etree(el):
    """
    Serialize the :class:`Element` tree `el` into a :mod:`lxml.etree`
    element.

    Each element whose namespace differs from its parent's declares it as
    default namespace; elements without namespace inherit the parent's.
    """
    return _build(el, None, None)


def from_etree(el):
    """
    Convert the :mod:`lxml.etree` element `el` into an :class:`Element`
    tree. Comments and processing instructions are dropped; all tags carry
    their namespace explicitly.
    """
    return Element(
        (namespace(el), localname(el)),
        tuple(el.attrib.items()),
        tuple(from_etree(item) for item in children(el)),
        el.text,
    )


def serialize(el):
    """
    Serialize the :class:`Element` tree `el` as UTF-8 encoded
    :class:`bytes`.
    """
    return etree.tostring(to_etree(el), encoding="utf-8")


def localname(el):
    """
    Return the local name of the lxml element `el`.
    """
    if not isinstance(el.tag, str):
        # comments and processing instructions
        return None
    return etree.QName(el).localname


def namespace(el):
    """
    Return the namespace URI of the lxml element `el` or :data:`None`.
    """
    if not isinstance(el.tag, str):
        return None
    return etree.QName(el).namespace


def children(el, namespace_uri=None, name=None):
    """
    Iterate over the child elements of `el`.

    If `namespace_uri` is given, only children in that namespace are
    returned; if `name` is given, only children with that local name.
    """
    for item in el:
        if not isinstance(item.tag, str):
            continue
        if namespace_uri is not None and namespace(item) != namespace_uri:
            continue
        if name is not None and localname(item) != name:
            continue
        yield item


def child(el, namespace_uri=None, name=None):
    """
    Return the first child of `el` matching `namespace_uri` and `name` (see
    :func:`children`) or :data:`None`.
    """
    return next(children(el, namespace_uri, name), None)


def child_text(el, namespace_uri=None, name=None, default=None):
    """
    Return the text of the first matching child (see :func:`child`), or
    `default` if there is no such child.
    """
    found = child(el, namespace_uri, name)
    if found is None:
        return default
    return found.text or ""
