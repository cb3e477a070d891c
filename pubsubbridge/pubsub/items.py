########################################################################
# File name: items.py
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
import collections.abc

from .. import xml

from ..utils import etree


class ItemParser:
    """
    Convert between application item content and item payload elements.

    Applications may install their own parser with
    :meth:`.PubSubAdapter.set_item_parser`; it has to provide :meth:`build`
    and :meth:`parse`.

    Content is converted as follows:

    * A string becomes a single ``<body/>`` element.
    * A mapping becomes one element per key. Nested mappings become nested
      elements, lists repeat the element once per entry.
    * A mapping with the key :attr:`XML_KEY` is parsed as literal XML.

    .. automethod:: build

    .. automethod:: parse
    """

    BODY = "body"
    XML_KEY = "$xml"

    def _build_value(self, name, value):
        if isinstance(value, collections.abc.Mapping):
            return [xml.E(name, *self._build_mapping(value))]
        if isinstance(value, (list, tuple)):
            result = []
            for item in value:
                result.extend(self._build_value(name, item))
            return result
        if value is None:
            return [xml.E(name)]
        return [xml.E(name, text=value)]

    def _build_mapping(self, mapping):
        result = []
        for name, value in mapping.items():
            result.extend(self._build_value(name, value))
        return result

    def build(self, content):
        """
        Return the list of payload :class:`~.xml.Element` objects for
        `content`.

        :raises ValueError: if `content` cannot be converted
        :raises lxml.etree.XMLSyntaxError: if literal XML is malformed
        """
        if isinstance(content, str):
            return [xml.E(self.BODY, text=content)]

        if isinstance(content, collections.abc.Mapping):
            if self.XML_KEY in content:
                return [xml.from_etree(etree.fromstring(content[self.XML_KEY]))]
            return self._build_mapping(content)

        raise ValueError(
            "cannot convert {!r} to an item payload".format(content)
        )

    def _parse_element(self, el):
        if next(xml.children(el), None) is None:
            return el.text or ""
        return self._parse_children(el)

    def _parse_children(self, el):
        result = {}
        for child in xml.children(el):
            name = xml.localname(child)
            value = self._parse_element(child)
            if name in result:
                existing = result[name]
                if isinstance(existing, list):
                    existing.append(value)
                else:
                    result[name] = [existing, value]
            else:
                result[name] = value
        return result

    def parse(self, item_el):
        """
        Return the payload of the ``<item/>`` lxml element `item_el` as
        mapping ``{localname: text or nested mapping}``, or :data:`None` if
        the item carries no payload. Repeated names are collected in lists.
        """
        if next(xml.children(item_el), None) is None:
            return None
        return self._parse_children(item_el)
