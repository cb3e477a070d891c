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
import multidict

from .. import xml

from ..utils import namespaces

namespaces.xep0131_shim = "http://jabber.org/protocol/shim"


def find_headers(el):
    """
    Return the ``<headers/>`` child of the lxml element `el` or
    :data:`None`.
    """
    return xml.child(el, namespaces.xep0131_shim, "headers")


def parse_headers(headers_el):
    """
    Return the headers of the ``<headers/>`` lxml element `headers_el` as
    :class:`multidict.CIMultiDict`.

    The keys are the header names and the values are the values of the
    header. Headers without name are skipped.
    """
    result = multidict.CIMultiDict()
    for header in xml.children(headers_el, namespaces.xep0131_shim, "header"):
        name = header.get("name")
        if name is None:
            continue
        result.add(name, header.text or "")
    return result


def headers_as_list(headers):
    """
    Convert the multi-dict `headers` into a list of mappings with the keys
    ``"name"`` and ``"value"``, in order and including duplicates.
    """
    return [
        {"name": name, "value": value}
        for name, value in headers.items()
    ]
