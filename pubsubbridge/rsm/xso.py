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
import collections.abc
import logging

from .. import errors, xml

from ..utils import namespaces


logger = logging.getLogger(__name__)

namespaces.xep0059_rsm = "http://jabber.org/protocol/rsm"

#: Request keys, in the order in which they are emitted.
QUERY_KEYS = ("max", "after", "before", "index")


def build_set(rsm):
    """
    Build a ``<set/>`` element from the query mapping `rsm`.

    Only the keys from :data:`QUERY_KEYS` which are present and not
    :data:`None` are emitted. ``before`` may be :data:`True` or the empty
    string to request the last page.

    :raises ~.errors.ClientError: if `rsm` is not a mapping
    """
    if not isinstance(rsm, collections.abc.Mapping):
        raise errors.ClientError("Badly formatted RSM")

    children = []
    for key in QUERY_KEYS:
        value = rsm.get(key)
        if value is None:
            continue
        if key == "before" and value is True:
            value = ""
        children.append(xml.E(key, text=value))

    return xml.E((namespaces.xep0059_rsm, "set"), *children)


def find_set(el):
    """
    Return the ``<set/>`` child of the lxml element `el` or :data:`None`.
    """
    return xml.child(el, namespaces.xep0059_rsm, "set")


def parse_set(set_el):
    """
    Convert the ``<set/>`` lxml element of a response into a mapping with
    the keys ``"count"`` (:class:`int`), ``"first"`` and ``"last"``. Absent
    keys are omitted.
    """
    result = {}

    count = xml.child_text(set_el, namespaces.xep0059_rsm, "count")
    if count is not None:
        try:
            result["count"] = int(count)
        except ValueError:
            logger.warning("dropping malformed RSM count: %r", count)

    first = xml.child(set_el, namespaces.xep0059_rsm, "first")
    if first is not None:
        result["first"] = first.text or ""

    last = xml.child_text(set_el, namespaces.xep0059_rsm, "last")
    if last is not None:
        result["last"] = last

    return result
