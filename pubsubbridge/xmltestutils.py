########################################################################
# File name: xmltestutils.py
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
import unittest

from .utils import etree


def element_path(el, upto=None):
    segments = []
    parent = el.getparent()

    while parent is not None and parent != upto:
        similar = list(parent.iterchildren(el.tag))
        index = similar.index(el)
        segments.insert(0, (el.tag, index))
        el = parent
        parent = el.getparent()

    base = "/" + el.tag
    if segments:
        return base + "/" + "/".join(
            "{}[{}]".format(tag, index)
            for tag, index in segments
        )
    return base


class XMLTestCase(unittest.TestCase):
    """
    Test case with assertions on :mod:`lxml.etree` trees.

    Child order is significant, since data form fields and item lists are
    ordered.
    """

    def parse(self, text):
        """
        Parse `text` into an lxml element.
        """
        return etree.fromstring(text)

    def assertChildrenEqual(self, tree1, tree2,
                            ignore_surplus_attr=False):
        t1_children = [c for c in tree1 if isinstance(c.tag, str)]
        t2_children = [c for c in tree2 if isinstance(c.tag, str)]
        self.assertEqual(
            [c.tag for c in t1_children],
            [c.tag for c in t2_children],
            "Children differ at {}".format(element_path(tree2))
        )
        for c1, c2 in zip(t1_children, t2_children):
            self.assertSubtreeEqual(
                c1, c2,
                ignore_surplus_attr=ignore_surplus_attr,
            )

    def assertAttributesEqual(self, el1, el2,
                              ignore_surplus_attr=False):
        t1_attrdict = el1.attrib
        t2_attrdict = el2.attrib
        t1_attrs = set(t1_attrdict)
        t2_attrs = set(t2_attrdict)

        if not ignore_surplus_attr or (t1_attrs - t2_attrs):
            self.assertSetEqual(
                t1_attrs,
                t2_attrs,
                "Attribute key differences at {}".format(element_path(el2))
            )

        for attr in t1_attrs:
            self.assertEqual(
                t1_attrdict[attr],
                t2_attrdict[attr],
                "Attribute value difference at {}@{}".format(
                    element_path(el2),
                    attr))

    def assertSubtreeEqual(self, tree1, tree2,
                           ignore_surplus_attr=False):
        """
        Assert that the trees `tree1` and `tree2` are equal, ignoring
        whitespace-only text. If `tree1` is a string, it is parsed first.

        With `ignore_surplus_attr`, attributes present only in `tree2` are
        ignored (for example generated stanza ids).
        """
        if isinstance(tree1, (str, bytes)):
            tree1 = self.parse(tree1)

        self.assertEqual(tree1.tag, tree2.tag,
                         "tag mismatch at {}".format(element_path(tree2)))
        self.assertEqual(
            (tree1.text or "").strip(),
            (tree2.text or "").strip(),
            "text mismatch at {}".format(element_path(tree2))
        )
        self.assertAttributesEqual(tree1, tree2,
                                   ignore_surplus_attr=ignore_surplus_attr)
        self.assertChildrenEqual(tree1, tree2,
                                 ignore_surplus_attr=ignore_surplus_attr)
