########################################################################
# File name: test_items.py
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

import pubsubbridge.pubsub.items as items
import pubsubbridge.xml as xml

from pubsubbridge.utils import etree


ATOM = "http://www.w3.org/2005/Atom"


class TestItemParserBuild(unittest.TestCase):
    def setUp(self):
        self.parser = items.ItemParser()

    def tearDown(self):
        del self.parser

    def test_string(self):
        self.assertEqual(
            self.parser.build("hello"),
            [xml.E("body", text="hello")],
        )

    def test_mapping(self):
        self.assertEqual(
            self.parser.build({
                "entry": {"title": "Soliloquy", "flag": None},
                "n": 3,
            }),
            [
                xml.E(
                    "entry",
                    xml.E("title", text="Soliloquy"),
                    xml.E("flag"),
                ),
                xml.E("n", text="3"),
            ]
        )

    def test_list_repeats(self):
        self.assertEqual(
            self.parser.build({"tag": ["a", "b"]}),
            [xml.E("tag", text="a"), xml.E("tag", text="b")],
        )

    def test_literal_xml(self):
        result = self.parser.build({
            "$xml": '<entry xmlns="{}"><title>x</title></entry>'.format(ATOM),
        })
        self.assertEqual(len(result), 1)
        self.assertEqual(result[0].tag, (ATOM, "entry"))
        self.assertEqual(result[0].children[0].text, "x")

    def test_malformed_literal_xml(self):
        with self.assertRaises(etree.XMLSyntaxError):
            self.parser.build({"$xml": "<entry>"})

    def test_reject_other_types(self):
        for content in [42, ["a"], None, True]:
            with self.assertRaises(ValueError):
                self.parser.build(content)


class TestItemParserParse(unittest.TestCase):
    def setUp(self):
        self.parser = items.ItemParser()

    def tearDown(self):
        del self.parser

    def parse(self, body):
        return self.parser.parse(etree.fromstring(
            '<item xmlns="http://jabber.org/protocol/pubsub#event"'
            ' id="x">{}</item>'.format(body)
        ))

    def test_empty(self):
        self.assertIsNone(self.parse(""))

    def test_body(self):
        self.assertDictEqual(self.parse("<body>hello</body>"),
                             {"body": "hello"})

    def test_nested(self):
        self.assertDictEqual(
            self.parse(
                '<entry xmlns="{}">'
                '<title>Soliloquy</title>'
                '<link href="x"/>'
                '<link href="y"/>'
                '<link href="z"/>'
                '</entry>'.format(ATOM)
            ),
            {
                "entry": {
                    "title": "Soliloquy",
                    "link": ["", "", ""],
                }
            }
        )

    def test_build_then_parse(self):
        content = {"entry": {"title": "Soliloquy", "tag": ["a", "b"]}}
        item = xml.to_etree(xml.E(
            ("http://jabber.org/protocol/pubsub", "item"),
            *self.parser.build(content)
        ))
        self.assertDictEqual(self.parser.parse(item), content)
