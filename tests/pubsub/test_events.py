########################################################################
# File name: test_events.py
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

import pubsubbridge.pubsub.events as events
import pubsubbridge.pubsub.items as items

from pubsubbridge.utils import etree


EVENT = "http://jabber.org/protocol/pubsub#event"
AUTHORISATION = "http://jabber.org/protocol/pubsub#subscribe_authorization"


def message(body, **attrs):
    attrs.setdefault("from", "pubsub.shakespeare.lit")
    attrs.setdefault("to", "francisco@denmark.lit")
    return etree.fromstring(
        '<message xmlns="jabber:client" {}>{}</message>'.format(
            " ".join('{}="{}"'.format(k, v) for k, v in attrs.items()),
            body,
        )
    )


def event(body, extra=""):
    return message(
        '<event xmlns="{}">{}</event>{}'.format(EVENT, body, extra)
    )


AUTHORISATION_FORM = (
    '<x xmlns="jabber:x:data" type="form">'
    '<title>PubSub subscriber request</title>'
    '<field var="FORM_TYPE" type="hidden">'
    '<value>{}</value>'
    '</field>'
    '<field var="pubsub#node" type="text-single" label="Node ID">'
    '<value>princely_musings</value>'
    '</field>'
    '<field var="pubsub#subscriber_jid" type="jid-single"'
    ' label="Subscriber Address">'
    '<value>horatio@denmark.lit</value>'
    '</field>'
    '<field var="pubsub#allow" type="boolean"'
    ' label="Allow this JID to subscribe to this pubsub node?">'
    '<value>false</value>'
    '</field>'
    '</x>'
).format(AUTHORISATION)


class Testhandles(unittest.TestCase):
    def test_event(self):
        self.assertTrue(events.handles(
            event('<purge node="princely_musings"/>')
        ))

    def test_authorisation(self):
        self.assertTrue(events.handles(
            message(AUTHORISATION_FORM, id="approve1")
        ))

    def test_ignore_other_messages(self):
        self.assertFalse(events.handles(message("<body>hi</body>")))
        self.assertFalse(events.handles(message(
            '<x xmlns="jabber:x:data" type="form">'
            '<field var="FORM_TYPE" type="hidden">'
            '<value>urn:example:other</value></field>'
            '</x>'
        )))

    def test_ignore_non_messages(self):
        self.assertFalse(events.handles(etree.fromstring(
            '<iq xmlns="jabber:client" type="set">'
            '<event xmlns="{}"/></iq>'.format(EVENT)
        )))
        self.assertFalse(events.handles(etree.fromstring(
            '<presence xmlns="jabber:client"/>'
        )))

    def test_event_in_wrong_namespace(self):
        self.assertFalse(events.handles(message(
            '<event xmlns="http://jabber.org/protocol/pubsub"/>'
        )))


class Testclassify(unittest.TestCase):
    def test_kinds(self):
        cases = [
            ('<items node="n"><item id="1"/></items>', events.EventKind.ITEM),
            ('<items node="n"><retract id="1"/></items>',
             events.EventKind.RETRACT),
            ('<items node="n"><retract id="1"/><item id="2"/></items>',
             events.EventKind.ITEM),
            ('<subscription node="n" jid="a@b" subscription="none"/>',
             events.EventKind.SUBSCRIPTION),
            ('<affiliations node="n"/>', events.EventKind.AFFILIATION),
            ('<configuration node="n"/>', events.EventKind.CONFIGURATION),
            ('<delete node="n"/>', events.EventKind.DELETE),
            ('<purge node="n"/>', events.EventKind.PURGE),
        ]
        for body, kind in cases:
            self.assertEqual(events.classify(event(body)), kind, body)

    def test_authorisation(self):
        self.assertEqual(
            events.classify(message(AUTHORISATION_FORM)),
            events.EventKind.AUTHORISATION,
        )

    def test_out_of_scope(self):
        self.assertIsNone(events.classify(event("")))
        self.assertIsNone(events.classify(event('<items node="n"/>')))
        self.assertIsNone(events.classify(event('<collection/>')))
        self.assertIsNone(events.classify(message("<body>hi</body>")))
        self.assertIsNone(events.classify(etree.fromstring(
            '<presence xmlns="jabber:client"/>'
        )))


class Testparse_event(unittest.TestCase):
    def setUp(self):
        self.item_parser = items.ItemParser()

    def tearDown(self):
        del self.item_parser

    def parse(self, el):
        return list(events.parse_event(el, self.item_parser))

    def test_item_with_delay_and_headers(self):
        result = self.parse(event(
            '<items node="princely_musings">'
            '<item id="ae890ac52d0df67ed7cfdf51b644e901"'
            ' publisher="romeo@example.com">'
            '<body>item-payload</body>'
            '</item>'
            '</items>',
            '<delay xmlns="urn:xmpp:delay" stamp="2013-06-23 20:00:00+0100"/>'
            '<headers xmlns="http://jabber.org/protocol/shim">'
            '<header name="key">value</header>'
            '</headers>'
        ))
        self.assertSequenceEqual(
            result,
            [
                (
                    events.EventKind.ITEM,
                    {
                        "from": "pubsub.shakespeare.lit",
                        "node": "princely_musings",
                        "id": "ae890ac52d0df67ed7cfdf51b644e901",
                        "entry": {"body": "item-payload"},
                        "publisher": {
                            "user": "romeo",
                            "domain": "example.com",
                        },
                        "delay": "2013-06-23 20:00:00+0100",
                        "headers": [{"name": "key", "value": "value"}],
                    }
                ),
            ]
        )

    def test_legacy_delay(self):
        result = self.parse(event(
            '<items node="n"><item id="1"/></items>',
            '<x xmlns="jabber:x:delay" stamp="20130623T20:00:00"/>'
            '<delay xmlns="jabber:x:delay" stamp="20130623T20:00:00"/>'
        ))
        self.assertEqual(result[0][1]["delay"], "20130623T20:00:00")

    def test_item_without_payload(self):
        result = self.parse(event(
            '<items node="n"><item id="1"/><item id="2"/></items>'
        ))
        self.assertSequenceEqual(
            result,
            [
                (events.EventKind.ITEM,
                 {"from": "pubsub.shakespeare.lit", "node": "n", "id": "1"}),
                (events.EventKind.ITEM,
                 {"from": "pubsub.shakespeare.lit", "node": "n", "id": "2"}),
            ]
        )

    def test_retract(self):
        result = self.parse(event(
            '<items node="princely_musings">'
            '<retract id="ae890ac52d0df67ed7cfdf51b644e901"/>'
            '</items>',
            '<headers xmlns="http://jabber.org/protocol/shim">'
            '<header name="key">value</header>'
            '</headers>'
        ))
        self.assertSequenceEqual(
            result,
            [
                (
                    events.EventKind.RETRACT,
                    {
                        "from": "pubsub.shakespeare.lit",
                        "node": "princely_musings",
                        "id": "ae890ac52d0df67ed7cfdf51b644e901",
                        "headers": [{"name": "key", "value": "value"}],
                    }
                ),
            ]
        )

    def test_mixed_items(self):
        result = self.parse(event(
            '<items node="n"><retract id="1"/><item id="2"/></items>'
        ))
        self.assertEqual(
            [kind for kind, _ in result],
            [events.EventKind.RETRACT, events.EventKind.ITEM],
        )

    def test_subscription(self):
        result = self.parse(event(
            '<subscription node="princely_musings" jid="horatio@denmark.lit"'
            ' subscription="subscribed" subid="sub-1"'
            ' expiry="2006-02-28T23:59:59Z"/>'
        ))
        self.assertSequenceEqual(
            result,
            [
                (
                    events.EventKind.SUBSCRIPTION,
                    {
                        "from": "pubsub.shakespeare.lit",
                        "node": "princely_musings",
                        "subscription": "subscribed",
                        "jid": {"user": "horatio", "domain": "denmark.lit"},
                        "id": "sub-1",
                        "expiry": "2006-02-28T23:59:59Z",
                    }
                ),
            ]
        )

    def test_subscription_with_malformed_jid(self):
        with self.assertRaises(ValueError):
            self.parse(event(
                '<subscription node="n" jid="@denmark.lit"'
                ' subscription="subscribed"/>'
            ))

    def test_affiliations(self):
        result = self.parse(event(
            '<affiliations node="princely_musings">'
            '<affiliation jid="polonius@denmark.lit" affiliation="none"/>'
            '<affiliation jid="bard@shakespeare.lit" affiliation="publisher"/>'
            '</affiliations>'
        ))
        self.assertSequenceEqual(
            result,
            [
                (
                    events.EventKind.AFFILIATION,
                    {
                        "from": "pubsub.shakespeare.lit",
                        "node": "princely_musings",
                        "affiliation": "none",
                        "jid": {"user": "polonius", "domain": "denmark.lit"},
                    }
                ),
                (
                    events.EventKind.AFFILIATION,
                    {
                        "from": "pubsub.shakespeare.lit",
                        "node": "princely_musings",
                        "affiliation": "publisher",
                        "jid": {"user": "bard", "domain": "shakespeare.lit"},
                    }
                ),
            ]
        )

    def test_configuration(self):
        result = self.parse(event(
            '<configuration node="princely_musings">'
            '<x xmlns="jabber:x:data" type="result">'
            '<field var="FORM_TYPE" type="hidden">'
            '<value>http://jabber.org/protocol/pubsub#node_config</value>'
            '</field>'
            '<field var="pubsub#title"><value>Princely Musings</value>'
            '</field>'
            '</x>'
            '</configuration>'
        ))
        self.assertSequenceEqual(
            result,
            [
                (
                    events.EventKind.CONFIGURATION,
                    {
                        "from": "pubsub.shakespeare.lit",
                        "node": "princely_musings",
                        "configuration": {
                            "fields": [
                                {
                                    "var": "pubsub#title",
                                    "value": "Princely Musings",
                                },
                            ]
                        },
                    }
                ),
            ]
        )

    def test_configuration_without_form(self):
        result = self.parse(event('<configuration node="n"/>'))
        self.assertSequenceEqual(
            result,
            [
                (events.EventKind.CONFIGURATION,
                 {"from": "pubsub.shakespeare.lit", "node": "n"}),
            ]
        )

    def test_delete_with_redirect(self):
        result = self.parse(event(
            '<delete node="princely_musings">'
            '<redirect uri="xmpp:hamlet@denmark.lit?;node=blog"/>'
            '</delete>'
        ))
        self.assertSequenceEqual(
            result,
            [
                (
                    events.EventKind.DELETE,
                    {
                        "from": "pubsub.shakespeare.lit",
                        "node": "princely_musings",
                        "redirect": "xmpp:hamlet@denmark.lit?;node=blog",
                    }
                ),
            ]
        )

    def test_purge(self):
        self.assertSequenceEqual(
            self.parse(event('<purge node="princely_musings"/>')),
            [
                (
                    events.EventKind.PURGE,
                    {
                        "from": "pubsub.shakespeare.lit",
                        "node": "princely_musings",
                    }
                ),
            ]
        )

    def test_no_event(self):
        self.assertEqual(self.parse(message("<body/>")), [])


class Testparse_authorisation(unittest.TestCase):
    def test_request(self):
        data = events.parse_authorisation(
            message(AUTHORISATION_FORM, id="approve1")
        )
        self.assertDictEqual(
            data,
            {
                "id": "approve1",
                "from": "pubsub.shakespeare.lit",
                "form": {
                    "title": "PubSub subscriber request",
                    "fields": [
                        {
                            "var": "pubsub#node",
                            "type": "text-single",
                            "label": "Node ID",
                            "value": "princely_musings",
                        },
                        {
                            "var": "pubsub#subscriber_jid",
                            "type": "jid-single",
                            "label": "Subscriber Address",
                            "value": "horatio@denmark.lit",
                        },
                        {
                            "var": "pubsub#allow",
                            "type": "boolean",
                            "label": "Allow this JID to subscribe to this"
                                     " pubsub node?",
                            "value": False,
                        },
                    ]
                },
            }
        )
