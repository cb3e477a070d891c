########################################################################
# File name: test_errors.py
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

import pubsubbridge.errors as errors
import pubsubbridge.structs as structs

from pubsubbridge.utils import etree


def error_iq(error_body):
    return etree.fromstring(
        '<iq xmlns="jabber:client" type="error" id="foo">'
        '{}'
        '</iq>'.format(error_body)
    )


class TestErrorDescriptor(unittest.TestCase):
    def test_init(self):
        descriptor = errors.ErrorDescriptor(
            structs.ErrorType.CANCEL,
            "item-not-found",
            description="text",
        )
        self.assertEqual(descriptor.type_, "cancel")
        self.assertEqual(descriptor.condition, "item-not-found")
        self.assertEqual(descriptor.description, "text")
        self.assertIsNone(descriptor.request)
        self.assertIsNone(descriptor.application)

    def test_client_error(self):
        request = {"to": "pubsub.example"}
        descriptor = errors.ErrorDescriptor.client_error(
            "Missing 'node' key",
            request,
        )
        self.assertDictEqual(
            descriptor.to_dict(),
            {
                "type": "modify",
                "condition": "client-error",
                "description": "Missing 'node' key",
                "request": request,
            }
        )

    def test_to_dict_omits_none(self):
        self.assertDictEqual(
            errors.ErrorDescriptor("wait", "resource-constraint").to_dict(),
            {"type": "wait", "condition": "resource-constraint"},
        )

    def test_equality(self):
        self.assertEqual(
            errors.ErrorDescriptor("cancel", "foo", description="x"),
            errors.ErrorDescriptor(structs.ErrorType.CANCEL, "foo",
                                   description="x"),
        )
        self.assertNotEqual(
            errors.ErrorDescriptor("cancel", "foo"),
            errors.ErrorDescriptor("cancel", "bar"),
        )
        self.assertNotEqual(
            errors.ErrorDescriptor("cancel", "foo"),
            {"type": "cancel", "condition": "foo"},
        )

    def test_repr_contains_condition(self):
        self.assertIn(
            "item-not-found",
            repr(errors.ErrorDescriptor("cancel", "item-not-found")),
        )

    def test_from_stanza_with_application_condition(self):
        descriptor = errors.ErrorDescriptor.from_stanza(error_iq(
            '<error type="cancel">'
            '<error-condition xmlns="urn:ietf:params:xml:ns:xmpp-stanzas"/>'
            '<unknown-error'
            ' xmlns="http://jabber.org/protocol/pubsub#errors"/>'
            '</error>'
        ))
        self.assertDictEqual(
            descriptor.to_dict(),
            {
                "type": "cancel",
                "condition": "error-condition",
                "application": {
                    "condition": "unknown-error",
                    "xmlns": "http://jabber.org/protocol/pubsub#errors",
                },
            }
        )

    def test_from_stanza_with_feature_and_text(self):
        descriptor = errors.ErrorDescriptor.from_stanza(error_iq(
            '<error type="cancel">'
            '<feature-not-implemented'
            ' xmlns="urn:ietf:params:xml:ns:xmpp-stanzas"/>'
            '<unsupported xmlns="http://jabber.org/protocol/pubsub#errors"'
            ' feature="purge-nodes"/>'
            '<text xmlns="urn:ietf:params:xml:ns:xmpp-stanzas">Nope</text>'
            '</error>'
        ))
        self.assertEqual(descriptor.condition, "feature-not-implemented")
        self.assertEqual(descriptor.description, "Nope")
        self.assertDictEqual(
            descriptor.application,
            {
                "condition": "unsupported",
                "xmlns": "http://jabber.org/protocol/pubsub#errors",
                "feature": "purge-nodes",
            }
        )

    def test_from_stanza_without_error_child(self):
        descriptor = errors.ErrorDescriptor.from_stanza(error_iq(""))
        self.assertEqual(descriptor.type_, "cancel")
        self.assertEqual(descriptor.condition, errors.UNDEFINED_CONDITION)

    def test_from_stanza_without_condition(self):
        descriptor = errors.ErrorDescriptor.from_stanza(error_iq(
            '<error type="wait"/>'
        ))
        self.assertEqual(descriptor.type_, "wait")
        self.assertEqual(descriptor.condition, errors.UNDEFINED_CONDITION)

    def test_from_stanza_without_type(self):
        descriptor = errors.ErrorDescriptor.from_stanza(error_iq(
            '<error>'
            '<forbidden xmlns="urn:ietf:params:xml:ns:xmpp-stanzas"/>'
            '</error>'
        ))
        self.assertEqual(descriptor.type_, "cancel")
        self.assertEqual(descriptor.condition, "forbidden")


class TestClientError(unittest.TestCase):
    def test_is_value_error(self):
        self.assertTrue(issubclass(errors.ClientError, ValueError))

    def test_description(self):
        exc = errors.ClientError("Missing 'to' key")
        self.assertEqual(exc.description, "Missing 'to' key")
        self.assertEqual(str(exc), "Missing 'to' key")


class TestPubSubError(unittest.TestCase):
    def test_from_descriptor_selects_class(self):
        for type_, cls in errors.EXCEPTION_CLS_MAP.items():
            exc = errors.PubSubError.from_descriptor(
                errors.ErrorDescriptor(type_, "foo")
            )
            self.assertIsInstance(exc, cls)
            self.assertEqual(exc.TYPE, type_)

    def test_from_descriptor_unknown_type(self):
        exc = errors.PubSubError.from_descriptor(
            errors.ErrorDescriptor("bogus", "foo")
        )
        self.assertIs(type(exc), errors.PubSubError)

    def test_attributes(self):
        descriptor = errors.ErrorDescriptor(
            "auth", "forbidden",
            description="go away",
        )
        exc = errors.PubSubError.from_descriptor(descriptor)
        self.assertIs(exc.descriptor, descriptor)
        self.assertEqual(exc.condition, "forbidden")
        self.assertIn("forbidden", str(exc))
        self.assertIn("go away", str(exc))

    def test_builtin_bases(self):
        self.assertTrue(issubclass(errors.PubSubAuthError, PermissionError))
        self.assertTrue(issubclass(errors.PubSubModifyError, ValueError))
