########################################################################
# File name: __init__.py
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
:mod:`~pubsubbridge.pubsub` --- Publish-Subscribe adapter (:xep:`0060`)
#######################################################################

This subpackage translates application requests into :xep:`0060` stanzas,
correlates the responses and turns notifications into signals.

Using the adapter
=================

.. code-block:: python

   adapter = pubsubbridge.PubSubAdapter(
       transport,
       local_jid="juliet@capulet.lit/balcony",
   )
   transport.on_stanza = adapter.handle_stanza

   def published(error, data):
       if error is not None:
           print(error.to_dict())
           return
       print("published as", data["id"])

   adapter.send_request(
       "xmpp.pubsub.publish",
       {
           "to": "pubsub.shakespeare.lit",
           "node": "princely_musings",
           "content": "Soliloquy",
       },
       published,
   )

.. currentmodule:: pubsubbridge

.. autoclass:: PubSubAdapter

.. currentmodule:: pubsubbridge.pubsub

.. autodata:: pubsubbridge.pubsub.service.OPERATIONS

Item payloads
=============

.. autoclass:: ItemParser

Notifications
=============

.. autoclass:: EventKind

.. autofunction:: pubsubbridge.pubsub.events.handles

.. autofunction:: pubsubbridge.pubsub.events.classify

.. autofunction:: pubsubbridge.pubsub.events.parse_event

.. autofunction:: pubsubbridge.pubsub.events.parse_authorisation
"""

from .events import EventKind  # NOQA: F401
from .items import ItemParser  # NOQA: F401
from .service import OPERATIONS, PubSubAdapter  # NOQA: F401
