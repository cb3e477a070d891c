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
Version information
###################

There are two ways to obtain the imported version of the :mod:`pubsubbridge`
package:

.. autodata:: __version__

.. data:: version

   Alias of :data:`__version__`.

.. autodata:: version_info

Shorthands
##########

The most commonly used classes are available from the package root:

* :class:`pubsubbridge.PubSubAdapter`
* :class:`pubsubbridge.ErrorDescriptor`
* :class:`pubsubbridge.JID`
* :class:`pubsubbridge.ItemParser`
"""
from ._version import version_info, __version__, version  # NOQA: F401

#: The imported :mod:`pubsubbridge` version as a tuple.
#:
#: The components of the tuple are, in order: `major version`, `minor
#: version`, `patch level`, and `pre-release identifier`.
version_info = version_info

#: The imported :mod:`pubsubbridge` version as a string.
__version__ = __version__

from .errors import (  # NOQA: F401,E402
    ClientError,
    ErrorDescriptor,
    PubSubError,
)
from .structs import JID, parse_jid  # NOQA: F401,E402
from .pubsub import (  # NOQA: F401,E402
    EventKind,
    ItemParser,
    OPERATIONS,
    PubSubAdapter,
)
