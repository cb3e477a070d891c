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
:mod:`~pubsubbridge.shim` --- Stanza Headers and Internet Metadata (:xep:`0131`)
################################################################################

Pubsub services may attach :xep:`131` headers to notifications. They are
read into a :class:`multidict.CIMultiDict` (header names are case
insensitive and may repeat) and handed to applications as list of
``{"name": ..., "value": ...}`` mappings.

.. currentmodule:: pubsubbridge.shim

.. autofunction:: find_headers

.. autofunction:: parse_headers

.. autofunction:: headers_as_list
"""

from .xso import (  # NOQA: F401
    find_headers,
    headers_as_list,
    parse_headers,
)
