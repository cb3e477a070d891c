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
:mod:`~pubsubbridge.rsm` -- Result Set Management (:xep:`59`)
#############################################################

Paging for list-returning operations. Queries are mappings with any of the
keys ``"max"``, ``"after"``, ``"before"`` and ``"index"``; responses are
mappings with the keys ``"count"``, ``"first"`` and ``"last"``. The
identifiers are opaque and only threaded through.

.. currentmodule:: pubsubbridge.rsm

.. autofunction:: build_set

.. autofunction:: parse_set

.. autofunction:: find_set
"""

from .xso import (  # NOQA: F401
    QUERY_KEYS,
    build_set,
    find_set,
    parse_set,
)
