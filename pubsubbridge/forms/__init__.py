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
:mod:`~pubsubbridge.forms` --- Data Forms support (:xep:`4`)
############################################################

This subpackage converts between :xep:`4` Data Forms and the representation
used by applications: a list of field mappings with the keys ``"var"``,
``"value"`` and optionally ``"type"`` and ``"label"``.

Forms submitted to a pubsub service carry a hidden ``FORM_TYPE`` field
which identifies the using protocol. It is always emitted as the first
field and is stripped when parsing.

.. currentmodule:: pubsubbridge.forms

.. autofunction:: build_form

.. autofunction:: parse_form

.. autofunction:: get_form_type

.. autofunction:: find_form

.. autoclass:: FieldType

.. autoclass:: FormType
"""

from .xso import (  # NOQA: F401
    FORM_TYPE,
    BADLY_FORMATTED,
    FieldType,
    FormType,
    build_field,
    build_form,
    find_form,
    get_form_type,
    parse_field,
    parse_form,
)
