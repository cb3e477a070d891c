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
import enum

from .. import errors, xml

from ..utils import namespaces


namespaces.xep0004_data = "jabber:x:data"

#: Name of the hidden field which carries the form type.
FORM_TYPE = "FORM_TYPE"

BADLY_FORMATTED = "Badly formatted data form"


class FieldType(enum.Enum):
    """
    Enumeration containing the field types defined in :xep:`4`.

    .. autoattribute:: has_options

    .. autoattribute:: is_multivalued

    Unknown field types are to be treated as :attr:`TEXT_SINGLE`.
    """

    FIXED = "fixed"
    HIDDEN = "hidden"
    BOOLEAN = "boolean"
    TEXT_SINGLE = "text-single"
    TEXT_MULTI = "text-multi"
    TEXT_PRIVATE = "text-private"
    LIST_SINGLE = "list-single"
    LIST_MULTI = "list-multi"
    JID_SINGLE = "jid-single"
    JID_MULTI = "jid-multi"

    @property
    def has_options(self):
        """
        true for the ``list-`` field types, false otherwise.
        """
        return self.value.startswith("list-")

    @property
    def is_multivalued(self):
        """
        true for the ``-multi`` field types, false otherwise.
        """
        return self.value.endswith("-multi")


class FormType(enum.Enum):
    """
    Enumeration containing the :xep:`4` form types.
    """

    FORM = "form"
    SUBMIT = "submit"
    CANCEL = "cancel"
    RESULT = "result"


def _parse_bool(value):
    # xs:boolean
    return value.strip() in ("1", "true")


def _is_field_list(fields):
    if isinstance(fields, (str, bytes)):
        return False
    if not isinstance(fields, collections.abc.Sequence):
        return False
    for field in fields:
        if not isinstance(field, collections.abc.Mapping):
            return False
        if not isinstance(field.get("var"), str):
            return False
    return True


def _build_values(value):
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [
            xml.E("value", text=item)
            for item in value
            if item is not None
        ]
    return [xml.E("value", text=value)]


def build_field(field):
    """
    Build a ``<field/>`` element from the mapping `field`.

    The mapping must have a ``"var"`` key and may have ``"value"``,
    ``"type"`` and ``"label"`` keys.
    """
    type_ = field.get("type")
    if isinstance(type_, FieldType):
        type_ = type_.value
    return xml.E(
        "field",
        *_build_values(field.get("value")),
        var=field["var"],
        type=type_,
        label=field.get("label"),
    )


def build_form(fields, form_type=None, type_=FormType.SUBMIT):
    """
    Build an ``<x/>`` data form element.

    :param fields: The fields to include, as sequence of mappings (see
        :func:`build_field`).
    :param form_type: Namespace to put into the hidden ``FORM_TYPE`` field,
        which is emitted as first field. If :data:`None`, no ``FORM_TYPE``
        field is emitted.
    :type form_type: :class:`str` or :data:`None`
    :param type_: The form type.
    :type type_: :class:`FormType`
    :raises ~.errors.ClientError: if `fields` is not a sequence of mappings
        with a string ``"var"`` each
    :rtype: :class:`~.xml.Element`

    Boolean values are serialised as ``"true"`` and ``"false"``, list values
    as one ``<value/>`` per item.
    """
    if not _is_field_list(fields):
        raise errors.ClientError(BADLY_FORMATTED)

    children = []
    if form_type is not None:
        children.append(build_field({
            "var": FORM_TYPE,
            "type": FieldType.HIDDEN,
            "value": form_type,
        }))
    children.extend(map(build_field, fields))

    return xml.E(
        (namespaces.xep0004_data, "x"),
        *children,
        type=type_.value,
    )


def find_form(el):
    """
    Return the first data form child of the lxml element `el` or
    :data:`None`.
    """
    return xml.child(el, namespaces.xep0004_data, "x")


def get_form_type(x):
    """
    Return the value of the hidden ``FORM_TYPE`` field of the data form `x`
    (an lxml element), or :data:`None` if there is none.
    """
    for field in xml.children(x, namespaces.xep0004_data, "field"):
        if field.get("var") != FORM_TYPE:
            continue
        if field.get("type") != FieldType.HIDDEN.value:
            continue
        return xml.child_text(field, namespaces.xep0004_data, "value")
    return None


def _field_type(field):
    try:
        return FieldType(field.get("type"))
    except ValueError:
        return FieldType.TEXT_SINGLE


def parse_field(field):
    """
    Convert the ``<field/>`` lxml element `field` into a mapping.

    The value is coerced according to the field type: boolean fields yield
    :class:`bool`, multi-valued fields a :class:`list` and all others a
    single string (or :data:`None` if the field has no value).
    """
    result = {}
    for key in ("var", "type", "label"):
        if field.get(key) is not None:
            result[key] = field.get(key)

    type_ = _field_type(field)
    values = [
        value.text or ""
        for value in xml.children(field, namespaces.xep0004_data, "value")
    ]

    if type_ == FieldType.BOOLEAN:
        result["value"] = bool(values) and _parse_bool(values[0])
    elif type_.is_multivalued:
        result["value"] = values
    else:
        result["value"] = values[0] if values else None

    if type_.has_options:
        options = []
        for option in xml.children(field, namespaces.xep0004_data, "option"):
            entry = {
                "value": xml.child_text(
                    option, namespaces.xep0004_data, "value", ""
                )
            }
            if option.get("label") is not None:
                entry["label"] = option.get("label")
            options.append(entry)
        result["options"] = options

    if xml.child(field, namespaces.xep0004_data, "required") is not None:
        result["required"] = True

    desc = xml.child_text(field, namespaces.xep0004_data, "desc")
    if desc is not None:
        result["description"] = desc

    return result


def parse_form(x):
    """
    Convert the data form `x` (an lxml element) into a mapping with the
    keys ``"title"`` and ``"instructions"`` (if present) and ``"fields"``.

    The ``FORM_TYPE`` field is not included.
    """
    result = {}

    title = xml.child_text(x, namespaces.xep0004_data, "title")
    if title is not None:
        result["title"] = title

    instructions = [
        item.text or ""
        for item in xml.children(x, namespaces.xep0004_data, "instructions")
    ]
    if instructions:
        result["instructions"] = "\n".join(instructions)

    result["fields"] = [
        parse_field(field)
        for field in xml.children(x, namespaces.xep0004_data, "field")
        if field.get("var") != FORM_TYPE
    ]
    return result
