"""
Pure functions for building WebDAV XML request bodies.

All functions in this module are pure - they take data in and return XML out,
with no side effects or I/O.
"""
from typing import Iterable
from typing import List
from typing import Optional

from lxml import etree

from cloudaccess.elements import dav
from cloudaccess.elements.base import BaseElement

DEFAULT_PROPERTY_NAMES = ("getlastmodified", "getcontentlength", "resourcetype")

_PROPERTY_ELEMENTS = {
    "getlastmodified": dav.GetLastModified,
    "getcontentlength": dav.GetContentLength,
    "resourcetype": dav.ResourceType,
}


def build_propfind_body(property_names: Optional[Iterable[str]] = None) -> bytes:
    """
    Build PROPFIND request body XML.

    Args:
        property_names: DAV: property names to request.  Defaults to
            getlastmodified, getcontentlength and resourcetype.

    Returns:
        UTF-8 encoded XML bytes

    Raises:
        ValueError: for a property name this builder does not know
    """
    if property_names is None:
        property_names = DEFAULT_PROPERTY_NAMES
    prop_elements: List[BaseElement] = []
    for name in property_names:
        try:
            prop_elements.append(_PROPERTY_ELEMENTS[name]())
        except KeyError:
            raise ValueError(f"Unsupported property name: {name}") from None
    propfind = dav.Propfind() + (dav.Prop() + prop_elements)

    return etree.tostring(propfind.xmlelement(), encoding="utf-8", xml_declaration=True)
