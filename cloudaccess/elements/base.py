#!/usr/bin/env python
import sys
from collections.abc import Iterable
from typing import ClassVar
from typing import List
from typing import Optional
from typing import Union

from lxml import etree
from lxml.etree import _Element

from cloudaccess.lib.namespace import nsmap

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self


class BaseElement:
    """
    Building block for WebDAV request bodies.  Elements are nested
    with ``+`` and rendered to lxml with xmlelement():

        dav.Propfind() + (dav.Prop() + [dav.ResourceType()])
    """

    tag: ClassVar[Optional[str]] = None

    def __init__(self) -> None:
        self.children: List[BaseElement] = []

    def __add__(self, other: Union["BaseElement", Iterable["BaseElement"]]) -> Self:
        return self.append(other)

    def __repr__(self) -> str:
        return "%s(%d children)" % (self.__class__.__name__, len(self.children))

    def append(self, element: Union["BaseElement", Iterable["BaseElement"]]) -> Self:
        if isinstance(element, Iterable):
            self.children.extend(element)
        else:
            self.children.append(element)
        return self

    def xmlelement(self) -> _Element:
        if self.tag is None:
            raise ValueError("%s has no tag" % self.__class__.__name__)
        root = etree.Element(self.tag, nsmap=nsmap)
        for child in self.children:
            root.append(child.xmlelement())
        return root
