#!/usr/bin/env python
"""
String based addressing of items within one cloud backend.

A CloudPath is not a filesystem path.  It is compared and hashed by its
exact text, and none of the operations below touch the network or the
local disk.  A trailing ``/`` is meaningful: the WebDAV provider uses it
to tell folders from files.
"""
import sys
from typing import List
from typing import Union

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self

SEPARATOR = "/"


def trimming_leading_characters(text: str, characters: str) -> str:
    """Remove the run of ``characters`` at the start of ``text``."""
    return text.lstrip(characters) if characters else text


def trimming_trailing_characters(text: str, characters: str) -> str:
    """Remove the run of ``characters`` at the end of ``text``."""
    return text.rstrip(characters) if characters else text


class CloudPath:
    __slots__ = ("path",)

    def __init__(self, path: str) -> None:
        if not isinstance(path, str):
            raise TypeError("CloudPath expects a str, got %r" % (path,))
        object.__setattr__(self, "path", path)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("CloudPath is immutable")

    def __reduce__(self):
        return (CloudPath, (self.path,))

    @classmethod
    def objectify(cls, path: Union[Self, str]) -> "CloudPath":
        if isinstance(path, CloudPath):
            return path
        return CloudPath(path)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CloudPath):
            return NotImplemented
        return self.path == other.path

    def __ne__(self, other: object) -> bool:
        return not self == other

    def __hash__(self) -> int:
        return hash(self.path)

    def __str__(self) -> str:
        return self.path

    def __repr__(self) -> str:
        return "CloudPath(%r)" % self.path

    @property
    def is_absolute(self) -> bool:
        return self.path.startswith(SEPARATOR)

    @property
    def has_directory_path(self) -> bool:
        return self.path.endswith(SEPARATOR)

    @property
    def path_components(self) -> List[str]:
        """
        The non-empty segments of the path, with a leading "/" anchor
        for absolute paths.  "." and ".." are kept as they are.

        >>> CloudPath("///foo//bar/").path_components
        ['/', 'foo', 'bar']
        """
        if not self.path:
            return [""]
        components = [c for c in self.path.split(SEPARATOR) if c]
        if self.is_absolute:
            components.insert(0, SEPARATOR)
        return components

    @property
    def last_path_component(self) -> str:
        return self.path_components[-1]

    def appending_path_component(self, component: str) -> "CloudPath":
        ## Plain concatenation: separators already present on either
        ## side are kept verbatim, even if that doubles them.
        if not self.path:
            return CloudPath(component)
        if self.path.endswith(SEPARATOR) or component.startswith(SEPARATOR):
            return CloudPath(self.path + component)
        return CloudPath(self.path + SEPARATOR + component)

    def deleting_last_path_component(self) -> "CloudPath":
        """
        Remove the last component.  The result always ends with a
        separator.  Paths without a parent yield a relative "one level
        up" marker instead: "foo" gives "./", "/" gives "/../", and a
        path ending in ".." gets another "../" appended.
        """
        last = self.last_path_component
        if last in ("", SEPARATOR):
            return CloudPath(self.path + "../")
        trimmed = trimming_trailing_characters(self.path, SEPARATOR)
        if last == "..":
            return CloudPath(trimmed + "/../")
        if last == ".":
            return CloudPath(trimmed[:-1] + "../")
        parent = trimmed[: -len(last)]
        if not parent:
            return CloudPath("./")
        return CloudPath(parent)

    @property
    def standardized(self) -> "CloudPath":
        """
        Resolve "." and ".." lexically.  A ".." that has nothing to
        remove (start of a relative path, right after the root anchor or
        after another "..") is kept.

        >>> CloudPath("/../../foo/bar/.///../baz").standardized
        CloudPath('/../../foo/baz')
        """
        stack: List[str] = []
        for component in self.path_components:
            if component == ".":
                continue
            if component == ".." and stack and stack[-1] not in ("..", SEPARATOR):
                stack.pop()
                continue
            stack.append(component)

        if stack and stack[0] == SEPARATOR:
            path = SEPARATOR + SEPARATOR.join(stack[1:])
            has_real_component = len(stack) > 1
        else:
            path = SEPARATOR.join(stack)
            has_real_component = bool(path)
        if has_real_component and self.has_directory_path:
            path += SEPARATOR
        return CloudPath(path)
