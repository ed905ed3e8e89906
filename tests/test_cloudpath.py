#!/usr/bin/env python
# -*- encoding: utf-8 -*-
"""
Unit tests for the CloudPath algebra.

All operations are pure string manipulation, no network and no disk.
"""
import pickle

import pytest

from cloudaccess.cloudpath import CloudPath
from cloudaccess.cloudpath import trimming_leading_characters
from cloudaccess.cloudpath import trimming_trailing_characters


class TestTrimming:
    def test_trimming_leading_characters(self) -> None:
        assert trimming_leading_characters("///foo", "/") == "foo"
        assert trimming_leading_characters("/foo///bar", "/") == "foo///bar"
        assert trimming_leading_characters("foo///bar", "/") == "foo///bar"

    def test_trimming_trailing_characters(self) -> None:
        assert trimming_trailing_characters("foo///", "/") == "foo"
        assert trimming_trailing_characters("foo///bar/", "/") == "foo///bar"
        assert trimming_trailing_characters("foo///bar", "/") == "foo///bar"

    def test_trimming_with_empty_character_set(self) -> None:
        assert trimming_leading_characters("//foo", "") == "//foo"
        assert trimming_trailing_characters("foo//", "") == "foo//"


class TestCloudPathValue:
    def test_equality_is_textual(self) -> None:
        assert CloudPath("/foo") == CloudPath("/foo")
        assert CloudPath("/foo") != CloudPath("/foo/")
        assert CloudPath("/foo//bar") != CloudPath("/foo/bar")

    def test_hash_follows_text(self) -> None:
        paths = {CloudPath("/foo"), CloudPath("/foo"), CloudPath("/foo/")}
        assert len(paths) == 2

    def test_immutable(self) -> None:
        path = CloudPath("/foo")
        with pytest.raises(AttributeError):
            path.path = "/bar"

    def test_rejects_non_str(self) -> None:
        with pytest.raises(TypeError):
            CloudPath(b"/foo")

    def test_objectify(self) -> None:
        path = CloudPath("/foo")
        assert CloudPath.objectify(path) is path
        assert CloudPath.objectify("/foo") == path

    def test_str_and_repr(self) -> None:
        assert str(CloudPath("/foo/bar")) == "/foo/bar"
        assert repr(CloudPath("/foo")) == "CloudPath('/foo')"

    def test_pickle(self) -> None:
        path = CloudPath("/foo/bar/")
        assert pickle.loads(pickle.dumps(path)) == path

    def test_directory_path(self) -> None:
        assert CloudPath("/foo/").has_directory_path
        assert CloudPath("/").has_directory_path
        assert not CloudPath("/foo").has_directory_path
        assert not CloudPath("").has_directory_path

    def test_is_absolute(self) -> None:
        assert CloudPath("/foo").is_absolute
        assert not CloudPath("foo/").is_absolute


class TestStandardized:
    def test_standardized(self) -> None:
        assert CloudPath("/../../foo/bar/.///../baz").standardized.path == "/../../foo/baz"

    def test_standardized_keeps_folder_slash(self) -> None:
        assert CloudPath("/foo/./bar/../baz/").standardized.path == "/foo/baz/"

    def test_standardized_root(self) -> None:
        assert CloudPath("/foo/..").standardized.path == "/"
        assert CloudPath("/./").standardized.path == "/"

    def test_standardized_relative(self) -> None:
        assert CloudPath("foo/../bar").standardized.path == "bar"
        assert CloudPath("../foo").standardized.path == "../foo"
        assert CloudPath("foo/..").standardized.path == ""


class TestPathComponents:
    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/foo/bar/", ["/", "foo", "bar"]),
            ("/foo/bar", ["/", "foo", "bar"]),
            ("/foo/", ["/", "foo"]),
            ("/foo", ["/", "foo"]),
            ("foo/", ["foo"]),
            ("foo", ["foo"]),
            ("///foo///", ["/", "foo"]),
            ("foo///", ["foo"]),
            ("///foo", ["/", "foo"]),
            ("foo///bar", ["foo", "bar"]),
            ("/../", ["/", ".."]),
            ("/..", ["/", ".."]),
            ("../", [".."]),
            ("..", [".."]),
            ("/./", ["/", "."]),
            ("/.", ["/", "."]),
            ("./", ["."]),
            (".", ["."]),
            ("/", ["/"]),
            ("", [""]),
        ],
    )
    def test_path_components(self, path, expected) -> None:
        assert CloudPath(path).path_components == expected

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/foo/bar/", "bar"),
            ("/foo/bar", "bar"),
            ("/foo/", "foo"),
            ("foo", "foo"),
            ("///foo///", "foo"),
            ("foo///bar", "bar"),
            ("/../", ".."),
            ("..", ".."),
            ("/./", "."),
            (".", "."),
            ("/", "/"),
            ("", ""),
        ],
    )
    def test_last_path_component(self, path, expected) -> None:
        assert CloudPath(path).last_path_component == expected


class TestAppendingPathComponent:
    @pytest.mark.parametrize(
        "base, component, expected",
        [
            ("/foo/", "/bar/", "/foo//bar/"),
            ("/foo/", "/bar", "/foo//bar"),
            ("/foo/", "bar/", "/foo/bar/"),
            ("/foo/", "bar", "/foo/bar"),
            ("/foo", "/bar/", "/foo/bar/"),
            ("/foo", "/bar", "/foo/bar"),
            ("/foo", "bar/", "/foo/bar/"),
            ("/foo", "bar", "/foo/bar"),
            ("foo/", "/bar/", "foo//bar/"),
            ("foo/", "bar", "foo/bar"),
            ("foo", "/bar", "foo/bar"),
            ("foo", "bar/", "foo/bar/"),
            ("///foo///", "///bar///", "///foo//////bar///"),
            ("/", "foo", "/foo"),
            ("", "foo", "foo"),
        ],
    )
    def test_appending_path_component(self, base, component, expected) -> None:
        assert CloudPath(base).appending_path_component(component).path == expected

    def test_appending_returns_new_path(self) -> None:
        base = CloudPath("/foo")
        base.appending_path_component("bar")
        assert base.path == "/foo"


class TestDeletingLastPathComponent:
    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/foo/bar/", "/foo/"),
            ("/foo/bar", "/foo/"),
            ("/foo/", "/"),
            ("/foo", "/"),
            ("foo/", "./"),
            ("foo", "./"),
            ("///foo///", "///"),
            ("foo///", "./"),
            ("///foo", "///"),
            ("foo///bar", "foo///"),
        ],
    )
    def test_deleting_last_path_component(self, path, expected) -> None:
        assert CloudPath(path).deleting_last_path_component().path == expected

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/../", "/../../"),
            ("/..", "/../../"),
            ("../", "../../"),
            ("..", "../../"),
            ("/./", "/../"),
            ("/.", "/../"),
            ("./", "../"),
            (".", "../"),
        ],
    )
    def test_deleting_dot_components(self, path, expected) -> None:
        assert CloudPath(path).deleting_last_path_component().path == expected

    def test_deleting_from_root_goes_up(self) -> None:
        assert CloudPath("/").deleting_last_path_component().path == "/../"
        assert CloudPath("").deleting_last_path_component().path == "../"
