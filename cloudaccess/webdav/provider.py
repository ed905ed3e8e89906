#!/usr/bin/env python
"""
CloudProvider implementation for WebDAV servers.

Plain WebDAV can not tell files from folders the way the provider
contract needs: GET works on collections, PUT silently overwrites, and
DELETE and MOVE act on whatever is there.  Every operation that would
otherwise act on the wrong kind of item therefore looks at the item
with a depth 0 PROPFIND first and compares the reported resourcetype
with the trailing slash of the caller's path.

Each operation translates transport failures exactly once, with its own
status table (the dicts below).  Statuses not in the table are raised
as the HTTPStatusError the client produced.
"""
import asyncio
import logging
import os
import sys
import tempfile
from contextlib import aclosing
from contextlib import contextmanager
from contextlib import suppress
from types import TracebackType
from typing import Dict
from typing import Iterator
from typing import List
from typing import Optional
from typing import Type
from urllib.parse import unquote

from cloudaccess.cloudpath import CloudPath
from cloudaccess.cloudpath import trimming_leading_characters
from cloudaccess.items import CloudItemList
from cloudaccess.items import CloudItemMetadata
from cloudaccess.items import CloudItemType
from cloudaccess.lib import error
from cloudaccess.lib.url import quote_path
from cloudaccess.lib.url import URL
from cloudaccess.protocol.types import Depth
from cloudaccess.protocol.types import PropfindResponseElement
from cloudaccess.protocol.xml_builders import build_propfind_body
from cloudaccess.protocol.xml_parsers import parse_propfind_response
from cloudaccess.provider import _require_file_path
from cloudaccess.provider import _require_folder_path
from cloudaccess.provider import CloudProvider
from cloudaccess.provider import LocalPath
from cloudaccess.provider import PathLike
from cloudaccess.webdav.client import WebDAVClient

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self

log = logging.getLogger("cloudaccess")

StatusTable = Dict[int, Type[error.CloudProviderError]]

_FETCH: StatusTable = {
    401: error.UnauthorizedError,
    404: error.ItemNotFoundError,
}
_UPLOAD: StatusTable = {
    401: error.UnauthorizedError,
    405: error.ItemTypeMismatchError,
    409: error.ParentFolderDoesNotExistError,
    507: error.QuotaInsufficientError,
}
_CREATE_FOLDER: StatusTable = {
    401: error.UnauthorizedError,
    405: error.ItemAlreadyExistsError,
    409: error.ParentFolderDoesNotExistError,
    507: error.QuotaInsufficientError,
}
_DELETE: StatusTable = {
    401: error.UnauthorizedError,
    404: error.ItemNotFoundError,
}
_MOVE: StatusTable = {
    401: error.UnauthorizedError,
    404: error.ItemNotFoundError,
    409: error.ParentFolderDoesNotExistError,
    412: error.ItemAlreadyExistsError,
    507: error.QuotaInsufficientError,
}


def _classify(
    exc: error.DAVError, table: StatusTable, cloud_path: CloudPath
) -> Optional[error.CloudProviderError]:
    """
    Return the canonical error for a transport failure, or None if the
    table has no entry for it.
    """
    if isinstance(exc, error.HTTPStatusError) and exc.status in table:
        return table[exc.status](cloud_path)
    if isinstance(exc, error.NotConnectedError):
        return error.NoInternetConnectionError(cloud_path)
    return None


@contextmanager
def _translate_errors(table: StatusTable, cloud_path: CloudPath) -> Iterator[None]:
    try:
        yield
    except error.DAVError as e:
        canonical = _classify(e, table, cloud_path)
        if canonical is None:
            raise
        raise canonical from e


def _item_type(element: PropfindResponseElement) -> CloudItemType:
    if element.collection is None:
        return CloudItemType.UNKNOWN
    return CloudItemType.FOLDER if element.collection else CloudItemType.FILE


def _metadata(element: PropfindResponseElement, cloud_path: CloudPath) -> CloudItemMetadata:
    return CloudItemMetadata(
        name=cloud_path.last_path_component,
        cloud_path=cloud_path,
        item_type=_item_type(element),
        last_modified_date=element.last_modified,
        size=element.content_length,
    )


def _matches_path_shape(cloud_path: CloudPath, item_type: CloudItemType) -> bool:
    if item_type == CloudItemType.FOLDER:
        return cloud_path.has_directory_path
    if item_type == CloudItemType.FILE:
        return not cloud_path.has_directory_path
    return True


def _last_url_segment(url: str) -> str:
    path = URL.objectify(url).path
    return unquote(trimming_leading_characters(path.rstrip("/"), "/").rsplit("/", 1)[-1])


class WebDAVProvider(CloudProvider):
    """
    Cloud provider for WebDAV.

    Cloud paths are relative to the base URL of the client's credential:
    with base URL https://cloud.example.com/dav/ the cloud path
    /Documents/report.pdf is https://cloud.example.com/dav/Documents/report.pdf.
    """

    def __init__(self, client: WebDAVClient) -> None:
        self.client = client
        self._propfind_body = build_propfind_body()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    async def close(self) -> None:
        await self.client.close()

    # ==================== CloudProvider API ====================

    async def fetch_item_metadata(self, cloud_path: PathLike) -> CloudItemMetadata:
        cloud_path = CloudPath.objectify(cloud_path)
        url = self._resolve(cloud_path)
        with _translate_errors(_FETCH, cloud_path):
            elements = await self._propfind(url, Depth.ZERO)

        root = next(e for e in elements if e.depth == 0)
        metadata = _metadata(root, cloud_path)
        if not _matches_path_shape(cloud_path, metadata.item_type):
            raise error.ItemTypeMismatchError(cloud_path)
        return metadata

    async def fetch_item_list(
        self, cloud_path: PathLike, page_token: Optional[str] = None
    ) -> CloudItemList:
        cloud_path = CloudPath.objectify(cloud_path)
        _require_folder_path(cloud_path)
        ## WebDAV delivers the whole listing at once, there are no pages
        if page_token is not None:
            raise error.PageTokenInvalidError(cloud_path)
        url = self._resolve(cloud_path)
        with _translate_errors(_FETCH, cloud_path):
            elements = await self._propfind(url, Depth.ONE)

        root = next(e for e in elements if e.depth == 0)
        if _item_type(root) != CloudItemType.FOLDER:
            raise error.ItemTypeMismatchError(cloud_path)

        items: List[CloudItemMetadata] = []
        for element in elements:
            if element.depth != 1:
                continue
            name = _last_url_segment(element.url)
            child_path = cloud_path.appending_path_component(name)
            if element.collection:
                child_path = CloudPath(child_path.path + "/")
            items.append(_metadata(element, child_path))
        return CloudItemList(items=tuple(items))

    async def download_file(self, cloud_path: PathLike, local_path: LocalPath) -> None:
        cloud_path = CloudPath.objectify(cloud_path)
        _require_file_path(cloud_path)
        url = self._resolve(cloud_path)
        ## GET on a collection does not reliably fail, so make sure this is a file
        await self.fetch_item_metadata(cloud_path)
        local_path = os.fspath(local_path)
        try:
            target = await asyncio.to_thread(_ExclusiveFile, local_path)
        except FileExistsError as e:
            raise error.ItemAlreadyExistsError(local_path) from e
        try:
            with _translate_errors(_FETCH, cloud_path):
                async with aclosing(self.client.get_stream(url)) as chunks:
                    async for chunk in chunks:
                        await asyncio.to_thread(target.write, chunk)
            await asyncio.to_thread(target.commit)
        except BaseException:
            target.discard()
            raise

    async def upload_file(
        self, local_path: LocalPath, cloud_path: PathLike, replace_existing: bool
    ) -> CloudItemMetadata:
        cloud_path = CloudPath.objectify(cloud_path)
        _require_file_path(cloud_path)
        url = self._resolve(cloud_path)
        local_path = os.fspath(local_path)
        try:
            source = await asyncio.to_thread(open, local_path, "rb")
        except FileNotFoundError as e:
            raise error.ItemNotFoundError(local_path) from e
        except IsADirectoryError as e:
            raise error.ItemTypeMismatchError(local_path) from e

        with source:
            ## PUT on an existing resource succeeds no matter what the caller
            ## intended, so find out what is there first
            try:
                await self.fetch_item_metadata(cloud_path)
            except error.ItemNotFoundError:
                pass
            except error.ItemTypeMismatchError:
                if not replace_existing:
                    raise error.ItemAlreadyExistsError(cloud_path) from None
                raise
            else:
                if not replace_existing:
                    raise error.ItemAlreadyExistsError(cloud_path)

            with _translate_errors(_UPLOAD, cloud_path):
                await self.client.put(url, source)
        return await self.fetch_item_metadata(cloud_path)

    async def create_folder(self, cloud_path: PathLike) -> None:
        cloud_path = CloudPath.objectify(cloud_path)
        url = self._resolve(cloud_path).ensure_trailing_slash()
        with _translate_errors(_CREATE_FOLDER, cloud_path):
            await self.client.mkcol(url)

    async def delete_item(self, cloud_path: PathLike) -> None:
        cloud_path = CloudPath.objectify(cloud_path)
        url = self._resolve(cloud_path)
        ## DELETE removes files and collections alike
        await self.fetch_item_metadata(cloud_path)
        with _translate_errors(_DELETE, cloud_path):
            await self.client.delete(url)

    async def move_item(self, source: PathLike, destination: PathLike) -> None:
        source = CloudPath.objectify(source)
        destination = CloudPath.objectify(destination)
        if source.has_directory_path != destination.has_directory_path:
            raise ValueError(f"can't move {source} to {destination}: they denote different kinds of item")
        source_url = self._resolve(source)
        destination_url = self._resolve(destination)
        ## MOVE moves files and collections alike
        await self.fetch_item_metadata(source)
        with _translate_errors(_MOVE, source):
            await self.client.move(source_url, destination_url, overwrite=False)

    # ==================== Internal ====================

    def _resolve(self, cloud_path: CloudPath) -> URL:
        """
        The request URL for cloud_path: the percent-encoded path appended
        to the base URL of the client.
        """
        relative = trimming_leading_characters(cloud_path.path, "/")
        try:
            return self.client.url.append_path(quote_path(relative))
        except (UnicodeEncodeError, ValueError) as e:
            raise error.ResolvingURLFailedError(
                url=str(self.client.url), reason=f"can't resolve {cloud_path!r}: {e}"
            ) from e

    async def _propfind(self, url: URL, depth: Depth) -> List[PropfindResponseElement]:
        response = await self.client.propfind(url, self._propfind_body, depth)
        return parse_propfind_response(
            response.content, str(url), huge_tree=self.client.huge_tree
        )


class _ExclusiveFile:
    """
    A download target that never overwrites an existing file.

    The name is reserved with O_EXCL on creation; the content goes to a
    temporary file next to it, which commit() renames over the
    reservation, so readers either see an empty file or the complete
    download.  discard() removes both.

    Raises:
        FileExistsError: local_path already exists
    """

    def __init__(self, local_path: str) -> None:
        self.local_path = local_path
        fd = os.open(local_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        os.close(fd)
        try:
            self._tmp = tempfile.NamedTemporaryFile(
                dir=os.path.dirname(os.path.abspath(local_path)), delete=False
            )
        except BaseException:
            os.unlink(local_path)
            raise

    def write(self, chunk: bytes) -> None:
        self._tmp.write(chunk)

    def commit(self) -> None:
        self._tmp.close()
        os.replace(self._tmp.name, self.local_path)

    def discard(self) -> None:
        self._tmp.close()
        for leftover in (self._tmp.name, self.local_path):
            with suppress(FileNotFoundError):
                os.unlink(leftover)
