"""
The capability interface every cloud backend implements.

One concrete subclass exists per backend (currently WebDAVProvider), and
it is picked when the provider is constructed.  Every operation is a
coroutine returning one result or raising one error.  Failures the
caller is expected to branch on are raised as subclasses of
cloudaccess.lib.error.CloudProviderError; anything else is a defect in
the adapter or an unexpected backend response.
"""
import logging
import os
from abc import ABC
from abc import abstractmethod
from typing import List
from typing import Optional
from typing import Union

from cloudaccess.cloudpath import CloudPath
from cloudaccess.cloudpath import SEPARATOR
from cloudaccess.items import CloudItemList
from cloudaccess.items import CloudItemMetadata
from cloudaccess.lib import error

log = logging.getLogger("cloudaccess")

PathLike = Union[CloudPath, str]
LocalPath = Union[str, "os.PathLike[str]"]


class CloudProvider(ABC):
    """
    Uniform asynchronous CRUD and metadata access to one backend.

    Paths must encode whether they denote a folder: folder paths end
    with "/".  Passing a path of the wrong shape is a programming error
    and raises ValueError.
    """

    @abstractmethod
    async def fetch_item_metadata(self, cloud_path: PathLike) -> CloudItemMetadata:
        """
        Raises:
            ItemNotFoundError, ItemTypeMismatchError, UnauthorizedError,
            NoInternetConnectionError
        """

    @abstractmethod
    async def fetch_item_list(
        self, cloud_path: PathLike, page_token: Optional[str] = None
    ) -> CloudItemList:
        """
        Raises:
            ItemNotFoundError, ItemTypeMismatchError, PageTokenInvalidError,
            UnauthorizedError, NoInternetConnectionError
        """

    @abstractmethod
    async def download_file(self, cloud_path: PathLike, local_path: LocalPath) -> None:
        """
        Raises:
            ItemNotFoundError, ItemTypeMismatchError,
            ItemAlreadyExistsError (local_path is occupied),
            UnauthorizedError, NoInternetConnectionError
        """

    @abstractmethod
    async def upload_file(
        self, local_path: LocalPath, cloud_path: PathLike, replace_existing: bool
    ) -> CloudItemMetadata:
        """
        Raises:
            ItemAlreadyExistsError, ItemTypeMismatchError,
            ParentFolderDoesNotExistError, QuotaInsufficientError,
            UnauthorizedError, NoInternetConnectionError
        """

    @abstractmethod
    async def create_folder(self, cloud_path: PathLike) -> None:
        """
        Raises:
            ItemAlreadyExistsError, ParentFolderDoesNotExistError,
            QuotaInsufficientError, UnauthorizedError,
            NoInternetConnectionError
        """

    @abstractmethod
    async def delete_item(self, cloud_path: PathLike) -> None:
        """
        Raises:
            ItemNotFoundError, ItemTypeMismatchError, UnauthorizedError,
            NoInternetConnectionError
        """

    @abstractmethod
    async def move_item(self, source: PathLike, destination: PathLike) -> None:
        """
        Raises:
            ItemNotFoundError, ItemAlreadyExistsError,
            ParentFolderDoesNotExistError, QuotaInsufficientError,
            UnauthorizedError, NoInternetConnectionError
        """

    # ==================== Typed convenience wrappers ====================

    async def delete_file(self, cloud_path: PathLike) -> None:
        cloud_path = CloudPath.objectify(cloud_path)
        _require_file_path(cloud_path)
        await self.delete_item(cloud_path)

    async def delete_folder(self, cloud_path: PathLike) -> None:
        cloud_path = CloudPath.objectify(cloud_path)
        _require_folder_path(cloud_path)
        await self.delete_item(cloud_path)

    async def move_file(self, source: PathLike, destination: PathLike) -> None:
        source = CloudPath.objectify(source)
        destination = CloudPath.objectify(destination)
        _require_file_path(source)
        _require_file_path(destination)
        await self.move_item(source, destination)

    async def move_folder(self, source: PathLike, destination: PathLike) -> None:
        source = CloudPath.objectify(source)
        destination = CloudPath.objectify(destination)
        _require_folder_path(source)
        _require_folder_path(destination)
        await self.move_item(source, destination)

    async def create_folder_with_intermediates(self, cloud_path: PathLike) -> None:
        """
        Create cloud_path and every missing folder above it.

        Folders are created one after another, from the top down, since
        each one needs its parent to exist.  A folder that already
        exists is skipped; any other error stops the chain and is
        raised unchanged.  For the root path nothing is created.
        """
        for folder in intermediate_folder_paths(CloudPath.objectify(cloud_path)):
            try:
                await self.create_folder(folder)
            except error.ItemAlreadyExistsError:
                log.debug(f"folder {folder} already exists")


def intermediate_folder_paths(cloud_path: CloudPath) -> List[CloudPath]:
    """
    The folders create_folder_with_intermediates() creates, in order.

    >>> intermediate_folder_paths(CloudPath("/Foo/Bar"))
    [CloudPath('/Foo'), CloudPath('/Foo/Bar')]
    """
    components = cloud_path.path_components
    if components[0] == SEPARATOR:
        current = CloudPath(SEPARATOR)
        names = components[1:]
    elif components == [""]:
        return []
    else:
        current = CloudPath("")
        names = components

    chain: List[CloudPath] = []
    for name in names:
        current = current.appending_path_component(name)
        chain.append(current)
    if chain:
        ## the target keeps its own spelling, i.e. a trailing slash
        chain[-1] = cloud_path
    return chain


def _require_file_path(cloud_path: CloudPath) -> None:
    if cloud_path.has_directory_path:
        raise ValueError(f"{cloud_path} denotes a folder, a file path was expected")


def _require_folder_path(cloud_path: CloudPath) -> None:
    if not cloud_path.has_directory_path:
        raise ValueError(f"{cloud_path} denotes a file, a folder path was expected")
