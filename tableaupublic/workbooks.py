""" Functions for listing and downloading workbooks from Tableau Public.

Tableau Public does not document its API, but it exposes two endpoints
that are enough for backing up a user's workbooks:

- `profile/api/{username}/workbooks` returns a page of JSON metadata
  for a user's workbooks, and
- `workbooks/{repo_url}?format=twb` returns the workbook file itself.

Network access goes through `urllib.request.urlopen`. Errors are never
logged or retried here; they are raised to the caller.
"""

from dataclasses import dataclass
import http.client
import json
import os
import shutil
import time
import urllib.error
import urllib.parse
import urllib.request
from typing import Iterator

TABLEAU_PUBLIC_URL = 'https://public.tableau.com/'
LIST_URL = "{base_url}profile/api/{username}/workbooks?no_cache={no_cache}&index={index}&count={count}"
DOWNLOAD_URL = "{base_url}workbooks/{repo_url}?format=twb"

PAGE_SIZE = 20  # Number of workbooks requested per page
DEFAULT_TIMEOUT = 60  # Seconds to wait on the server; `None` waits forever

# Packaged workbooks (.twbx) are served with the same content type as
# plain workbooks (.twb); only the disposition filename tells them apart.
WORKBOOK_CONTENT_TYPE = 'application/x-twb'
TWB_EXTENSION = '.twb'
TWBX_EXTENSION = '.twbx'

class TableauPublicError(Exception):
    """ Base class for errors raised by this package. """

class WorkbookNotFoundError(TableauPublicError):
    """ Raised when a workbook download doesn't return a workbook file. """

    def __init__(self, repo_url: str, content_type: str=None):
        super().__init__(
            f'workbook not found: {repo_url} (content type {content_type!r})')
        self.repo_url = repo_url
        self.content_type = content_type

class ListingError(TableauPublicError):
    """ Raised when listing a user's workbooks fails partway through.

    Attributes:
        username (str): The user whose workbooks were being listed.
        workbooks (list[Workbook]): Every workbook received before the
            failure, in the order the server returned them. May be empty.

    The underlying network or decoding error is available as
    `__cause__`.
    """

    def __init__(self, username: str, workbooks: list, cause: Exception):
        super().__init__(
            f'could not list workbooks for {username} after '
            f'{len(workbooks)} workbooks: {cause}')
        self.username = username
        self.workbooks = workbooks

def is_not_found(error: Exception) -> bool:
    """ Returns True if `error` means the requested workbook doesn't exist. """
    return isinstance(error, WorkbookNotFoundError)

@dataclass(frozen=True)
class Workbook:
    """ Metadata for a workbook published to Tableau Public. """
    repo_url: str  # required; identifies the workbook
    size: int = 0
    title: str = ''
    description: str = ''
    show_in_profile: bool = False
    allow_data_access: bool = False

    @classmethod
    def from_json(cls, obj: dict) -> 'Workbook':
        """ Builds a Workbook from one object of a listing response.

        Missing and null fields both become zero values. Fields of the
        wrong JSON type are rejected rather than converted.

        Raises:
            ValueError: `obj` isn't an object, has no `workbookRepoUrl`,
                or has a field of the wrong type.
        """
        if not isinstance(obj, dict):
            raise ValueError(f'expected a workbook object, got {obj!r}')
        repo_url = _get_field(obj, 'workbookRepoUrl', str, '')
        if not repo_url:
            raise ValueError(f'workbook has no workbookRepoUrl: {obj!r}')
        return cls(
            repo_url=repo_url,
            size=_get_field(obj, 'size', int, 0),
            title=_get_field(obj, 'title', str, ''),
            description=_get_field(obj, 'description', str, ''),
            show_in_profile=_get_field(obj, 'showInProfile', bool, False),
            allow_data_access=_get_field(obj, 'allowDataAccess', bool, False))

def _get_field(obj: dict, name: str, type_: type, default):
    """ Returns `obj[name]`, or `default` if it's missing or null.

    Raises:
        ValueError: The value isn't a `type_`.
    """
    value = obj.get(name)
    if value is None:
        return default
    # `bool` is a subclass of `int`, but `true` is not a valid size:
    if not isinstance(value, type_) or (
            type_ is not bool and isinstance(value, bool)):
        raise ValueError(
            f'expected {name} to be {type_.__name__}, got {value!r}')
    return value

def _check_repo_url(repo_url: str):
    """ Raises ValueError if `repo_url` can't be used as a filename. """
    separators = {'/', os.sep, os.altsep} - {None}
    if (not repo_url or repo_url in ('.', '..')
            or any(sep in repo_url for sep in separators)):
        raise ValueError(f'not a valid workbook id: {repo_url!r}')

def get_workbook_page(
        username: str, index: int=0, count: int=PAGE_SIZE,
        timeout: float=DEFAULT_TIMEOUT,
        base_url: str=TABLEAU_PUBLIC_URL) -> list[Workbook]:
    """ Fetches one page of `username`'s workbooks, starting at `index`.

    Raises:
        urllib.error.URLError: The request failed.
        ValueError: The response isn't a JSON array of workbooks.
            (This includes `json.JSONDecodeError`.)
    """
    url = LIST_URL.format(
        base_url=base_url,
        username=urllib.parse.quote(username, safe=''),
        # The timestamp stops caches between us and the server from
        # serving a stale page:
        no_cache=int(time.time()),
        index=index,
        count=count)
    req = urllib.request.Request(url, headers={'Accept': 'application/json'})
    with urllib.request.urlopen(req, timeout=timeout) as response:
        page = json.load(response)
    if not isinstance(page, list):
        raise ValueError(f'expected a list of workbooks, got {page!r}')
    return [Workbook.from_json(obj) for obj in page]

def iter_workbook_pages(
        username: str, count: int=PAGE_SIZE, timeout: float=DEFAULT_TIMEOUT,
        base_url: str=TABLEAU_PUBLIC_URL) -> Iterator[list[Workbook]]:
    """ Yields each page of `username`'s workbooks until none are left.

    Errors from `get_workbook_page` are raised as-is and end iteration.
    """
    index = 0
    while True:
        page = get_workbook_page(
            username, index=index, count=count, timeout=timeout,
            base_url=base_url)
        yield page
        # A short page is the server's way of saying there's no more:
        if len(page) < count:
            return
        # Advance by what was actually received, in case the server
        # returned a different number of workbooks than we asked for:
        index += len(page)

def all_workbooks(
        username: str, timeout: float=DEFAULT_TIMEOUT, count: int=PAGE_SIZE,
        base_url: str=TABLEAU_PUBLIC_URL) -> list[Workbook]:
    """ Gets a list of all workbooks published by `username`.

    Arguments:
        username (str): A Tableau Public profile name. Not validated.
        timeout (float): Seconds to wait on each request. `None` waits
            indefinitely. Defaults to `DEFAULT_TIMEOUT`.
        count (int): The number of workbooks to request per page.
            Defaults to `PAGE_SIZE`.
        base_url (str): The root URL of the server. Defaults to
            `TABLEAU_PUBLIC_URL`.

    Returns:
        list[Workbook]: The user's workbooks, in the server's order.

    Raises:
        ListingError: A page couldn't be fetched or decoded. The
            workbooks received before the failure are available via
            `ListingError.workbooks`.
    """
    workbooks = []
    pages = iter_workbook_pages(
        username, count=count, timeout=timeout, base_url=base_url)
    try:
        for page in pages:
            workbooks.extend(page)
    except (OSError, http.client.HTTPException, ValueError) as error:
        # `urllib.error.URLError` and socket timeouts are both `OSError`s;
        # `json.JSONDecodeError` is a `ValueError`.
        raise ListingError(username, workbooks, error) from error
    return workbooks

def _is_workbook(headers) -> bool:
    """ Returns True if `headers` describe a workbook file. """
    content_type = headers.get('Content-Type') or ''
    return content_type.strip().lower() == WORKBOOK_CONTENT_TYPE

def _get_extension(headers) -> str:
    """ Returns the file extension for the workbook described by `headers`. """
    disposition = headers.get('Content-Disposition') or ''
    if TWBX_EXTENSION in disposition.lower():
        return TWBX_EXTENSION
    return TWB_EXTENSION

def download_workbook_file(
        repo_url: str, directory: str, timeout: float=DEFAULT_TIMEOUT,
        base_url: str=TABLEAU_PUBLIC_URL) -> str:
    """ Downloads the workbook `repo_url` into `directory`.

    The file is named `repo_url` plus a `.twb` or `.twbx` extension,
    depending on the type of file the server sends. Any existing file
    with that name is overwritten.

    Arguments:
        repo_url (str): The workbook's repository identifier, i.e.
            `Workbook.repo_url`.
        directory (str): An existing, writable directory.
        timeout (float): Seconds to wait on the server. `None` waits
            indefinitely. Defaults to `DEFAULT_TIMEOUT`.
        base_url (str): The root URL of the server. Defaults to
            `TABLEAU_PUBLIC_URL`.

    Returns:
        str: The path of the downloaded file.

    Raises:
        WorkbookNotFoundError: The server didn't send a workbook file.
            No file is written in this case.
        urllib.error.URLError: The request failed.
        http.client.HTTPException: The response was malformed or cut
            short (e.g. `http.client.IncompleteRead`).
        OSError: The file couldn't be created or written.
        ValueError: `repo_url` would name a file outside `directory`.
            Nothing is requested in this case.
    """
    _check_repo_url(repo_url)
    url = DOWNLOAD_URL.format(
        base_url=base_url, repo_url=urllib.parse.quote(repo_url, safe=''))
    try:
        response = urllib.request.urlopen(url, timeout=timeout)
    except urllib.error.HTTPError as error:
        # Missing workbooks come back as error pages rather than files:
        error.close()
        if not _is_workbook(error.headers):
            raise WorkbookNotFoundError(
                repo_url, error.headers.get('Content-Type')) from error
        raise
    with response:
        if not _is_workbook(response.headers):
            raise WorkbookNotFoundError(
                repo_url, response.headers.get('Content-Type'))
        filename = os.path.join(
            directory, repo_url + _get_extension(response.headers))
        with open(filename, 'wb') as file:  # binary; .twbx files are zipped
            try:
                shutil.copyfileobj(response, file)
            except BaseException:
                # Don't leave a truncated workbook on disk:
                file.close()
                os.remove(filename)
                raise
    return filename
