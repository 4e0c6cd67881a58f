""" Download every workbook a user has published to Tableau Public. """

import sys
import os
import warnings
import argparse
import http.client
from tableaupublic.workbooks import (
    DEFAULT_TIMEOUT, ListingError, TableauPublicError, all_workbooks,
    download_workbook_file, is_not_found)

DEFAULT_DIRECTORY = '.'

def get_parser():
    """ Returns the parser for this script's command-line arguments. """
    parser = argparse.ArgumentParser(
        # Use module docstring as description:
        description=sys.modules[__name__].__doc__)
    # The username is also passable via environment variable:
    parser.add_argument(
        '-u', '--username', '--user', type=str, required=False,
        help='Tableau Public profile name', dest='username',
        metavar='username', default=os.environ.get('TABLEAUPUBLICUSERNAME'))
    parser.add_argument(
        '-d', '--directory', '--dir', type=str, required=False,
        help='directory to save workbooks to', dest='directory',
        metavar='directory', default=DEFAULT_DIRECTORY)
    parser.add_argument(
        '-t', '--timeout', type=float, required=False,
        help='seconds to wait on each request', dest='timeout',
        metavar='seconds', default=DEFAULT_TIMEOUT)
    parser.add_argument(
        '-l', '--list', action='store_true', dest='list_only',
        help="list the user's workbooks without downloading them")
    parser.add_argument(
        '-q', '--quiet', action='store_false', dest='verbose',
        help="don't print status messages")
    return parser

def list_workbooks(username, timeout=DEFAULT_TIMEOUT, verbose=True):
    """ Returns `username`'s workbooks and whether the list is complete.

    If listing fails partway through, a warning is issued and whatever
    was received before the failure is returned.
    """
    try:
        workbooks = all_workbooks(username, timeout=timeout)
    except ListingError as error:
        warnings.warn(
            f'Could not list all workbooks for {username}: '
            f'{error.__cause__}')
        return error.workbooks, False
    if verbose:
        print(str(len(workbooks)) + " workbooks found for " + username)
    return workbooks, True

def download_workbooks(workbooks, directory, timeout=DEFAULT_TIMEOUT,
        verbose=True):
    """ Downloads each of `workbooks` to `directory`.

    Workbooks that can't be downloaded are skipped with a warning.

    Returns:
        list[str]: The paths of the files that were written.
    """
    filenames = []
    for workbook in workbooks:
        if verbose:
            print('\nDownloading "' + workbook.title + '"')
        try:
            filename = download_workbook_file(
                workbook.repo_url, directory, timeout=timeout)
        except TableauPublicError as error:
            if not is_not_found(error):
                raise
            warnings.warn(
                f'Workbook {workbook.repo_url} not found. Skipping.')
            continue
        except (OSError, http.client.HTTPException, ValueError) as error:
            # `OSError` includes `urllib.error.URLError`; `ValueError` is a
            # repository id that isn't a safe filename.
            warnings.warn(
                f'Could not download workbook {workbook.repo_url}: {error}')
            continue
        if verbose:
            print('Download successful. File written to ' + filename)
        filenames.append(filename)
    return filenames

def main(argv=None):
    """ Runs the script. Returns 0 on success, 1 if anything failed. """
    namespace = get_parser().parse_args(argv)
    username = namespace.username
    verbose = namespace.verbose

    # If the username wasn't passed, request it from the user:
    if username is None:
        username = input('Tableau Public username: ')

    workbooks, complete = list_workbooks(
        username, timeout=namespace.timeout, verbose=verbose)

    if namespace.list_only:
        for workbook in workbooks:
            print(f'{workbook.repo_url}\t{workbook.size}\t{workbook.title}')
        return 0 if complete else 1

    directory = os.path.expanduser(namespace.directory)  # Deal with `~`
    os.makedirs(directory, exist_ok=True)
    filenames = download_workbooks(
        workbooks, directory, timeout=namespace.timeout, verbose=verbose)
    if complete and len(filenames) == len(workbooks):
        return 0
    return 1

if __name__ == '__main__':
    sys.exit(main())
