""" A package for backing up a user's workbooks from Tableau Public.

Tableau Public lets anyone download published workbooks, but only one
at a time and only through the website. This package talks to the
(undocumented) API behind the website instead, so that every workbook
on a profile can be listed and downloaded in one go.

The package can be run as a script via `python -m tableaupublic.script`,
but the work is done by the functions of `workbooks.py`, which are
intended to be reusable.
"""

from tableaupublic.workbooks import (
    Workbook, TableauPublicError, WorkbookNotFoundError, ListingError,
    is_not_found, all_workbooks, download_workbook_file)

__all__ = [
    'script', 'workbooks', 'Workbook', 'TableauPublicError',
    'WorkbookNotFoundError', 'ListingError', 'is_not_found',
    'all_workbooks', 'download_workbook_file']

__version__ = '0.0.1'
__author__ = 'Christopher Scott'
__copyright__ = 'Copyright (C) 2022 Christopher Scott'
__license__ = 'All rights reserved'
