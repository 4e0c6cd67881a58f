""" Tests tableaupublic.script """

import os
import io
import tempfile
import unittest
import urllib.error
from contextlib import redirect_stdout
from unittest import mock
from tableaupublic import script
from tableaupublic.workbooks import (
    Workbook, WorkbookNotFoundError, ListingError)
from tableau_responses import TruncatedResponse, workbook_file

WORKBOOKS = [
    Workbook('Sales', size=10, title='Sales'),
    Workbook('Marketing', size=20, title='Marketing'),
    Workbook('Gone', size=30, title='Gone')]

def fake_download(repo_url, directory, timeout=None):
    """ Writes an empty workbook unless `repo_url` is 'Gone'. """
    if repo_url == 'Gone':
        raise WorkbookNotFoundError(repo_url, 'text/html')
    filename = os.path.join(directory, repo_url + '.twb')
    with open(filename, 'wb'):
        pass
    return filename

class TestScript(unittest.TestCase):
    """ Tests `tableaupublic.script.main` """

    def setUp(self) -> None:
        self._tempdir = tempfile.TemporaryDirectory()
        self.directory = self._tempdir.name
        return super().setUp()

    def tearDown(self) -> None:
        self._tempdir.cleanup()
        return super().tearDown()

    def run_script(self, *argv) -> tuple[int, str]:
        """ Runs the script with `argv`; returns its status and output. """
        output = io.StringIO()
        with redirect_stdout(output):
            status = script.main(list(argv))
        return status, output.getvalue()

    @mock.patch('tableaupublic.script.all_workbooks')
    def test_list(self, all_workbooks):
        """ Tests that `--list` prints workbooks without downloading. """
        all_workbooks.return_value = WORKBOOKS
        with mock.patch(
                'tableaupublic.script.download_workbook_file') as download:
            status, output = self.run_script('-u', 'alice', '--list', '-q')
        self.assertEqual(status, 0)
        download.assert_not_called()
        self.assertEqual(
            output.splitlines(),
            ['Sales\t10\tSales', 'Marketing\t20\tMarketing', 'Gone\t30\tGone'])
        self.assertEqual(all_workbooks.call_args.args, ('alice',))

    @mock.patch(
        'tableaupublic.script.download_workbook_file',
        side_effect=fake_download)
    @mock.patch('tableaupublic.script.all_workbooks', return_value=WORKBOOKS)
    def test_download_skips_missing(self, all_workbooks, download):
        """ Tests that missing workbooks are skipped with a warning. """
        with self.assertWarns(UserWarning):
            status, _ = self.run_script(
                '-u', 'alice', '-d', self.directory, '-t', '3')
        self.assertEqual(status, 1)
        self.assertEqual(
            sorted(os.listdir(self.directory)),
            ['Marketing.twb', 'Sales.twb'])
        self.assertEqual(download.call_count, 3)
        self.assertEqual(download.call_args.kwargs['timeout'], 3.0)

    @mock.patch(
        'tableaupublic.script.download_workbook_file',
        side_effect=fake_download)
    @mock.patch(
        'tableaupublic.script.all_workbooks', return_value=WORKBOOKS[:2])
    def test_download_creates_directory(self, all_workbooks, download):
        """ Tests that the destination directory is created. """
        directory = os.path.join(self.directory, 'backup')
        status, output = self.run_script('-u', 'alice', '-d', directory)
        self.assertEqual(status, 0)
        self.assertEqual(
            sorted(os.listdir(directory)), ['Marketing.twb', 'Sales.twb'])
        self.assertIn('2 workbooks found for alice', output)

    @mock.patch(
        'tableaupublic.script.download_workbook_file',
        side_effect=urllib.error.URLError('connection refused'))
    @mock.patch(
        'tableaupublic.script.all_workbooks', return_value=WORKBOOKS[:1])
    def test_download_network_error(self, all_workbooks, download):
        """ Tests that failed downloads are reported, not raised. """
        with self.assertWarns(UserWarning):
            status, _ = self.run_script('-u', 'alice', '-d', self.directory)
        self.assertEqual(status, 1)

    @mock.patch('urllib.request.urlopen')
    def test_download_truncated_keeps_going(self, urlopen):
        """ Tests that a download cut short doesn't stop the others. """
        urlopen.side_effect = [
            TruncatedResponse(b'', {'Content-Type': 'application/x-twb'}),
            workbook_file()]
        workbooks = [Workbook('A', title='A'), Workbook('B', title='B')]
        with self.assertWarns(UserWarning):
            filenames = script.download_workbooks(
                workbooks, self.directory, verbose=False)
        self.assertEqual(filenames, [os.path.join(self.directory, 'B.twb')])
        self.assertEqual(os.listdir(self.directory), ['B.twb'])
        self.assertEqual(urlopen.call_count, 2)

    @mock.patch('urllib.request.urlopen')
    def test_download_unsafe_repo_url_skipped(self, urlopen):
        """ Tests that a workbook id that isn't a filename is skipped. """
        urlopen.return_value = workbook_file()
        workbooks = [Workbook('../escaped'), Workbook('B')]
        with self.assertWarns(UserWarning):
            filenames = script.download_workbooks(
                workbooks, self.directory, verbose=False)
        self.assertEqual(filenames, [os.path.join(self.directory, 'B.twb')])
        self.assertEqual(urlopen.call_count, 1)

    @mock.patch('tableaupublic.script.all_workbooks')
    def test_partial_listing(self, all_workbooks):
        """ Tests that a partial listing is still used. """
        error = ListingError('alice', WORKBOOKS[:1], OSError('timed out'))
        all_workbooks.side_effect = error
        with self.assertWarns(UserWarning):
            status, output = self.run_script('-u', 'alice', '-l', '-q')
        self.assertEqual(status, 1)
        self.assertEqual(output.splitlines(), ['Sales\t10\tSales'])

    @mock.patch('tableaupublic.script.all_workbooks', return_value=[])
    def test_username_from_environment(self, all_workbooks):
        """ Tests that the username defaults to the environment. """
        with mock.patch.dict(os.environ, {'TABLEAUPUBLICUSERNAME': 'bob'}):
            status, _ = self.run_script('--list', '-q')
        self.assertEqual(status, 0)
        self.assertEqual(all_workbooks.call_args.args, ('bob',))

    @mock.patch('tableaupublic.script.all_workbooks', return_value=[])
    def test_username_prompt(self, all_workbooks):
        """ Tests that the user is asked for a username if none is given. """
        environ = {
            key: value for key, value in os.environ.items()
            if key != 'TABLEAUPUBLICUSERNAME'}
        with mock.patch.dict(os.environ, environ, clear=True), \
                mock.patch('builtins.input', return_value='carol'):
            self.run_script('--list', '-q')
        self.assertEqual(all_workbooks.call_args.args, ('carol',))

if __name__ == '__main__':
    unittest.TextTestRunner().run(
        unittest.TestLoader().loadTestsFromName(__name__))
