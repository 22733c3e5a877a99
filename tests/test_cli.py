"""
Tests for the repobrowse command line.

Commands run through click's CliRunner against a temporary HOME with
real secret stores; only the GitHub client is mocked.
"""

import json
import os
import shutil
import tempfile
import unittest
from unittest.mock import patch, Mock

from click.testing import CliRunner

from repobrowse.cli import cli
from repobrowse.cli_utils import CommandContext
from repobrowse.config import get_default_config
from repobrowse.domain import Repository, TreeEntry, CommitSummary
from repobrowse.exit_codes import NO_REPOS_FOUND, API_ERROR, AUTH_ERROR, STORAGE_ERROR, USAGE_ERROR
from repobrowse.storage import SecretStoreError, create_secret_store, get_username


HELLO = Repository(owner="octocat", name="hello", default_branch="trunk")


class CLITestCase(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.env = patch.dict(os.environ, {'HOME': self.temp_dir})
        self.env.start()
        for key in [k for k in os.environ if k.startswith('REPOBROWSE_')]:
            del os.environ[key]

        self.config = get_default_config()
        self.store = create_secret_store(self.config)
        self.client = Mock()
        self.client.list_repositories.return_value = [HELLO]
        self.client.fetch_file_tree.return_value = (
            TreeEntry("LICENSE"), TreeEntry("README.md"), TreeEntry("src/main.py"),
        )
        self.client.fetch_file_content.side_effect = lambda owner, repo, path: f"content of {path}"
        self.client.fetch_commit_history.return_value = [CommitSummary("Mona", "Initial commit")]
        self.context = CommandContext(config=self.config, store=self.store, client=self.client)

        self.runner = CliRunner()
        self.patches = [
            patch('repobrowse.commands.auth.build_context', return_value=self.context),
            patch('repobrowse.commands.browse.build_context', return_value=self.context),
        ]
        for p in self.patches:
            p.start()

    def tearDown(self):
        for p in self.patches:
            p.stop()
        self.env.stop()
        shutil.rmtree(self.temp_dir)

    def invoke(self, *args, **kwargs):
        return self.runner.invoke(cli, list(args), **kwargs)

    def login(self):
        self.store.save("ghp_test")


class TestLogin(CLITestCase):

    def test_login_verifies_and_stores_token(self):
        self.client.get_authenticated_user.return_value = "octocat"

        result = self.invoke('login', '--token', 'ghp_new')

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Logged in as octocat.", result.output)
        self.assertEqual(self.store.get(), "ghp_new")
        self.assertEqual(get_username(self.config), "octocat")
        self.client.get_authenticated_user.assert_called_once_with(token="ghp_new")

    def test_login_prompts_for_token(self):
        result = self.invoke('login', '--no-verify', input="ghp_prompted\n")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(self.store.get(), "ghp_prompted")
        self.assertIn("Token saved.", result.output)

    def test_rejected_token_is_not_stored(self):
        self.client.get_authenticated_user.return_value = None

        result = self.invoke('login', '--token', 'ghp_bad')

        self.assertEqual(result.exit_code, AUTH_ERROR)
        self.assertIsNone(self.store.get())

    def test_empty_token(self):
        result = self.invoke('login', '--token', '   ')
        self.assertEqual(result.exit_code, USAGE_ERROR)

    def test_username_skips_verification(self):
        result = self.invoke('login', '--token', 'ghp_x', '--username', 'mona')

        self.assertEqual(result.exit_code, 0, result.output)
        self.client.get_authenticated_user.assert_not_called()
        self.assertEqual(get_username(self.config), "mona")

    def test_corrupt_username_file_keeps_login(self):
        store_path = os.path.join(self.temp_dir, '.repobrowse', 'store.json')
        os.makedirs(os.path.dirname(store_path), exist_ok=True)
        with open(store_path, 'w') as f:
            f.write('{not json')

        result = self.invoke('login', '--token', 'ghp_x', '--username', 'mona')

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("username could not be recorded", result.output)
        self.assertEqual(self.store.get(), "ghp_x")

    def test_storage_failure(self):
        self.context.store = Mock()
        self.context.store.save.side_effect = SecretStoreError("disk full; read-only")

        result = self.invoke('login', '--token', 'ghp_x', '--no-verify')

        self.assertEqual(result.exit_code, STORAGE_ERROR)


class TestLogoutAndWhoami(CLITestCase):

    def test_whoami_requires_login(self):
        result = self.invoke('whoami')
        self.assertEqual(result.exit_code, AUTH_ERROR)

    def test_whoami_without_username(self):
        self.login()
        result = self.invoke('whoami')
        self.assertEqual(result.exit_code, 0)
        self.assertIn("username unknown", result.output)

    def test_logout(self):
        self.invoke('login', '--token', 'ghp_x', '--username', 'mona')

        result = self.invoke('logout')

        self.assertEqual(result.exit_code, 0)
        self.assertIsNone(self.store.get())
        self.assertIsNone(get_username(self.config))


class TestRepos(CLITestCase):

    def test_requires_login(self):
        result = self.invoke('repos')
        self.assertEqual(result.exit_code, AUTH_ERROR)
        self.client.list_repositories.assert_not_called()

    def test_jsonl_output(self):
        self.login()
        result = self.invoke('repos', '--json')

        self.assertEqual(result.exit_code, 0, result.output)
        lines = [json.loads(line) for line in result.output.strip().splitlines()]
        self.assertEqual(lines[0]['name'], "hello")
        self.assertEqual(lines[0]['default_branch'], "trunk")

    def test_table_output(self):
        self.login()
        result = self.invoke('repos')
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("octocat/hello", result.output)

    def test_no_repositories(self):
        self.login()
        self.client.list_repositories.return_value = []
        result = self.invoke('repos')
        self.assertEqual(result.exit_code, NO_REPOS_FOUND)


class TestTree(CLITestCase):

    def test_lists_files_at_default_branch(self):
        self.login()
        result = self.invoke('tree', 'octocat/hello', '--json')

        self.assertEqual(result.exit_code, 0, result.output)
        paths = [json.loads(line)['path'] for line in result.output.strip().splitlines()]
        self.assertEqual(paths, ["LICENSE", "README.md", "src/main.py"])
        self.client.fetch_file_tree.assert_called_once_with("octocat", "hello", "trunk")
        self.client.fetch_file_content.assert_not_called()

    def test_filter(self):
        self.login()
        result = self.invoke('tree', 'octocat/hello', '--filter', 'SRC', '--json')

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(json.loads(result.output)['path'], "src/main.py")

    def test_branch_option_skips_listing(self):
        self.login()
        result = self.invoke('tree', 'octocat/hello', '--branch', 'dev')

        self.assertEqual(result.exit_code, 0, result.output)
        self.client.list_repositories.assert_not_called()
        self.client.fetch_file_tree.assert_called_once_with("octocat", "hello", "dev")

    def test_unlisted_repository_reads_head(self):
        self.login()
        self.invoke('tree', 'someone/else')
        self.client.fetch_file_tree.assert_called_once_with("someone", "else", "HEAD")

    def test_invalid_slug(self):
        self.login()
        result = self.invoke('tree', 'not-a-slug')
        self.assertEqual(result.exit_code, USAGE_ERROR)

    def test_tree_failure(self):
        self.login()
        self.client.fetch_file_tree.side_effect = RuntimeError("boom")
        result = self.invoke('tree', 'octocat/hello')
        self.assertEqual(result.exit_code, API_ERROR)


class TestShow(CLITestCase):

    def test_default_file(self):
        self.login()
        result = self.invoke('show', 'octocat/hello', '--json')

        self.assertEqual(result.exit_code, 0, result.output)
        data = json.loads(result.output)
        self.assertEqual(data['path'], "README.md")
        self.assertEqual(data['content'], "content of README.md")
        self.assertEqual(data['commits'][0]['author_name'], "Mona")

    def test_explicit_path(self):
        self.login()
        result = self.invoke('show', 'octocat/hello', 'src/main.py')

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("content of src/main.py", result.output)
        self.assertIn("Initial commit", result.output)

    def test_path_not_in_tree(self):
        self.login()
        result = self.invoke('show', 'octocat/hello', 'missing.txt')

        self.assertNotEqual(result.exit_code, 0)
        self.client.fetch_file_content.assert_not_called()

    def test_empty_repository(self):
        self.login()
        self.client.fetch_file_tree.return_value = ()
        result = self.invoke('show', 'octocat/hello')
        self.assertNotEqual(result.exit_code, 0)


class TestBrowse(CLITestCase):

    def test_login_required_exit_code(self):
        def fake_run(context):
            context.login_required = True
            return "Not logged in."

        with patch('repobrowse.tui.run_tui', side_effect=fake_run):
            result = self.invoke('browse')

        self.assertEqual(result.exit_code, AUTH_ERROR)


class TestConfigCommand(CLITestCase):

    def test_show_config(self):
        result = self.invoke('config', 'show')
        self.assertEqual(result.exit_code, 0)
        self.assertEqual(json.loads(result.output)['github']['repo_page_size'], 10)

    def test_show_path(self):
        result = self.invoke('config', 'show', '--path')
        self.assertTrue(json.loads(result.output)['config_path'].endswith('config.json'))


if __name__ == '__main__':
    unittest.main()
