"""Unit tests for the command-line interface."""

import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest import mock

from cmdlex.commands import check_file, invocation_line, main
from cmdlex.sample import DEFAULT_SCHEMA


class TestCommands(unittest.TestCase):
    """Test the CLI handlers."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def write(self, name: str, content: str) -> str:
        path = os.path.join(self.tmpdir.name, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def run_main(self, *argv: str) -> tuple[str, str]:
        stdout = io.StringIO()
        stderr = io.StringIO()
        with mock.patch("sys.argv", ["cmdlex", *argv]), redirect_stdout(stdout), redirect_stderr(stderr):
            main()
        return stdout.getvalue(), stderr.getvalue()

    def test_invocation_line(self):
        """Test rebuilding a command line from arguments."""
        self.assertEqual('Convert -File "my photo.jpg"', invocation_line(["Convert", "-File", "my photo.jpg"]))
        self.assertEqual("", invocation_line([]))

    def test_invocation_line_defaults_to_argv(self):
        """Test that the process arguments are used by default."""
        with mock.patch("sys.argv", ["prog", "-Num", "4"]):
            self.assertEqual("-Num 4", invocation_line())

    def test_tokens_json(self):
        """Test printing tokens as JSON lines."""
        stdout, _ = self.run_main("tokens", "--json", "-c", 'Command -option2 "-notanoption.jpg"')
        rows = [json.loads(line) for line in stdout.splitlines()]
        self.assertEqual(
            [
                {"text": "Command", "option": False, "quoted": False},
                {"text": "-option2", "option": True, "quoted": False},
                {"text": "-notanoption.jpg", "option": False, "quoted": True},
            ],
            rows,
        )

    def test_tokens_table(self):
        """Test printing tokens as a table."""
        stdout, _ = self.run_main("tokens", "-c", 'Command -File "a [b].jpg"')
        self.assertIn("Command", stdout)
        self.assertIn("-File", stdout)
        self.assertIn("a [b].jpg", stdout)
        self.assertIn("option", stdout)
        self.assertIn("value", stdout)
        self.assertIn("yes", stdout)

    def test_tokens_empty_line(self):
        """Test the tokens command on an empty line."""
        stdout, _ = self.run_main("tokens", "-c", "   ")
        self.assertIn("Empty command line", stdout)

    def test_sample_output(self):
        """Test printing a successfully parsed command line."""
        stdout, stderr = self.run_main("sample", "-c", 'Convert -Num 4 -Name "[thumb]"')
        lines = stdout.splitlines()
        self.assertEqual(3, len(lines))
        self.assertIn("command  Convert", lines[0])
        self.assertIn("-Num     4", lines[1])
        self.assertIn("-Name    '[thumb]'", lines[2])
        self.assertEqual("", stderr)

    def test_version(self):
        """Test the version command."""
        stdout, _ = self.run_main("version")
        self.assertEqual("1.0", stdout.strip())

    def test_sample_error_exits(self):
        """Test that a parse error exits with status 1."""
        with self.assertRaises(SystemExit) as ctx:
            self.run_main("sample", "-c", "Convert -Num four")
        self.assertEqual(1, ctx.exception.code)

    def test_check_file(self):
        """Test checking a file of command lines."""
        path = self.write(
            "lines.txt",
            "# sample lines\n"
            'Convert -File "a b.jpg" -Num 2\n'
            "\n"
            "Convert -Num two\n"
            "Convert -Bogus\n",
        )
        checked, errors = check_file(path, DEFAULT_SCHEMA)
        self.assertEqual(3, checked)
        self.assertEqual([4, 5], [error.line_num for error in errors])
        self.assertEqual(
            'TypeMismatch: Following Option "-Num" Expected integer; found "two".',
            errors[0].message,
        )
        self.assertTrue(errors[1].message.startswith("UnexpectedArgument: "))

    def test_check_reports_errors(self):
        """Test that the check command prints each error and exits with status 1."""
        path = self.write("lines.txt", "Convert -File\n")
        stderr = io.StringIO()
        with self.assertRaises(SystemExit) as ctx:
            with mock.patch("sys.argv", ["cmdlex", "check", path]), redirect_stderr(stderr):
                main()
        self.assertEqual(1, ctx.exception.code)
        self.assertIn(f"{path}:1: error.MissingValue: ", stderr.getvalue())

    def test_check_with_schema(self):
        """Test checking a file against a schema file."""
        schema = self.write("schema.toml", '[options]\n"-Verbose" = "flag"\n')
        path = self.write("lines.txt", "Run -Verbose\n")
        stdout = io.StringIO()
        with mock.patch("sys.argv", ["cmdlex", "check", "-s", schema, path]), redirect_stdout(stdout):
            main()
        self.assertIn("1 command lines OK", stdout.getvalue())


if __name__ == "__main__":
    unittest.main()
