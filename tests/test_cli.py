"""
Tests for the malread command line.
"""

import io
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest import mock

from malreader.cli import _main, create_parser, split_shorthand_files


class CliTestCase(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self.config = self.write_file(".malrc", "{:history-file nil}")

    def write_file(self, name, content):
        path = os.path.join(self.tmpdir.name, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def run_main(self, *argv):
        """Run the CLI with the test config, returning (status, stdout, stderr)."""
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            status = _main(["--config", self.config] + list(argv))
        return status, out.getvalue(), err.getvalue()


class TestParser(unittest.TestCase):
    def test_subcommands(self):
        parser = create_parser()
        args = parser.parse_args(["check", "a.mal", "b.mal"])
        self.assertEqual(args.subcommand, "check")
        self.assertEqual(args.files, ["a.mal", "b.mal"])

    def test_flags(self):
        args = create_parser().parse_args(["-c", "(a)", "-i", "--pretty", "-v"])
        self.assertEqual(args.command, "(a)")
        self.assertTrue(args.interactive)
        self.assertTrue(args.pretty)
        self.assertTrue(args.verbose)


class TestCommands(CliTestCase):
    def test_command_flag(self):
        status, out, _ = self.run_main("-c", "'a [1, 2]")
        self.assertEqual(status, 0)
        self.assertEqual(out, "(quote a)\n[1 2]\n")

    def test_command_flag_error(self):
        status, out, err = self.run_main("-c", "(a b]")
        self.assertEqual(status, 1)
        self.assertEqual(out, "")
        self.assertIn("<string>:1", err)
        self.assertIn("^", err)

    def test_read_file(self):
        path = self.write_file("core.mal", "(def! x 1) ; one\n{:a \"b\"}\n")
        status, out, _ = self.run_main("read", path)
        self.assertEqual(status, 0)
        self.assertEqual(out, '(def! x 1)\n{:a "b"}\n')

    def test_file_shorthand(self):
        path = self.write_file("core.mal", "@a")
        out = io.StringIO()
        with redirect_stdout(out):
            status = _main([path, "--config", self.config])
        out = out.getvalue()
        self.assertEqual(status, 0)
        self.assertEqual(out, "(deref a)\n")

    def test_file_shorthand_several_files_and_flags(self):
        first = self.write_file("a.mal", "(a)")
        second = self.write_file("b.mal", "[b]")
        status, out, _ = self.run_main("--pretty", first, second)
        self.assertEqual(status, 0)
        self.assertEqual(out, "(a)\n[b]\n")

    def test_file_shorthand_with_interactive_after_files(self):
        first = self.write_file("a.mal", "x")
        with mock.patch("malreader.repl.create_repl") as create:
            status, out, _ = self.run_main(first, "-i")
        self.assertEqual(status, 0)
        self.assertEqual(out, "x\n")
        create.return_value.run.assert_called_once()

    def test_split_shorthand_files(self):
        self.assertEqual(
            split_shorthand_files(["-v", "a.mal", "--log", "out.log", "b.mal"]),
            (["-v", "--log", "out.log"], ["a.mal", "b.mal"]),
        )
        self.assertEqual(
            split_shorthand_files(["-c", "check", "-i"]), (["-c", "check", "-i"], [])
        )
        argv = ["--pretty", "check", "a.mal"]
        self.assertEqual(split_shorthand_files(argv), (argv, []))

    def test_read_deeply_nested_file(self):
        src = "(" * 5000 + "x" + ")" * 5000
        path = self.write_file("deep.mal", src)
        status, out, _ = self.run_main("read", path)
        self.assertEqual(status, 0)
        self.assertEqual(out, src + "\n")

    def test_command_deeply_nested_pretty(self):
        src = "[" * 5000 + "]" * 5000
        status, out, _ = self.run_main("--pretty", "-c", src)
        self.assertEqual(status, 0)
        self.assertEqual(out, src + "\n")

    def test_read_prints_forms_before_error(self):
        path = self.write_file("bad.mal", "(ok)\n(broken")
        status, out, err = self.run_main("read", path)
        self.assertEqual(status, 1)
        self.assertEqual(out, "(ok)\n")
        self.assertIn("bad.mal:2", err)

    def test_read_missing_file(self):
        status, _, err = self.run_main("read", os.path.join(self.tmpdir.name, "none.mal"))
        self.assertEqual(status, 1)
        self.assertIn("cannot read", err)

    def test_check(self):
        good = self.write_file("good.mal", "(a) (b)")
        bad = self.write_file("bad.mal", "{:a 1")
        status, out, err = self.run_main("check", good, bad)
        self.assertEqual(status, 1)
        self.assertIn(f"{good}: ok (2 forms)", out)
        self.assertIn("bad.mal", err)

    def test_check_all_good(self):
        good = self.write_file("good.mal", "")
        status, out, _ = self.run_main("check", good)
        self.assertEqual(status, 0)
        self.assertIn("ok (0 forms)", out)

    def test_pretty(self):
        code = "(defn " + " ".join(f"arg{i}" for i in range(20)) + ")"
        status, out, _ = self.run_main("--pretty", "-c", code)
        self.assertEqual(status, 0)
        self.assertTrue(out.startswith("(defn\n  arg0\n"))

    def test_bad_config(self):
        self.config = self.write_file("bad.malrc", "{:pretty 1}")
        status, _, err = self.run_main("-c", "a")
        self.assertEqual(status, 1)
        self.assertIn("Error in config", err)


class TestReplLaunch(CliTestCase):
    def test_no_arguments_starts_repl(self):
        with mock.patch("malreader.repl.create_repl") as create:
            status, _, _ = self.run_main()
        self.assertEqual(status, 0)
        create.assert_called_once()
        create.return_value.run.assert_called_once()

    def test_interactive_after_command(self):
        with mock.patch("malreader.repl.create_repl") as create:
            status, out, _ = self.run_main("-c", "x", "-i")
        self.assertEqual(status, 0)
        self.assertEqual(out, "x\n")
        create.return_value.run.assert_called_once()

    def test_repl_subcommand_reads_input(self):
        with mock.patch("builtins.input", side_effect=["(a", "b)", EOFError()]):
            status, out, _ = self.run_main("repl")
        self.assertEqual(status, 0)
        self.assertIn("(a b)", out)


if __name__ == "__main__":
    unittest.main()
