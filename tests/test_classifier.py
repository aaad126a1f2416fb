from __future__ import annotations

import unittest

from askshell.shell.classifier import (
    Directive,
    InputClassifier,
    LiteralShell,
    NaturalLanguage,
)


class InputClassifierTests(unittest.TestCase):
    def setUp(self) -> None:
        self.classifier = InputClassifier()

    def test_blank_input_is_nothing(self) -> None:
        self.assertIsNone(self.classifier.classify(""))
        self.assertIsNone(self.classifier.classify("   \t "))

    def test_named_directives(self) -> None:
        self.assertEqual(self.classifier.classify("!help"), Directive("help"))
        self.assertEqual(self.classifier.classify("!model"), Directive("model"))
        self.assertEqual(self.classifier.classify("!model  llama3:8b "), Directive("model", "llama3:8b"))
        self.assertEqual(
            self.classifier.classify("!explain tar -xzf a.tgz"),
            Directive("explain", "tar -xzf a.tgz"),
        )
        self.assertEqual(self.classifier.classify("!explain"), Directive("help", "explain"))

    def test_other_bang_input_is_a_bypass_run(self) -> None:
        self.assertEqual(self.classifier.classify("!ls -la"), Directive("run", "ls -la"))
        self.assertEqual(self.classifier.classify("!helpme"), Directive("run", "helpme"))
        self.assertEqual(self.classifier.classify("!help foo"), Directive("run", "help foo"))
        self.assertEqual(self.classifier.classify("!"), Directive("run", ""))

    def test_question_mark_explains(self) -> None:
        self.assertEqual(self.classifier.classify("?"), Directive("explain", ""))
        self.assertEqual(self.classifier.classify("? du -sh *"), Directive("explain", "du -sh *"))
        self.assertEqual(self.classifier.classify("?grep -rn x"), Directive("explain", "grep -rn x"))

    def test_shell_commands(self) -> None:
        for text in [
            "ls",
            "pwd",
            "ls -la",
            "git status",
            "cd /tmp",
            "echo hi",
            "python3 -m venv .venv",
            "./run.sh",
            "/usr/bin/env",
            "~/bin/tool",
            "$HOME",
            "docker ps",
        ]:
            with self.subTest(text=text):
                self.assertEqual(self.classifier.classify(text), LiteralShell(text))

    def test_leading_whitespace_is_ignored(self) -> None:
        self.assertEqual(self.classifier.classify("   ls -la  "), LiteralShell("ls -la"))

    def test_natural_language(self) -> None:
        for text in [
            "list all files",
            "show me disk usage",
            "find large files in downloads",
            "what's my ip",
            "cd",
            "lsof",
        ]:
            with self.subTest(text=text):
                self.assertEqual(self.classifier.classify(text), NaturalLanguage(text))

    def test_sigils_never_reach_the_translator(self) -> None:
        bodies = ["", "help", "model x", "list all files", "  spaced  ", "!", "?", "cd /tmp"]
        for sigil in ["!", "?"]:
            for body in bodies:
                with self.subTest(text=sigil + body):
                    result = self.classifier.classify(sigil + body)
                    self.assertIsInstance(result, Directive)

    def test_every_known_bare_command_is_literal(self) -> None:
        for command in self.classifier.known_commands:
            with self.subTest(command=command):
                self.assertEqual(self.classifier.classify(command), LiteralShell(command))

    def test_bare_command_must_match_exactly(self) -> None:
        self.assertTrue(self.classifier.is_shell_command("grep"))
        self.assertFalse(self.classifier.is_shell_command("grepx"))


if __name__ == "__main__":
    unittest.main()
