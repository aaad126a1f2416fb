from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from askshell.explain import build_explain_prompt, explain, strip_markdown
from askshell.project import detect_projects, format_project_info
from askshell.prompts import PromptComposer, PromptEnvironment, active_shell
from askshell.session.context import ContextWindow


class FakeGenerator:
    def __init__(self, reply: str) -> None:
        self.reply = reply
        self.calls: list[tuple[str, str]] = []

    def generate(self, model: str, prompt: str) -> str:
        self.calls.append((model, prompt))
        return self.reply


class PromptComposerTests(unittest.TestCase):
    def test_translation_prompt_includes_environment_and_history(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            env = PromptEnvironment(cwd=Path(tmp), os_name="linux", shell="/bin/zsh")
            context = ContextWindow()
            context.append("touch notes.txt", "")

            prompt = PromptComposer().translation_prompt("delete the file I just created", context, env)

        self.assertIn(f"Current directory: {tmp}", prompt)
        self.assertIn("Operating system: linux", prompt)
        self.assertIn("Shell: /bin/zsh", prompt)
        self.assertIn("1. $ touch notes.txt", prompt)
        self.assertIn("- Output ONLY the command, nothing else", prompt)
        self.assertTrue(prompt.endswith("User request: delete the file I just created"))
        self.assertNotIn("Detected project type", prompt)

    def test_empty_history_sentinel(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            env = PromptEnvironment(cwd=Path(tmp), os_name="darwin", shell="/bin/bash")
            prompt = PromptComposer().translation_prompt("list files", ContextWindow(), env)

        self.assertIn("Recent command history:\nNo previous commands.", prompt)

    def test_project_info_line(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            (Path(tmp) / "go.mod").write_text("module x\n", encoding="utf-8")
            env = PromptEnvironment(cwd=Path(tmp), os_name="linux", shell="/bin/sh")

            with_info = PromptComposer().translation_prompt("run tests", ContextWindow(), env)
            without_info = PromptComposer(include_project_info=False).translation_prompt(
                "run tests", ContextWindow(), env
            )

        self.assertIn("Shell: /bin/sh\nDetected project type(s): Go (tools: go build", with_info)
        self.assertNotIn("Detected project type", without_info)

    def test_active_shell_falls_back(self) -> None:
        with patch.dict("os.environ", {"SHELL": ""}):
            self.assertEqual(active_shell(), "/bin/sh")
        with patch.dict("os.environ", {"SHELL": "/usr/bin/fish"}):
            self.assertEqual(active_shell(), "/usr/bin/fish")


class ProjectDetectionTests(unittest.TestCase):
    def test_detects_and_deduplicates(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            for name in ["requirements.txt", "pyproject.toml", "Makefile", "app.csproj"]:
                (root / name).write_text("", encoding="utf-8")

            names = [p.name for p in detect_projects(root)]

        self.assertEqual(names, ["Python", "Make-based", ".NET"])

    def test_first_signature_wins_for_tools(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "pyproject.toml").write_text("", encoding="utf-8")
            (root / "requirements.txt").write_text("", encoding="utf-8")

            info = format_project_info(root)

        self.assertEqual(info, "Detected project type(s): Python (tools: pip, python, pytest)")

    def test_empty_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(detect_projects(Path(tmp)), [])
            self.assertEqual(format_project_info(Path(tmp)), "")


class ExplainTests(unittest.TestCase):
    def test_prompt_carries_command(self) -> None:
        prompt = build_explain_prompt("grep -rn TODO src/", os_name="linux", shell="/bin/bash")

        self.assertIn("Operating system: linux", prompt)
        self.assertTrue(prompt.endswith("Command to explain: grep -rn TODO src/"))

    def test_strip_markdown(self) -> None:
        text = "## Summary\n**Lists** files with `ls`.\n\n\n\n- -l: long format\n1. -a: all"

        self.assertEqual(
            strip_markdown(text),
            "Summary\nLists files with ls.\n\n  -l: long format\n  -a: all",
        )

    def test_explain_uses_generator(self) -> None:
        generator = FakeGenerator("**Shows** the current directory.")

        result = explain(generator, "llama3", "pwd")

        self.assertEqual(result, "Shows the current directory.")
        self.assertEqual(generator.calls[0][0], "llama3")
        self.assertIn("Command to explain: pwd", generator.calls[0][1])


if __name__ == "__main__":
    unittest.main()
