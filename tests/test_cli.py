import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock, patch

from click.testing import CliRunner

import ai_commit.cli as cli
from ai_commit.analysis.models import ChangeSet, FileChange, FileStatus
from ai_commit.cache import SuggestionCache
from ai_commit.llm.commit_message_generator import GenerationOutcome, GenerationState
from ai_commit.suggestion import Suggestion
from ai_commit.vcs.git_client import GitError, NotARepositoryError


REAL_BUILD_GENERATOR = cli.build_generator


class DummyGitClient:
    def __init__(self, root: Path):
        self.repo_root = root
        self.change_set = ChangeSet(
            files=[
                FileChange("src/api/users.ts", FileStatus.ADDED, 60, 0),
                FileChange("docs/api.md", FileStatus.MODIFIED, 3, 1),
            ]
        )
        self.commit_called = []
        self.commit_error = None

    def get_staged_changes(self):
        return self.change_set

    def get_current_branch(self):
        return "main"

    def get_recent_commits(self, limit=5):
        return ["feat: first", "fix: second"][:limit]

    def commit(self, message):
        if self.commit_error is not None:
            raise self.commit_error
        self.commit_called.append(message)


class DummyGenerator:
    def __init__(self, suggestions, fallback_reason=None):
        self.outcome = GenerationOutcome(
            suggestions=suggestions,
            states=[GenerationState.START, GenerationState.DONE],
            fallback_reason=fallback_reason,
        )
        self.calls = []

    def run(self, change_set, options=None):
        self.calls.append((change_set, options))
        return self.outcome


SUGGESTIONS = [
    Suggestion(type="feat", scope="api", subject="add users endpoint", body="- Added POST", confidence=0.85),
    Suggestion(type="fix", scope="api", subject="validate user input", confidence=0.9),
]


class CliTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.git = DummyGitClient(self.root)
        self.generator = DummyGenerator(list(SUGGESTIONS))
        self.runner = CliRunner()
        patches = [
            patch.object(cli.GitClient, "discover", return_value=self.git),
            patch.object(cli.GitClient, "find_repo_root", return_value=self.root),
            patch.object(cli, "build_generator", return_value=self.generator),
        ]
        for p in patches:
            p.start()
            self.addCleanup(p.stop)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def invoke(self, args, **kwargs):
        return self.runner.invoke(cli.main, args, **kwargs)


class TestReview(CliTestCase):
    def test_review_lists_suggestions(self) -> None:
        result = self.invoke(["review"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn("2 file(s) changed, 63 insertions(+), 1 deletions(-)", result.output)
        self.assertIn("1. feat(api): add users endpoint", result.output)
        self.assertIn("2. fix(api): validate user input", result.output)
        self.assertEqual(self.git.commit_called, [])
        cached = SuggestionCache.for_repo(self.root).lookup(self.git.change_set.summary)
        self.assertEqual(cached, SUGGESTIONS)

    def test_review_passes_options(self) -> None:
        result = self.invoke(["review", "-t", "0.3", "-m", "60", "-v", "concise", "--no-body"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        _, options = self.generator.calls[0]
        self.assertEqual(options.temperature, 0.3)
        self.assertEqual(options.max_tokens, 60)
        self.assertEqual(options.verbosity, "concise")
        self.assertFalse(options.include_body)

    def test_review_rejects_conflicting_body_flags(self) -> None:
        result = self.invoke(["review", "--include-body", "--no-body"])
        self.assertEqual(result.exit_code, 2)
        self.assertIn("cannot be used together", result.output)
        self.assertEqual(self.generator.calls, [])

    def test_review_reports_fallback(self) -> None:
        self.generator.outcome.fallback_reason = "timeout"
        result = self.invoke(["review"])
        self.assertIn("Using heuristic suggestions (timeout)", result.output)

    def test_review_interactive_commits_selection(self) -> None:
        result = self.invoke(["review", "-i"], input="2\n")
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertEqual(self.git.commit_called, ["fix(api): validate user input"])

    def test_review_interactive_cancel(self) -> None:
        result = self.invoke(["review", "--interactive"], input="0\n")
        self.assertEqual(result.exit_code, cli.EXIT_DECLINED)
        self.assertEqual(self.git.commit_called, [])

    def test_no_staged_changes(self) -> None:
        self.git.change_set = ChangeSet()
        result = self.invoke(["review"])
        self.assertEqual(result.exit_code, cli.EXIT_NO_CHANGES)
        self.assertIn("No staged changes found", result.output)

    def test_not_a_repository(self) -> None:
        with patch.object(cli.GitClient, "discover", side_effect=NotARepositoryError("nope")):
            result = self.invoke(["review"])
        self.assertEqual(result.exit_code, cli.EXIT_NO_REPO)

    def test_invalid_config(self) -> None:
        (self.root / ".ai-commit.json").write_text("{broken")
        result = self.invoke(["review"])
        self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)

    def test_degraded_files_are_reported(self) -> None:
        self.git.change_set = ChangeSet(
            files=self.git.change_set.files + (FileChange("bin/blob.dat"),),
            degraded_files=("bin/blob.dat",),
        )
        result = self.invoke(["review"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn("Could not read the diff of 1 file(s)", result.output)

    def test_disabled_model_uses_real_heuristics(self) -> None:
        with patch.object(cli, "build_generator", REAL_BUILD_GENERATOR):
            result = self.invoke(["review", "--model", "none"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn("Using heuristic suggestions (generative model disabled)", result.output)
        self.assertIn("1. feat(api): update API endpoints and handlers", result.output)


class TestCommit(CliTestCase):
    def test_commit_without_confirmation(self) -> None:
        result = self.invoke(["commit", "--no-confirm"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertEqual(self.git.commit_called, ["fix(api): validate user input"])
        self.assertFalse((self.root / ".ai-commit-cache.json").exists())

    def test_commit_declined(self) -> None:
        result = self.invoke(["commit"], input="n\n")
        self.assertEqual(result.exit_code, cli.EXIT_DECLINED)
        self.assertEqual(self.git.commit_called, [])

    def test_commit_confirmed(self) -> None:
        result = self.invoke(["commit"], input="y\n")
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertEqual(len(self.git.commit_called), 1)

    def test_commit_reuses_recent_review(self) -> None:
        cached = [Suggestion(type="chore", subject="cached message", confidence=0.9)]
        SuggestionCache.for_repo(self.root).store(cached, self.git.change_set.summary)
        generator = Mock()
        with patch.object(cli, "build_generator", return_value=generator):
            result = self.invoke(["commit", "--no-confirm"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn("Using suggestions from recent review", result.output)
        self.assertEqual(self.git.commit_called, ["chore: cached message"])
        generator.run.assert_not_called()

    def test_commit_failure(self) -> None:
        self.git.commit_error = GitError("nothing to commit")
        result = self.invoke(["commit", "--no-confirm"])
        self.assertEqual(result.exit_code, cli.EXIT_VCS_FAILURE)
        self.assertIn("nothing to commit", result.output)


class TestConfigCommand(CliTestCase):
    def test_set_and_get(self) -> None:
        result = self.invoke(["config", "maxTokens", "200"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        saved = json.loads((self.root / ".ai-commit.json").read_text())
        self.assertEqual(saved, {"maxTokens": 200})

        result = self.invoke(["config", "maxTokens"])
        self.assertIn("maxTokens: 200", result.output)
        result = self.invoke(["config", "model"])
        self.assertIn("model: not set", result.output)

    def test_show_all(self) -> None:
        (self.root / ".ai-commit.json").write_text(json.dumps({"model": "phi3"}))
        result = self.invoke(["config"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn('"model": "phi3"', result.output)

    def test_invalid_key_or_value(self) -> None:
        self.assertEqual(self.invoke(["config", "colour", "blue"]).exit_code, cli.EXIT_CONFIG_ERROR)
        self.assertEqual(self.invoke(["config", "temperature", "3"]).exit_code, cli.EXIT_CONFIG_ERROR)


class TestStatus(CliTestCase):
    def test_status(self) -> None:
        result = self.invoke(["status"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn("Branch: main", result.output)
        self.assertIn("src/api/users.ts (A)", result.output)
        self.assertIn("2. fix: second", result.output)


class TestHelpers(unittest.TestCase):
    def test_best_suggestion_prefers_confidence_then_order(self) -> None:
        self.assertEqual(cli.best_suggestion(SUGGESTIONS), SUGGESTIONS[1])
        tied = [
            Suggestion(type="feat", subject="first", confidence=0.9),
            Suggestion(type="fix", subject="second", confidence=0.9),
        ]
        self.assertEqual(cli.best_suggestion(tied), tied[0])


if __name__ == "__main__":
    unittest.main()
