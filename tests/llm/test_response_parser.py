import unittest

from ai_commit.analysis.models import ChangeSet, FileChange
from ai_commit.llm.prompt_builder import build_prompt
from ai_commit.llm.response_parser import GENERATIVE_CONFIDENCE, parse_response
from ai_commit.suggestion import Suggestion
from helpers import make_diff


class TestParseResponse(unittest.TestCase):
    def test_two_suggestions_with_bodies(self) -> None:
        text = (
            "Here are some options:\n"
            "feat(auth): add login flow\n"
            "- Added login form\n"
            "- Stored the session token\n"
            "\n"
            "fix!: correct token expiry\n"
            "- Expiry is now in seconds\n"
        )
        suggestions = parse_response(text)
        self.assertEqual(len(suggestions), 2)
        first, second = suggestions
        self.assertEqual((first.type, first.scope, first.subject), ("feat", "auth", "add login flow"))
        self.assertEqual(first.body, "- Added login form\n- Stored the session token")
        self.assertEqual(first.confidence, GENERATIVE_CONFIDENCE)
        self.assertTrue(second.breaking)
        self.assertIsNone(second.scope)
        self.assertEqual(second.body, "- Expiry is now in seconds")

    def test_at_most_two_suggestions(self) -> None:
        text = "feat: one\nfix: two\nchore: three\n"
        self.assertEqual([s.subject for s in parse_response(text)], ["one", "two"])

    def test_type_is_case_insensitive(self) -> None:
        suggestions = parse_response("FEAT(api): Add users endpoint")
        self.assertEqual(suggestions[0].type, "feat")
        self.assertEqual(suggestions[0].subject, "Add users endpoint")

    def test_unknown_types_are_not_headers(self) -> None:
        self.assertEqual(parse_response("feature: add x\nupdate: y"), [])

    def test_placeholder_headers_are_skipped(self) -> None:
        text = (
            "feat(scope): brief description of the change\n"
            "fix: improvements\n"
            "docs: Description: what changed\n"
            "refactor(core): split the parser\n"
        )
        suggestions = parse_response(text)
        self.assertEqual(len(suggestions), 1)
        self.assertEqual(suggestions[0].subject, "split the parser")

    def test_text_after_echoed_instructions_is_dropped(self) -> None:
        text = (
            "feat: add cache\n"
            "- Results are reused for five minutes\n"
            "Generate a conventional commit message with:\n"
            "fix: something from the instructions\n"
        )
        suggestions = parse_response(text)
        self.assertEqual(len(suggestions), 1)
        self.assertEqual(suggestions[0].body, "- Results are reused for five minutes")

    def test_instruction_leaks_are_not_added_to_body(self) -> None:
        text = (
            "feat: add cache\n"
            "This commit message describes the cache\n"
            "Type: feat\n"
            "- Why these changes matter\n"
            "- Cache lives in the repository root\n"
        )
        self.assertEqual(parse_response(text)[0].body, "- Cache lives in the repository root")

    def test_empty_or_headerless_text(self) -> None:
        self.assertEqual(parse_response(""), [])
        self.assertEqual(parse_response("I could not determine a message."), [])

    def test_echoed_prompt_yields_nothing(self) -> None:
        change_set = ChangeSet(
            files=[FileChange.from_diff("src/app.ts", "M", make_diff("src/app.ts", added=["const x = 1;"]))]
        )
        self.assertEqual(parse_response(build_prompt(change_set)), [])

    def test_rendered_suggestion_parses_back(self) -> None:
        suggestion = Suggestion(
            type="feat",
            scope="auth",
            subject="add login flow",
            body="- Added login form\n- Wired up session storage",
            confidence=GENERATIVE_CONFIDENCE,
        )
        self.assertEqual(parse_response(suggestion.full_message), [suggestion])


if __name__ == "__main__":
    unittest.main()
