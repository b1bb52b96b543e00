import unittest

from ai_commit.analysis.deletions import (
    deleted_files_bullets,
    describe_deleted_files,
    find_common_path,
    find_common_words,
)


LEGACY_WIDGET = [
    "src/widgets/LegacyWidget.js",
    "src/widgets/LegacyWidget.d.ts",
    "src/widgets/LegacyWidget.js.map",
]


class TestFindCommonWords(unittest.TestCase):
    def test_pascal_case_word_ranks_first(self) -> None:
        words = find_common_words(LEGACY_WIDGET + ["src/widgets/helpers_widget.js"])
        self.assertEqual(words[0], "LegacyWidget")

    def test_short_words_are_ignored(self) -> None:
        self.assertEqual(find_common_words(["a.js", "a.ts", "b.js"]), [])


class TestFindCommonPath(unittest.TestCase):
    def test_shared_prefix(self) -> None:
        self.assertEqual(find_common_path(["src/old/one/a.js", "src/old/one/b.py"]), ["src", "old", "one"])
        self.assertEqual(find_common_path(["src/a.js", "lib/b.js"]), [])
        self.assertEqual(find_common_path([]), [])


class TestDescribeDeletedFiles(unittest.TestCase):
    def test_class_removal(self) -> None:
        self.assertEqual(
            describe_deleted_files(LEGACY_WIDGET),
            "remove deprecated LegacyWidget class and related assets",
        )

    def test_component_removal(self) -> None:
        self.assertEqual(
            describe_deleted_files(["src/Modal.tsx", "src/Modal.test.tsx", "src/Modal.css"]),
            "remove Modal component and related files",
        )

    def test_lowercase_entity(self) -> None:
        self.assertEqual(
            describe_deleted_files(["lib/helpers_auth.js", "lib/auth_store.js"]),
            "remove auth-related files and assets",
        )

    def test_common_module(self) -> None:
        self.assertEqual(
            describe_deleted_files(["src/old/one/a.js", "src/old/one/b.py"]),
            "remove one module and related files",
        )

    def test_content_pattern(self) -> None:
        self.assertEqual(
            describe_deleted_files(["x.md", "y.md", "z.md"]),
            "remove documentation files and generated assets",
        )

    def test_unused_files(self) -> None:
        self.assertEqual(describe_deleted_files(["a.js", "b/c.py"]), "remove unused files (2 files)")


class TestDeletedFilesBullets(unittest.TestCase):
    def test_entity_bullets(self) -> None:
        bullets = deleted_files_bullets(LEGACY_WIDGET)
        self.assertEqual(
            bullets,
            [
                "- Removed the unused `LegacyWidget` class and its corresponding "
                ".js/.ts, .d.ts, source maps files",
                "- Cleaned up associated imports and dependencies related to the removed functionality",
            ],
        )

    def test_grouped_by_kind(self) -> None:
        bullets = deleted_files_bullets(["a.js", "b.d.ts", "c.md"])
        self.assertEqual(
            bullets,
            [
                "- Removed unused files: 1 source file, 1 type definition",
                "- Cleaned up 1 documentation file",
            ],
        )

    def test_nothing_to_say(self) -> None:
        self.assertEqual(deleted_files_bullets(["a.txt"]), [])


if __name__ == "__main__":
    unittest.main()
