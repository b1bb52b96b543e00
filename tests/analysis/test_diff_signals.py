import unittest

from ai_commit.analysis.diff_signals import added_lines, extract_signals
from ai_commit.analysis.models import ChangeSet, DiffSignals, FileChange, FileStatus
from helpers import make_diff


def signals_for(path: str, added, removed=()) -> DiffSignals:
    diff = make_diff(path, added=added, removed=removed)
    return extract_signals(ChangeSet(files=[FileChange.from_diff(path, FileStatus.MODIFIED, diff)]))


class TestAddedLines(unittest.TestCase):
    def test_only_added_content_is_yielded(self) -> None:
        diff = make_diff("a.js", added=["  const a = 1;  "], removed=["const b = 2;"])
        self.assertEqual(list(added_lines(diff)), ["const a = 1;"])


class TestExtractSignals(unittest.TestCase):
    def test_functions_from_several_syntaxes(self) -> None:
        signals = signals_for(
            "src/utils/math.js",
            [
                "export function add(a, b) {",
                "def helper():",
                "const mul = (a, b) => a * b;",
            ],
        )
        self.assertEqual(signals.functions, ("add", "helper", "mul"))
        self.assertEqual(signals.dominant_purpose, "adding add, helper, mul functions")

    def test_removed_lines_are_ignored(self) -> None:
        signals = signals_for("src/a.js", added=["let x = 1;"], removed=["function gone() {"])
        self.assertEqual(signals.functions, ())
        self.assertEqual(signals.dominant_purpose, "")

    def test_functions_are_deduplicated_and_capped(self) -> None:
        lines = [f"function f{i}() {{" for i in range(7)] + ["function f0() {"]
        signals = signals_for("src/helpers.js", lines)
        self.assertEqual(signals.functions, ("f0", "f1", "f2", "f3", "f4"))
        self.assertEqual(signals.dominant_purpose, "implementing multiple utility functions and helpers")

    def test_component_and_ui_tags_in_tsx(self) -> None:
        signals = signals_for(
            "src/components/Header.tsx",
            ["export const Header = () => {", "return <Button onClick={go}>Go</Button>;"],
        )
        self.assertEqual(signals.components, ("Header",))
        self.assertEqual(signals.ui_tags, ("Button",))
        self.assertEqual(signals.dominant_purpose, "adding Header component")

    def test_many_components(self) -> None:
        lines = [f"export function {name}() {{" for name in ("Alpha", "Beta", "Gamma", "Delta")]
        signals = signals_for("src/components/widgets.jsx", lines)
        self.assertEqual(signals.dominant_purpose, "implementing 4 new UI components")

    def test_components_only_detected_in_ui_files(self) -> None:
        signals = signals_for("src/server.js", ["export function Alpha() {"])
        self.assertEqual(signals.components, ())
        self.assertEqual(signals.functions, ("Alpha",))

    def test_ui_tags_only(self) -> None:
        tags = ["Box", "Card", "Grid", "List", "Menu", "Tabs"]
        signals = signals_for("src/pages/home.tsx", [f"<{tag} />" for tag in tags])
        self.assertEqual(signals.ui_tags, tuple(tags))
        self.assertEqual(signals.dominant_purpose, "enhancing UI with multiple component updates")

    def test_classes(self) -> None:
        signals = signals_for("src/services/user.ts", ["export class UserService {"])
        self.assertEqual(signals.classes, ("UserService",))
        self.assertEqual(signals.dominant_purpose, "implementing UserService class")

    def test_http_verbs_in_api_files(self) -> None:
        signals = signals_for(
            "src/api/users/route.ts",
            ["router.post('/users', create);", "router.get('/users', list);"],
        )
        self.assertEqual(signals.http_verbs, ("POST", "GET"))
        self.assertEqual(signals.dominant_purpose, "adding POST, GET API endpoints")

    def test_repeated_http_verb_counts_once(self) -> None:
        signals = signals_for(
            "src/api/users/route.ts",
            ["router.get('/users', list);", "router.get('/users/:id', show);"],
        )
        self.assertEqual(signals.http_verbs, ("GET",))
        self.assertEqual(signals.dominant_purpose, "adding GET API endpoint")

    def test_http_verbs_ignored_outside_api_files(self) -> None:
        signals = signals_for("src/app.js", ["axios.get(url);"])
        self.assertEqual(signals.http_verbs, ())

    def test_config_keys(self) -> None:
        signals = signals_for("config/settings.json", ['"timeout": 30,', '"retries": 2'])
        self.assertEqual(signals.config_keys, ("timeout", "retries"))
        self.assertEqual(signals.dominant_purpose, "updating configuration settings")

    def test_dependencies(self) -> None:
        signals = signals_for(
            "src/app.js",
            [
                "import React from 'react';",
                "import axios from \"axios\";",
                "import { local } from './local';",
            ],
        )
        self.assertEqual(signals.dependencies, ("react", "axios"))
        self.assertEqual(signals.dominant_purpose, "integrating react and axios dependencies")

    def test_many_dependencies(self) -> None:
        signals = signals_for(
            "src/app.js",
            [f"import x{i} from 'pkg{i}';" for i in range(3)],
        )
        self.assertEqual(signals.dominant_purpose, "integrating pkg0 and pkg1 and other dependencies")

    def test_priority_prefers_functions_over_classes(self) -> None:
        signals = signals_for("src/mod.py", ["class Store:", "def load():"])
        self.assertEqual(signals.dominant_purpose, "adding load function")

    def test_empty_diffs_give_empty_signals(self) -> None:
        cs = ChangeSet(files=[FileChange("a.py"), FileChange("b.py", diff="not a diff")])
        self.assertEqual(extract_signals(cs), DiffSignals())


if __name__ == "__main__":
    unittest.main()
