from typing import Iterable


def make_diff(path: str, added: Iterable[str] = (), removed: Iterable[str] = ()) -> str:
    """Build a small unified diff with the given added and removed lines."""
    added = list(added)
    removed = list(removed)
    lines = [
        f"diff --git a/{path} b/{path}",
        f"--- a/{path}",
        f"+++ b/{path}",
        f"@@ -1,{len(removed)} +1,{len(added)} @@",
    ]
    lines.extend(f"-{line}" for line in removed)
    lines.extend(f"+{line}" for line in added)
    return "\n".join(lines) + "\n"
