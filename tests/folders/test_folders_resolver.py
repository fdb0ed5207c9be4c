import itertools
import re
import unittest
from urllib.parse import parse_qs, urlparse

from gdrivetools.cache import FolderCache
from gdrivetools.errors import ApiError
from gdrivetools.folders.resolver import PathResolver, is_root_path, split_path
from gdrivetools.models import PathCreationFailure, ResolvedPath

_LITERAL = r"'((?:[^'\\]|\\.)*)'"


def _unescape(value: str) -> str:
    return re.sub(r"\\(.)", r"\1", value)


class _InMemoryDrive:
    """A tiny folder tree answering the lookup and create calls PathResolver makes."""

    def __init__(self) -> None:
        self.folders = {}
        self.calls = []
        self.creates = []
        self.fail_create_for = set()
        self._ids = itertools.count(1)

    def add(self, name: str, parent: str = "root", *, trashed: bool = False) -> str:
        folder_id = f"F{next(self._ids)}"
        self.folders[folder_id] = {"id": folder_id, "name": name, "parents": [parent], "trashed": trashed}
        return folder_id

    def request_json(self, token, endpoint, method="GET", body=None):
        self.calls.append((method, endpoint, body))
        if method == "POST":
            self.creates.append(body)
            if body["name"] in self.fail_create_for:
                raise ApiError("backend error")
            folder_id = self.add(body["name"], body["parents"][0])
            return {**self.folders[folder_id], "webViewLink": f"https://drive/{folder_id}"}

        q = parse_qs(urlparse(endpoint).query)["q"][0]
        name = _unescape(re.search(r"name = " + _LITERAL, q).group(1))
        parent = _unescape(re.search(_LITERAL + r" in parents", q).group(1))
        hits = [f for f in self.folders.values() if f["name"] == name and parent in f["parents"]]
        if "trashed=false" in q:
            hits = [f for f in hits if not f["trashed"]]
        return {"files": hits[:1]}

    def request(self, token, endpoint, method="GET", body=None):
        raise AssertionError("resolver should use request_json")


class TestPathHelpers(unittest.TestCase):
    def test_split_path_drops_empty_segments(self) -> None:
        self.assertEqual(split_path("A//B/"), ["A", "B"])
        self.assertEqual(split_path("/A/ /B"), ["A", "B"])
        self.assertEqual(split_path(""), [])
        self.assertEqual(split_path(None), [])

    def test_is_root_path(self) -> None:
        for path in ("", "/", "  ", "root", "My Drive", "/my drive/", "root/My Drive"):
            self.assertTrue(is_root_path(path), path)
        self.assertFalse(is_root_path("root/A"))


class TestResolveFolderPath(unittest.TestCase):
    def setUp(self) -> None:
        self.drive = _InMemoryDrive()
        self.cache = FolderCache()
        self.resolver = PathResolver(self.drive, self.cache)

    def test_resolves_existing_path(self) -> None:
        a = self.drive.add("A")
        b = self.drive.add("B", a)

        resolved = self.resolver.resolve_folder_path("tok", "A/B")

        self.assertIsInstance(resolved, ResolvedPath)
        self.assertEqual(resolved.folder_id, b)
        self.assertEqual([r.source for r in resolved.resolutions], ["search", "search"])

    def test_lookup_is_exact_name_under_current_parent(self) -> None:
        a = self.drive.add("A")
        self.drive.add("B", a)

        self.resolver.resolve_folder_path("tok", "A/B")

        q = parse_qs(urlparse(self.drive.calls[1][1]).query)["q"][0]
        self.assertIn("name = 'B'", q)
        self.assertIn(f"'{a}' in parents", q)
        self.assertIn("trashed=false", q)
        self.assertEqual(parse_qs(urlparse(self.drive.calls[1][1]).query)["pageSize"], ["1"])

    def test_missing_segment_returns_none(self) -> None:
        self.drive.add("A")
        self.assertIsNone(self.resolver.resolve_folder_path("tok", "A/Nope"))

    def test_root_paths_make_no_remote_calls(self) -> None:
        for path in ("", "/", "root", "My Drive"):
            resolved = self.resolver.resolve_folder_path("tok", path)
            self.assertEqual(resolved.folder_id, "root")
        self.assertEqual(self.drive.calls, [])

    def test_empty_segments_are_ignored(self) -> None:
        a = self.drive.add("A")
        b = self.drive.add("B", a)
        self.assertEqual(self.resolver.resolve_folder_path("tok", "/A//B/").folder_id, b)

    def test_second_resolve_served_from_cache(self) -> None:
        a = self.drive.add("A")
        self.drive.add("B", a)
        first = self.resolver.resolve_folder_path("tok", "A/B")
        calls = len(self.drive.calls)

        second = self.resolver.resolve_folder_path("tok", "A/B")

        self.assertEqual(second.folder_id, first.folder_id)
        self.assertEqual(len(self.drive.calls), calls)
        self.assertEqual([r.source for r in second.resolutions], ["cache", "cache"])

    def test_cache_is_not_shared_across_tokens(self) -> None:
        self.drive.add("A")
        self.resolver.resolve_folder_path("tokA", "A")
        calls = len(self.drive.calls)

        self.resolver.resolve_folder_path("tokB", "A")

        self.assertEqual(len(self.drive.calls), calls + 1)

    def test_quote_in_segment_is_escaped(self) -> None:
        self.drive.add("O'Brien")
        resolved = self.resolver.resolve_folder_path("tok", "O'Brien")
        self.assertIsNotNone(resolved)
        q = parse_qs(urlparse(self.drive.calls[0][1]).query)["q"][0]
        self.assertIn("name = 'O\\'Brien'", q)

    def test_remote_failure_returns_none(self) -> None:
        class _Broken:
            def request_json(self, *args, **kwargs):
                raise ApiError("boom")

        self.assertIsNone(PathResolver(_Broken(), FolderCache()).resolve_folder_path("tok", "A"))

    def test_trashed_folder_found_with_trash_is_not_reused_without_it(self) -> None:
        a = self.drive.add("A")
        trashed_b = self.drive.add("B", a, trashed=True)

        with_trash = self.resolver.resolve_folder_path("tok", "A/B", include_trashed=True)
        self.assertEqual(with_trash.folder_id, trashed_b)

        self.assertIsNone(self.resolver.resolve_folder_path("tok", "A/B"))

        created = self.resolver.create_folder_path("tok", "A/B")
        self.assertIsInstance(created, ResolvedPath)
        self.assertNotEqual(created.folder_id, trashed_b)
        self.assertEqual([c["name"] for c in self.drive.creates], ["B"])


class TestCreateFolderPath(unittest.TestCase):
    def setUp(self) -> None:
        self.drive = _InMemoryDrive()
        self.resolver = PathResolver(self.drive, FolderCache())

    def test_creates_only_missing_segments(self) -> None:
        a = self.drive.add("A")

        resolved = self.resolver.create_folder_path("tok", "A/B/C", description="leaf")

        self.assertEqual(len(self.drive.creates), 2)
        self.assertEqual([c["name"] for c in self.drive.creates], ["B", "C"])
        self.assertEqual(self.drive.creates[0]["parents"], [a])
        self.assertNotIn("description", self.drive.creates[0])
        self.assertEqual(self.drive.creates[1]["description"], "leaf")
        self.assertEqual(self.drive.creates[1]["mimeType"], "application/vnd.google-apps.folder")
        self.assertEqual([r.name for r in resolved.created], ["B", "C"])
        self.assertEqual([r.name for r in resolved.existing], ["A"])
        self.assertEqual(resolved.created[-1].web_view_link, f"https://drive/{resolved.folder_id}")

    def test_create_then_resolve_agree(self) -> None:
        created = self.resolver.create_folder_path("tok", "X/Y")
        resolved = self.resolver.resolve_folder_path("tok", "X/Y")
        self.assertEqual(created.folder_id, resolved.folder_id)

    def test_create_is_idempotent(self) -> None:
        first = self.resolver.create_folder_path("tok", "X/Y")
        second = PathResolver(self.drive, FolderCache()).create_folder_path("tok", "X/Y")

        self.assertEqual(first.folder_id, second.folder_id)
        self.assertEqual(len(self.drive.creates), 2)
        self.assertEqual(second.created, [])

    def test_root_alias_segments_reset_to_root(self) -> None:
        resolved = self.resolver.create_folder_path("tok", "My Drive/A")
        self.assertEqual(self.drive.creates[0]["parents"], ["root"])
        self.assertEqual(resolved.segments, ["My Drive", "A"])

    def test_failure_reports_progress(self) -> None:
        self.drive.add("A")
        self.drive.fail_create_for.add("C")

        outcome = self.resolver.create_folder_path("tok", "A/B/C")

        self.assertIsInstance(outcome, PathCreationFailure)
        self.assertEqual(outcome.failed_at, "C")
        self.assertEqual(outcome.path, "A/B/C")
        self.assertEqual([r.name for r in outcome.created], ["B"])
        self.assertEqual([r.name for r in outcome.existing], ["A"])
        self.assertEqual(outcome.error_type, "ApiError")

    def test_missing_id_in_create_response_is_failure(self) -> None:
        class _NoId(_InMemoryDrive):
            def request_json(self, token, endpoint, method="GET", body=None):
                if method == "POST":
                    return {"name": body["name"]}
                return super().request_json(token, endpoint, method, body)

        outcome = PathResolver(_NoId(), FolderCache()).create_folder_path("tok", "A")
        self.assertIsInstance(outcome, PathCreationFailure)
        self.assertEqual(outcome.failed_at, "A")

    def test_concurrent_creators_may_duplicate(self) -> None:
        # Accepted behaviour: no cross-call locking, so two callers that both
        # miss the lookup each create the folder.
        first = PathResolver(self.drive, FolderCache())
        second = PathResolver(self.drive, FolderCache())
        original = self.drive.request_json

        def lookup_misses(token, endpoint, method="GET", body=None):
            if method == "GET":
                self.drive.calls.append((method, endpoint, body))
                return {"files": []}
            return original(token, endpoint, method, body)

        self.drive.request_json = lookup_misses
        a = first.create_folder_path("tok", "Dup")
        b = second.create_folder_path("tok", "Dup")

        self.assertNotEqual(a.folder_id, b.folder_id)
        self.assertEqual(len(self.drive.creates), 2)


if __name__ == "__main__":
    unittest.main()
