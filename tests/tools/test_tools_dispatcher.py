import unittest
from datetime import datetime, timedelta, timezone

from tools_fakes import FakeDrive, FakeMedia

from gdrivetools.cache import FolderCache, default_folder_cache
from gdrivetools.config import ToolsConfig
from gdrivetools.errors import RemoteApiError
from gdrivetools.models import TOOL_ARGS_SEPARATOR, FolderIdentity, ToolResult
from gdrivetools.tools import DEFAULT_ACTIONS, ToolDispatcher, error_payload


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


class TestToolDispatcher(unittest.TestCase):
    def setUp(self) -> None:
        self.drive = FakeDrive()
        self.cache = FolderCache()
        self.dispatcher = ToolDispatcher(self.drive, self.cache, FakeMedia())

    def test_every_documented_action_is_registered(self) -> None:
        expected = {
            "file": {
                "listFiles",
                "getFile",
                "createFile",
                "updateFile",
                "deleteFile",
                "copyFile",
                "downloadFile",
            },
            "folder": {"createFolder", "listFolderContents", "deleteFolder"},
            "search": {"searchFiles"},
            "share": {"shareFile", "getPermissions", "removePermission"},
            "smart": {
                "smartFolderFinder",
                "hierarchicalFolderNavigator",
                "smartFolderCreator",
                "smartFileUrl",
                "urlFileUploader",
            },
            "twilio": {"downloadByUrl"},
        }
        registered = {}
        for drive_type, action in DEFAULT_ACTIONS:
            registered.setdefault(drive_type, set()).add(action)
        self.assertEqual(registered, expected)
        self.assertEqual(len(self.dispatcher.actions()), 20)

    def test_unknown_action_is_unsupported(self) -> None:
        result = self.dispatcher.dispatch("file", "explode", {"x": 1}, "tok")
        self.assertFalse(result.success)
        self.assertEqual(result.payload["error"], "UNSUPPORTED_ACTION")
        self.assertEqual(result.params, {"x": 1})

    def test_handler_exception_becomes_failed_result(self) -> None:
        self.drive.on("GET", "files/F1", RemoteApiError(404, "Not Found", '{"error": {"message": "gone"}}'))
        self.drive.on("DELETE", "files/F1", RemoteApiError(403, "Forbidden", ""))

        result = self.dispatcher.dispatch("file", "deleteFile", {"fileId": "F1"}, "tok")

        self.assertFalse(result.success)
        self.assertEqual(result.payload["errorType"], "PermissionError")
        self.assertEqual(result.payload["statusCode"], 403)
        self.assertTrue(result.payload["timestamp"].endswith("Z"))

    def test_unexpected_exception_never_escapes(self) -> None:
        def explode(ctx, params, token):
            raise KeyError("missing")

        self.dispatcher.register("file", "listFiles", explode)
        result = self.dispatcher.dispatch("file", "listFiles", {}, "tok")
        self.assertFalse(result.success)
        self.assertEqual(result.payload["errorType"], "KeyError")

    def test_call_returns_encoded_result(self) -> None:
        text = self.dispatcher.call("search", "searchFiles", {}, "tok")
        head, tail = text.split(TOOL_ARGS_SEPARATOR)
        decoded = ToolResult.decode(text)
        self.assertEqual(decoded.payload["error"], "MISSING_REQUIRED_PARAMS")
        self.assertEqual(tail, "{}")
        self.assertIn('"success": false', head)

    def test_default_params_override_call_params(self) -> None:
        seen = {}

        def capture(ctx, params, token):
            seen.update(params)
            return {"success": True}

        dispatcher = ToolDispatcher(
            self.drive,
            self.cache,
            FakeMedia(),
            default_params={"maxResults": 5, "folderId": "PINNED"},
        )
        dispatcher.register("smart", "smartFolderFinder", capture)
        result = dispatcher.dispatch(
            "smart",
            "smartFolderFinder",
            {"folderId": "AGENT", "exactMatch": False},
            "tok",
        )

        self.assertEqual(seen, {"maxResults": 5, "folderId": "PINNED", "exactMatch": False})
        self.assertEqual(result.params, seen)

    def test_non_mapping_params_are_a_failed_result(self) -> None:
        for params in ("abc", ["a", "b"], 42):
            result = self.dispatcher.dispatch("file", "getFile", params, "tok")
            self.assertFalse(result.success)
            self.assertEqual(result.payload["error"], "MISSING_REQUIRED_PARAMS")
            self.assertEqual(result.params, {})
        self.assertEqual(self.drive.calls, [])

    def test_none_params_are_treated_as_empty(self) -> None:
        result = self.dispatcher.dispatch("file", "getFile", None, "tok")
        self.assertEqual(result.payload["error"], "MISSING_REQUIRED_PARAMS")
        self.assertEqual(result.payload["message"], "fileId is required")

    def test_expired_cache_entries_swept_on_every_dispatch(self) -> None:
        clock = _Clock()
        cache = FolderCache(ttl=10, clock=clock)
        cache.set("tok", "F1", FolderIdentity("F1", "A", "root", "A", clock.now))
        clock.now += timedelta(seconds=11)

        ToolDispatcher(self.drive, cache, FakeMedia()).dispatch("file", "nope", {}, "tok")

        self.assertEqual(len(cache), 0)

    def test_from_config_uses_configured_ttl(self) -> None:
        dispatcher = ToolDispatcher.from_config(ToolsConfig(cache_ttl_sec=5), client=self.drive)
        self.assertEqual(dispatcher.context.cache.ttl, timedelta(seconds=5))

    def test_shared_cache_ttl_mismatch_is_logged(self) -> None:
        with self.assertLogs("gdrivetools.tools.dispatcher", level="WARNING") as logs:
            dispatcher = ToolDispatcher(self.drive, config=ToolsConfig(cache_ttl_sec=60))
        self.assertIs(dispatcher.context.cache, default_folder_cache())
        self.assertIn("shared cache TTL differs", logs.output[0])


class TestErrorPayload(unittest.TestCase):
    def test_plain_exception(self) -> None:
        payload = error_payload(ValueError("bad"))
        self.assertEqual(payload["error"], "bad")
        self.assertEqual(payload["errorType"], "ValueError")
        self.assertFalse(payload["success"])


if __name__ == "__main__":
    unittest.main()
