import base64
import unittest

from tools_fakes import FakeDrive, FakeMedia, make_context

from gdrivetools.errors import NetworkError, RemoteApiError
from gdrivetools.tools import media_actions

TWILIO_URL = "https://api.twilio.com/2010-04-01/Accounts/AC1/Messages/MM1/Media/ME1"
PHOTO_URL = "https://cdn.example.com/img/photo.png"


class TestValidateUrls(unittest.TestCase):
    def test_split_valid_invalid_duplicate(self) -> None:
        valid, invalid, duplicates = media_actions.validate_urls(
            [PHOTO_URL, "nope", f" {PHOTO_URL} ", None, TWILIO_URL]
        )
        self.assertEqual(valid, [PHOTO_URL, TWILIO_URL])
        self.assertEqual(invalid, ["nope", None])
        self.assertEqual(duplicates, [PHOTO_URL])

    def test_upload_root_names(self) -> None:
        for name in ("root", "My Drive", "mydrive", "/", "", "Google Drive"):
            self.assertTrue(media_actions.is_upload_root(name), name)
        self.assertFalse(media_actions.is_upload_root("Invoices"))
        self.assertFalse(media_actions.is_upload_root(None))


class TestUrlFileUploader(unittest.TestCase):
    def setUp(self) -> None:
        self.drive = FakeDrive()

    def test_all_urls_invalid(self) -> None:
        ctx = make_context(self.drive)
        result = media_actions.url_file_uploader(ctx, {"fileUrl": ["nope", ""]}, "tok")
        self.assertEqual(result["error"], "ALL_URLS_INVALID")

    def test_twilio_urls_need_credentials(self) -> None:
        ctx = make_context(self.drive, FakeMedia(has_credentials=False))
        result = media_actions.url_file_uploader(
            ctx,
            {"fileUrl": TWILIO_URL, "targetFolderName": "root"},
            "tok",
        )
        self.assertEqual(result["error"], "TWILIO_CREDENTIALS_MISSING")
        self.assertEqual(result["twilioUrls"], [TWILIO_URL])

    def test_target_folder_required(self) -> None:
        ctx = make_context(self.drive, FakeMedia({PHOTO_URL: (b"png", "image/png")}))
        result = media_actions.url_file_uploader(ctx, {"fileUrl": PHOTO_URL}, "tok")
        self.assertEqual(result["error"], "MISSING_REQUIRED_PARAMS")

    def test_upload_to_root_with_unique_names(self) -> None:
        other = "https://cdn.example.com/other/photo.png"
        media = FakeMedia({PHOTO_URL: (b"one", "image/png"), other: (b"two!", "image/png")})
        ctx = make_context(self.drive, media)

        result = media_actions.url_file_uploader(
            ctx,
            {"fileUrl": [PHOTO_URL, other], "targetFolderName": "My Drive"},
            "tok",
        )

        self.assertTrue(result["success"])
        self.assertEqual(result["targetFolderId"], "root")
        self.assertEqual(result["successfulUploads"], 2)
        self.assertEqual([u["fileName"] for u in result["uploads"]], ["photo.png", "photo_1.png"])
        self.assertEqual(self.drive.uploads[0]["metadata"], {"name": "photo.png", "parents": ["root"]})
        self.assertEqual(self.drive.uploads[0]["mime_type"], "image/png")
        self.assertEqual(result["processingInfo"]["totalSizeUploaded"], 7)
        self.assertEqual(result["uploads"][0]["downloadUrl"], "https://drive.google.com/uc?id=U1&export=download")

    def test_existing_file_is_skipped_unless_overwrite(self) -> None:
        self.drive.on("GET", "name = 'photo.png'", {"files": [{"id": "OLD"}]})
        ctx = make_context(self.drive, FakeMedia({PHOTO_URL: (b"png", "image/png")}))

        result = media_actions.url_file_uploader(ctx, {"fileUrl": PHOTO_URL, "targetFolderId": "T1"}, "tok")

        self.assertFalse(result["success"])
        self.assertEqual(result["failures"][0]["error"], "FILE_EXISTS")
        self.assertEqual(result["failures"][0]["existingFileId"], "OLD")
        self.assertEqual(self.drive.uploads, [])

        result = media_actions.url_file_uploader(
            ctx,
            {"fileUrl": PHOTO_URL, "targetFolderId": "T1", "overwriteExisting": True},
            "tok",
        )
        self.assertTrue(result["success"])
        self.assertEqual(self.drive.uploads[0]["metadata"]["parents"], ["T1"])

    def test_download_failure_reported_per_url(self) -> None:
        media = FakeMedia(
            {
                PHOTO_URL: NetworkError("down"),
                "https://cdn.example.com/b.txt": (b"hi", None),
            }
        )
        ctx = make_context(self.drive, media)

        result = media_actions.url_file_uploader(
            ctx,
            {
                "fileUrl": [PHOTO_URL, "https://cdn.example.com/b.txt", "bad"],
                "targetFolderId": "T1",
                "fileName": ["", "notes"],
            },
            "tok",
        )

        self.assertTrue(result["success"])
        self.assertEqual(result["failures"][0]["stage"], "download")
        self.assertEqual(result["uploads"][0]["fileName"], "notes")
        self.assertEqual(result["urlValidation"]["invalidUrls"], ["bad"])

    def test_folder_path_created_when_missing(self) -> None:
        self.drive.on("POST", "files?", lambda endpoint, body: {"id": f"ID_{body['name']}", "name": body["name"]})
        ctx = make_context(self.drive, FakeMedia({PHOTO_URL: (b"png", "image/png")}))

        result = media_actions.url_file_uploader(
            ctx,
            {"fileUrl": PHOTO_URL, "folderPath": "Uploads/2025"},
            "tok",
        )

        self.assertEqual(result["targetFolderId"], "ID_2025")
        self.assertTrue(result["targetFolder"]["wasCreated"])
        self.assertEqual(result["targetFolder"]["path"], "Uploads/2025")

    def test_target_name_created_under_root(self) -> None:
        self.drive.on("POST", "files?", {"id": "NEW", "name": "Inbox"})
        ctx = make_context(self.drive, FakeMedia({PHOTO_URL: (b"png", "image/png")}))

        result = media_actions.url_file_uploader(ctx, {"fileUrl": PHOTO_URL, "targetFolderName": "Inbox"}, "tok")

        self.assertEqual(result["targetFolderId"], "NEW")
        folder_post = [c[2] for c in self.drive.calls if c[0] == "POST"][0]
        self.assertEqual(folder_post["parents"], ["root"])


class TestDownloadByUrl(unittest.TestCase):
    def test_no_urls(self) -> None:
        ctx = make_context()
        self.assertEqual(media_actions.download_by_url(ctx, {"mediaUrl": ["  "]}, "tok")["error"], "NO_URLS")

    def test_twilio_urls_need_credentials(self) -> None:
        ctx = make_context(media=FakeMedia(has_credentials=False))
        result = media_actions.download_by_url(ctx, {"mediaUrl": TWILIO_URL}, "tok")
        self.assertEqual(result["error"], "TWILIO_CREDENTIALS_MISSING")

    def test_returns_data_urls_and_extension_from_mime(self) -> None:
        ctx = make_context(media=FakeMedia({TWILIO_URL: (b"\xff\xd8jpeg", "image/jpeg")}))

        result = media_actions.download_by_url(ctx, {"mediaUrl": TWILIO_URL}, "tok")

        self.assertTrue(result["success"])
        entry = result["files"][0]
        self.assertEqual(entry["name"], "ME1.jpg")
        self.assertEqual(entry["mime"], "image/jpeg")
        self.assertEqual(entry["size"], 6)
        self.assertEqual(entry["dataUrl"], "data:image/jpeg;base64," + base64.b64encode(b"\xff\xd8jpeg").decode())

    def test_failures_are_reported(self) -> None:
        media = FakeMedia(
            {
                PHOTO_URL: RemoteApiError(404, "Not Found", "missing"),
                "https://cdn.example.com/x": NetworkError("down"),
            }
        )
        ctx = make_context(media=media)

        result = media_actions.download_by_url(
            ctx,
            {"mediaUrl": [PHOTO_URL, "https://cdn.example.com/x"], "returnDataUrl": False},
            "tok",
        )

        self.assertFalse(result["success"])
        self.assertEqual(result["failed"], 2)
        self.assertEqual(result["failures"][0], {"url": PHOTO_URL, "status": 404, "statusText": "Not Found", "body": "missing"})
        self.assertEqual(result["failures"][1]["error"], "down")


if __name__ == "__main__":
    unittest.main()
