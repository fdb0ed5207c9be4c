import unittest

import gdrivetools


class TestPublicApi(unittest.TestCase):
    def test_top_level_exports_exist(self) -> None:
        self.assertTrue(hasattr(gdrivetools, "ToolDispatcher"))
        self.assertTrue(hasattr(gdrivetools, "PathResolver"))
        self.assertTrue(hasattr(gdrivetools, "FolderSearch"))
        self.assertTrue(hasattr(gdrivetools, "FolderCache"))
        self.assertTrue(hasattr(gdrivetools, "DriveClient"))
        self.assertTrue(hasattr(gdrivetools, "TwilioMediaClient"))

        self.assertTrue(hasattr(gdrivetools, "ToolResult"))
        self.assertTrue(hasattr(gdrivetools, "ResolvedPath"))
        self.assertTrue(hasattr(gdrivetools, "ToolsConfig"))

        self.assertTrue(hasattr(gdrivetools, "GDriveToolsError"))
        self.assertTrue(hasattr(gdrivetools, "RemoteApiError"))

    def test___all___is_defined(self) -> None:
        self.assertTrue(hasattr(gdrivetools, "__all__"))
        self.assertIn("ToolDispatcher", gdrivetools.__all__)
        self.assertIn("GDriveToolsError", gdrivetools.__all__)
        for name in gdrivetools.__all__:
            self.assertTrue(hasattr(gdrivetools, name), name)


if __name__ == "__main__":
    unittest.main()
