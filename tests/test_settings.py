import json
import tempfile
import unittest
from pathlib import Path

from quotejournal.settings import SettingsStore


class SettingsStoreTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.path = Path(self.temp_dir.name) / "nested" / "settings.json"
        self.settings = SettingsStore(self.path)

    async def asyncTearDown(self):
        self.temp_dir.cleanup()

    async def test_defaults(self):
        self.assertFalse(await self.settings.get_dark_mode())
        self.assertFalse(await self.settings.get_logged_in())
        self.assertEqual(await self.settings.get_user_email(), "")

    async def test_values_persist_across_instances(self):
        await self.settings.set_dark_mode(True)
        await self.settings.set_logged_in(True)
        await self.settings.set_user_email("a@b.com")

        reloaded = SettingsStore(self.path)
        self.assertTrue(await reloaded.get_dark_mode())
        self.assertTrue(await reloaded.get_logged_in())
        self.assertEqual(await reloaded.get_user_email(), "a@b.com")

        with self.path.open(encoding="utf-8") as f:
            self.assertEqual(
                json.load(f),
                {"isDarkMode": True, "isLoggedIn": True, "userEmail": "a@b.com"},
            )

    async def test_clear_user_data_keeps_dark_mode(self):
        await self.settings.set_dark_mode(True)
        await self.settings.set_logged_in(True)
        await self.settings.set_user_email("a@b.com")

        await self.settings.clear_user_data()

        self.assertTrue(await self.settings.get_dark_mode())
        self.assertFalse(await self.settings.get_logged_in())
        self.assertEqual(await self.settings.get_user_email(), "")

    async def test_clear_all(self):
        await self.settings.set_dark_mode(True)
        await self.settings.set_user_email("a@b.com")

        await self.settings.clear_all()

        self.assertFalse(await SettingsStore(self.path).get_dark_mode())
        self.assertEqual(await self.settings.get_user_email(), "")

    async def test_corrupt_file_reads_as_defaults(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json", encoding="utf-8")

        self.assertFalse(await self.settings.get_dark_mode())
        await self.settings.set_dark_mode(True)
        self.assertTrue(await SettingsStore(self.path).get_dark_mode())

    async def test_wrongly_typed_value_reads_as_default(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text(json.dumps({"isDarkMode": "yes", "userEmail": 5}), encoding="utf-8")

        self.assertFalse(await self.settings.get_dark_mode())
        self.assertEqual(await self.settings.get_user_email(), "")


if __name__ == "__main__":
    unittest.main()
