import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from quotejournal import logic
from quotejournal.logic import Journal, load_config, save_config
from quotejournal.models import Entry, Quote
from quotejournal.quotes import QuoteService


class ConfigTests(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        patcher = mock.patch.dict(os.environ, {logic.HOME_ENV: self.temp_dir.name})
        self.addCleanup(patcher.stop)
        patcher.start()

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_first_load_writes_defaults(self):
        cfg = load_config()

        self.assertEqual(cfg, logic.DEFAULT_CONFIG)
        self.assertTrue((Path(self.temp_dir.name) / "config.json").exists())

    def test_saved_values_merge_over_defaults(self):
        save_config({"quote_timeout": 3})

        cfg = load_config()

        self.assertEqual(cfg["quote_timeout"], 3)
        self.assertEqual(cfg["quote_api_url"], logic.DEFAULT_CONFIG["quote_api_url"])

    def test_data_dir_defaults_to_config_dir(self):
        self.assertEqual(logic.data_dir({"data_dir": ""}), Path(self.temp_dir.name))
        self.assertEqual(logic.data_dir({"data_dir": "/srv/journal"}), Path("/srv/journal"))


class ValidationTests(unittest.TestCase):
    def test_entry_requires_title_and_content(self):
        with self.assertRaises(ValueError):
            logic.validate_entry(Entry(title="  ", content="c", date="2026-01-01"))
        with self.assertRaises(ValueError):
            logic.validate_entry(Entry(title="t", content="", date="2026-01-01"))
        logic.validate_entry(Entry(title="t", content="c", date="2026-01-01"))

    def test_credentials(self):
        with self.assertRaises(ValueError):
            logic.validate_credentials("not-an-email", "secret1")
        with self.assertRaises(ValueError):
            logic.validate_credentials("a@b.com", "12345")
        logic.validate_credentials("a@b.com", "123456")


class JournalTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.journal = Journal.from_config({"data_dir": self.temp_dir.name})

    async def asyncTearDown(self):
        await self.journal.close()
        self.temp_dir.cleanup()

    async def test_files_live_in_data_dir(self):
        await self.journal.entries.count()
        await self.journal.settings.set_dark_mode(True)

        names = {p.name for p in Path(self.temp_dir.name).iterdir()}

        self.assertIn(logic.ENTRIES_DB, names)
        self.assertIn(logic.SETTINGS_FILE, names)

    async def test_register_logs_in_and_conflicts(self):
        user = await self.journal.register_user("A@B.com", "secret1", "A")

        self.assertEqual(user.email, "a@b.com")
        self.assertTrue(await self.journal.settings.get_logged_in())
        self.assertEqual(await self.journal.settings.get_user_email(), "a@b.com")
        self.assertIsNone(await self.journal.register_user("a@b.com", "other12", "B"))

    async def test_register_validates_input(self):
        with self.assertRaises(ValueError):
            await self.journal.register_user("a@b.com", "short", "A")
        with self.assertRaises(ValueError):
            await self.journal.register_user("a@b.com", "secret1", " ")
        self.assertEqual(await self.journal.users.list_all(), [])

    async def test_login_and_logout(self):
        await self.journal.users.register("a@b.com", "secret1", "A")

        self.assertIsNone(await self.journal.login("a@b.com", "wrong12"))
        self.assertFalse(await self.journal.settings.get_logged_in())

        user = await self.journal.login("A@B.com", "secret1")
        self.assertEqual(user.name, "A")
        self.assertTrue(await self.journal.settings.get_logged_in())

        await self.journal.logout()
        self.assertFalse(await self.journal.settings.get_logged_in())
        self.assertEqual(await self.journal.settings.get_user_email(), "")

    async def test_save_entry_inserts_then_updates(self):
        saved = await self.journal.save_entry(Entry(title="Day 1", content="Hello world", date="2026-01-05"))
        self.assertIsNotNone(saved.id)

        saved.content = "Hello again"
        await self.journal.save_entry(saved)

        self.assertEqual(await self.journal.entries.get_all(), [saved])
        with self.assertRaises(ValueError):
            await self.journal.save_entry(Entry(title="", content="x", date="2026-01-05"))

    async def test_list_entries_bypasses_search_for_blank_query(self):
        await self.journal.save_entry(Entry(title="Walk", content="park", date="2026-01-01"))
        await self.journal.save_entry(Entry(title="Cook", content="soup", date="2026-01-02"))

        with mock.patch.object(self.journal.entries, "search") as search:
            everything = await self.journal.list_entries("   ")
        search.assert_not_called()
        self.assertEqual([e.title for e in everything], ["Cook", "Walk"])
        self.assertEqual([e.title for e in await self.journal.list_entries("PARK")], ["Walk"])

    async def test_toggle_quote_favorite(self):
        quote = await self.journal.toggle_quote_favorite(Quote("q", "a"))

        self.assertTrue(quote.is_favorite)
        self.assertEqual(await self.journal.quote_cache.get_favorite_quotes(), [Quote("q", "a")])

    async def test_reset_app_wipes_everything(self):
        await self.journal.save_entry(Entry(title="t", content="c", date="2026-01-01"))
        await self.journal.quote_cache.save_quote(Quote("q", "a"), "2026-01-01")
        await self.journal.settings.set_dark_mode(True)

        await self.journal.reset_app()

        self.assertEqual(await self.journal.entries.count(), 0)
        self.assertIsNone(await self.journal.quote_cache.get_last_quote())
        self.assertFalse(await self.journal.settings.get_dark_mode())

    async def test_injected_quote_service_is_used(self):
        async def fetch():
            return Quote("injected", "Test")

        service = QuoteService(self.journal.quote_cache, fetcher=fetch, today=lambda: "2026-01-05")
        journal = Journal(
            self.journal.entries,
            self.journal.users,
            self.journal.quote_cache,
            self.journal.settings,
            quote_service=service,
        )

        self.assertEqual(await journal.quotes.fetch_quote(), Quote("injected", "Test"))


if __name__ == "__main__":
    unittest.main()
