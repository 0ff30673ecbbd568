import io
import tempfile
import unittest
from unittest import mock

from quotejournal import app
from quotejournal.logic import Journal
from quotejournal.models import Quote
from quotejournal.quotes import QuoteFetchError, QuoteService


class AppMainTests(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)
        self.cfg = {"data_dir": self.temp_dir.name, "log_level": "WARNING"}

    def _run(self, fetch, argv):
        original = Journal.from_config

        def build(cfg):
            journal = original(cfg)
            journal.quotes = QuoteService(journal.quote_cache, fetcher=fetch)
            return journal

        with mock.patch("quotejournal.app.load_config", return_value=self.cfg), \
                mock.patch("quotejournal.app.Journal.from_config", side_effect=build), \
                mock.patch("sys.stdout", new_callable=io.StringIO) as out, \
                mock.patch("sys.stderr", new_callable=io.StringIO) as err:
            with self.assertRaises(SystemExit) as ctx:
                app.main(argv)
        return ctx.exception.code, out.getvalue(), err.getvalue()

    def test_prints_quote_of_the_day(self):
        async def fetch():
            return Quote("Printed", "CLI")

        code, out, _ = self._run(fetch, [])

        self.assertEqual(code, 0)
        self.assertIn('"Printed" - CLI', out)

    def test_reports_when_no_quote_available(self):
        async def fetch():
            raise QuoteFetchError("offline")

        code, out, err = self._run(fetch, ["--refresh"])

        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("No quote available", err)


if __name__ == "__main__":
    unittest.main()
