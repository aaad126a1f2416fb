from __future__ import annotations

import os
import tempfile
import time
import unittest
from pathlib import Path
from unittest.mock import patch

import httpx

from askshell.config.models import UpdateSettings
from askshell.errors import UpdateError
from askshell.runtime_logging import configure_runtime_logging
from askshell.version_check import (
    BackgroundVersionCheck,
    check_for_update,
    fetch_latest_version,
    is_newer,
    read_cached_version,
    self_update,
)


def _pypi(version: str) -> httpx.MockTransport:
    return httpx.MockTransport(lambda request: httpx.Response(200, json={"info": {"version": version}}))


def _offline() -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    return httpx.MockTransport(handler)


class VersionCheckTests(unittest.TestCase):
    def setUp(self) -> None:
        configure_runtime_logging(level="off")

    def test_is_newer(self) -> None:
        self.assertTrue(is_newer("0.5.0", "0.4.0"))
        self.assertTrue(is_newer("1.0.0", "0.10.2"))
        self.assertFalse(is_newer("0.4.0", "0.4.0"))
        self.assertFalse(is_newer("0.3.9", "0.4.0"))
        self.assertFalse(is_newer("garbage", "0.4.0"))

    def test_fetch_latest_version(self) -> None:
        self.assertEqual(fetch_latest_version("askshell", transport=_pypi("0.9.1")), "0.9.1")

    def test_check_fetches_and_caches(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            cache = Path(tmp) / "last-update-check"

            latest = check_for_update(current="0.4.0", cache_path=cache, transport=_pypi("0.5.0"))

            self.assertEqual(latest, "0.5.0")
            self.assertEqual(cache.read_text(encoding="utf-8"), "0.5.0")

            # A fresh cache answers without the network.
            again = check_for_update(current="0.4.0", cache_path=cache, transport=_offline())
            self.assertEqual(again, "0.5.0")

    def test_stale_cache_is_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            cache = Path(tmp) / "last-update-check"
            cache.write_text("0.5.0", encoding="utf-8")
            old = time.time() - 48 * 3600
            os.utime(cache, (old, old))

            self.assertIsNone(read_cached_version(cache, 24 * 3600))
            latest = check_for_update(current="0.4.0", cache_path=cache, transport=_pypi("0.6.0"))

        self.assertEqual(latest, "0.6.0")

    def test_check_never_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            cache = Path(tmp) / "last-update-check"

            self.assertIsNone(check_for_update(current="0.4.0", cache_path=cache, transport=_offline()))
            self.assertFalse(cache.exists())

    def test_up_to_date_returns_none(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            cache = Path(tmp) / "last-update-check"

            self.assertIsNone(check_for_update(current="0.5.0", cache_path=cache, transport=_pypi("0.5.0")))


class BackgroundVersionCheckTests(unittest.TestCase):
    def setUp(self) -> None:
        configure_runtime_logging(level="off")

    def test_notice_after_completion(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            check = BackgroundVersionCheck(
                UpdateSettings(),
                current="0.4.0",
                cache_path=Path(tmp) / "cache",
                transport=_pypi("0.5.0"),
            )
            check.start()
            assert check._thread is not None
            check._thread.join(timeout=5)

            notice = check.notice()

        self.assertEqual(
            notice,
            'A new version of ask is available (0.5.0). Run "ask --update" to upgrade.',
        )
        # The slot is drained after one read.
        self.assertIsNone(check.notice())

    def test_disabled_check_never_starts(self) -> None:
        check = BackgroundVersionCheck(UpdateSettings(check_enabled=False))
        check.start()

        self.assertIsNone(check._thread)
        self.assertIsNone(check.notice())


class SelfUpdateTests(unittest.TestCase):
    def setUp(self) -> None:
        configure_runtime_logging(level="off")

    def test_already_up_to_date(self) -> None:
        with patch("askshell.version_check.subprocess.run") as run_mock:
            message = self_update(current="0.5.0", transport=_pypi("0.5.0"))

        self.assertEqual(message, "already up to date (v0.5.0)")
        run_mock.assert_not_called()

    def test_installs_newer_release(self) -> None:
        with tempfile.TemporaryDirectory() as tmp, patch(
            "askshell.version_check.update_cache_path", return_value=Path(tmp) / "cache"
        ), patch("askshell.version_check.subprocess.run") as run_mock:
            run_mock.return_value.returncode = 0
            message = self_update(current="0.4.0", transport=_pypi("0.5.0"))

        self.assertEqual(message, "updated to 0.5.0")
        args = run_mock.call_args.args[0]
        self.assertEqual(args[1:5], ["-m", "pip", "install", "--upgrade"])
        self.assertEqual(args[-1], "askshell==0.5.0")

    def test_pip_failure(self) -> None:
        with patch("askshell.version_check.subprocess.run") as run_mock:
            run_mock.return_value.returncode = 1
            run_mock.return_value.stderr = "no matching distribution\n"
            with self.assertRaises(UpdateError):
                self_update(current="0.4.0", transport=_pypi("0.5.0"))

    def test_network_failure(self) -> None:
        with self.assertRaises(UpdateError):
            self_update(current="0.4.0", transport=_offline())


if __name__ == "__main__":
    unittest.main()
