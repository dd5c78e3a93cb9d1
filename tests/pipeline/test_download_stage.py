"""
Unit tests for the download stage.
"""

import logging

import pytest

from qtkit.core.exceptions import FetchFailure, TransientFetchError
from qtkit.core.process import ExitPolicy
from qtkit.pipeline.download import PART_SUFFIX, DownloadStage, build_curl_command


class TestBuildCurlCommand:
    """Test curl command line."""

    def test_resumable_download(self):
        """Test curl resumes into the part file and follows redirects."""
        command = build_curl_command("https://example.invalid/qt.tar.xz", "qt.tar.xz.part")

        assert command == [
            "curl",
            "--continue-at", "-",
            "--remote-name-all",
            "--location",
            "--output", "qt.tar.xz.part",
            "https://example.invalid/qt.tar.xz",
        ]


class TestDownloadStage:
    """Test DownloadStage with a fake curl."""

    def test_downloads_into_part_file_then_renames(self, simulating_runner, cache_dir, qt_5_12):
        """Test a successful download leaves only the final archive."""
        stage = DownloadStage(cache_dir, simulating_runner)

        processed = stage.run([qt_5_12])

        assert processed == [qt_5_12]
        assert qt_5_12.archive_path.is_file()
        assert not (cache_dir / (qt_5_12.archive_name + PART_SUFFIX)).exists()

        (call,) = simulating_runner.calls_to("curl")
        assert call.cwd == cache_dir
        assert call.command[-1] == qt_5_12.download_url
        assert qt_5_12.archive_name + PART_SUFFIX in call.command

    def test_retries_transient_failure(self, simulating_runner, cache_dir, qt_5_12, caplog):
        """Test exit code 56 is retried and a later success completes the download."""
        simulating_runner.exit_codes["curl"] = [56, 0]
        stage = DownloadStage(cache_dir, simulating_runner)

        with caplog.at_level(logging.WARNING):
            stage.run([qt_5_12])

        assert len(simulating_runner.calls_to("curl")) == 2
        assert qt_5_12.archive_path.is_file()
        assert "retrying" in caplog.text

    @pytest.mark.parametrize("code", [18, 56])
    def test_gives_up_after_three_attempts(self, fake_runner, cache_dir, qt_5_12, code):
        """Test persistent transient failures escalate after three attempts."""
        fake_runner.exit_codes["curl"] = code
        stage = DownloadStage(cache_dir, fake_runner)

        with pytest.raises(FetchFailure) as exc_info:
            stage.run([qt_5_12])

        assert len(fake_runner.calls_to("curl")) == 3
        error = exc_info.value
        assert error.tool_exit_code == code
        assert error.attempts == 3
        assert error.version == "5.12.3"
        assert error.url == qt_5_12.download_url
        assert isinstance(error.__cause__, TransientFetchError)
        assert "after 3 attempts" in str(error)
        assert not qt_5_12.archive_path.exists()

    def test_fatal_error_is_not_retried(self, fake_runner, cache_dir, qt_5_12):
        """Test non-transient curl errors fail immediately."""
        fake_runner.exit_codes["curl"] = 1
        stage = DownloadStage(cache_dir, fake_runner)

        with pytest.raises(FetchFailure) as exc_info:
            stage.run([qt_5_12])

        assert len(fake_runner.calls_to("curl")) == 1
        assert exc_info.value.tool_exit_code == 1
        assert exc_info.value.exit_code == 2
        assert str(exc_info.value) == (
            f"Failed to download Qt source for version 5.12.3 from "
            f"{qt_5_12.download_url} (curl exit code 1)"
        )

    def test_custom_policy(self, fake_runner, cache_dir, qt_5_12):
        """Test the attempt count comes from the policy."""
        fake_runner.exit_codes["curl"] = 56
        stage = DownloadStage(
            cache_dir, fake_runner, policy=ExitPolicy(frozenset({56}), max_attempts=5)
        )

        with pytest.raises(FetchFailure):
            stage.run([qt_5_12])

        assert len(fake_runner.calls_to("curl")) == 5

    def test_skips_downloaded_archive(self, fake_runner, cache_dir, qt_5_12, caplog):
        """Test an archive already in the cache isn't downloaded again."""
        qt_5_12.archive_path.write_bytes(b"archive")
        stage = DownloadStage(cache_dir, fake_runner)

        with caplog.at_level(logging.INFO):
            assert stage.run([qt_5_12]) == []

        assert fake_runner.calls == []
        assert "All Qt sources already present" in caplog.text

    def test_skips_unpacked_tree(self, fake_runner, cache_dir, qt_5_12):
        """Test an unpacked tree counts as downloaded even without the archive."""
        qt_5_12.path.mkdir()
        stage = DownloadStage(cache_dir, fake_runner)

        assert stage.run([qt_5_12]) == []
        assert fake_runner.calls == []

    def test_deduplicates_versions(self, simulating_runner, cache_dir, qt_5_12):
        """Test each version is downloaded once."""
        stage = DownloadStage(cache_dir, simulating_runner)

        stage.run([qt_5_12, qt_5_12])

        assert len(simulating_runner.calls_to("curl")) == 1

    def test_stops_at_first_failure(self, fake_runner, cache_dir, qt_5_12, qt_5_9):
        """Test later versions aren't attempted after a failure."""
        fake_runner.exit_codes["curl"] = 22
        stage = DownloadStage(cache_dir, fake_runner)

        with pytest.raises(FetchFailure):
            stage.run([qt_5_9, qt_5_12])

        (call,) = fake_runner.calls_to("curl")
        assert call.command[-1] == qt_5_9.download_url

    def test_progress_messages(self, simulating_runner, cache_dir, qt_5_12, qt_5_9, caplog):
        """Test every download is announced with a counter."""
        stage = DownloadStage(cache_dir, simulating_runner)

        with caplog.at_level(logging.INFO):
            stage.run([qt_5_9, qt_5_12])

        assert "=> Downloading missing Qt sources" in caplog.text
        assert "(1/2)  Downloading sources for version 5.9.0" in caplog.text
        assert "(2/2)  Downloading sources for version 5.12.3" in caplog.text
