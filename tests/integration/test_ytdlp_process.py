"""
Integration tests for ToolProcess.

A short Python child stands in for yt-dlp so real pipes, exit codes and
kills are exercised without network access.
"""

import sys
import textwrap

import pytest

from reeldrop.application.extraction_service import ExtractionService
from reeldrop.domain.errors import ExtractionFailedError, ExtractionTimeoutError
from reeldrop.infrastructure.ytdlp_process import ToolProcess


def python_child(source: str):
    return [sys.executable, "-c", textwrap.dedent(source)]


@pytest.mark.integration
class TestToolProcess:

    def test_stdout_lines_in_order(self):
        process = ToolProcess.spawn(python_child("""
            import sys
            print("[youtube] abc: Downloading webpage")
            print("")
            sys.stdout.write("[download]  10.0% of 1MiB\\r[download] 100% of 1MiB\\n")
            print('[Merger] Merging formats into "/tmp/Clip.mkv"')
        """))

        lines = list(process.stdout_lines())
        exit_code = process.wait()

        assert exit_code == 0
        assert lines == [
            "[youtube] abc: Downloading webpage",
            "[download]  10.0% of 1MiB",
            "[download] 100% of 1MiB",
            '[Merger] Merging formats into "/tmp/Clip.mkv"',
        ]

    def test_stderr_is_drained_separately(self):
        received = []
        process = ToolProcess.spawn(python_child("""
            import sys
            for i in range(3):
                print(f"warning {i}", file=sys.stderr)
            print("ERROR: Unsupported URL", file=sys.stderr)
            sys.exit(1)
        """))

        process.start_stderr_drain(received.append)
        assert list(process.stdout_lines()) == []
        exit_code = process.wait()

        assert exit_code == 1
        assert received == ["warning 0", "warning 1", "warning 2", "ERROR: Unsupported URL"]
        assert process.last_stderr_line == "ERROR: Unsupported URL"

    def test_utf8_output(self):
        process = ToolProcess.spawn(python_child("""
            print("[download] Destination: /tmp/Café – live.mp3")
        """))

        lines = list(process.stdout_lines())
        process.wait()

        assert lines == ["[download] Destination: /tmp/Café – live.mp3"]

    def test_kill_after_deadline(self):
        process = ToolProcess.spawn(python_child("""
            import time
            print("started", flush=True)
            time.sleep(30)
        """))

        process.kill_after(0.5)
        list(process.stdout_lines())
        exit_code = process.wait()

        assert process.timed_out is True
        assert exit_code != 0

    def test_missing_executable(self, tmp_path):
        with pytest.raises(OSError):
            ToolProcess.spawn([str(tmp_path / "no-such-tool")])


@pytest.mark.integration
class TestExtractionServiceWithRealProcess:
    """ExtractionService driving a fake tool executable."""

    @pytest.fixture
    def fake_tool(self, tmp_path):
        """Executable script printing yt-dlp style lines for its -o argument."""
        script = tmp_path / "fake-yt-dlp"
        script.write_text(textwrap.dedent(f"""\
            #!{sys.executable}
            import os, sys, time
            args = sys.argv[1:]
            url = args[-1]
            template = args[args.index("-o") + 1]
            target = template.replace("%(title)s", "Clip").replace("%(ext)s", "mp4")
            if "fail" in url:
                print("ERROR: Unsupported URL: " + url, file=sys.stderr)
                sys.exit(1)
            if "slow" in url:
                time.sleep(30)
            print("[download] Destination: " + target.replace(".mp4", ".f137.mp4"))
            with open(target, "wb") as f:
                f.write(b"media")
            print('[Merger] Merging formats into "' + target + '"')
        """), encoding="utf-8")
        script.chmod(0o755)
        return str(script)

    @pytest.fixture
    def service(self, fake_tool, storage_repository, ledger):
        return ExtractionService(storage_repository.base_path, ledger, binary=fake_tool)

    def test_successful_extraction(self, service, storage_repository, memory_ledger_repository):
        result = service.run("https://example.com/watch?v=1", "mp4")

        assert result.file_name == "Clip.mp4"
        assert storage_repository.resolve("Clip.mp4") is not None
        assert "Clip.mp4" in memory_ledger_repository.document

    def test_failed_extraction(self, service):
        with pytest.raises(ExtractionFailedError) as exc_info:
            service.run("https://example.com/fail", "mp4")

        assert exc_info.value.exit_code == 1
        assert "Unsupported URL" in str(exc_info.value)

    def test_timed_out_extraction(self, service, memory_ledger_repository):
        with pytest.raises(ExtractionTimeoutError):
            service.run("https://example.com/slow", "mp4", timeout=0.5)

        assert memory_ledger_repository.document == {}
