"""
Unit tests for utils.py
"""

import logging
import tempfile
from pathlib import Path

import pytest

from dbdump.models import Classification, DumpResult, TableInfo
from dbdump.utils import (
    format_bytes,
    print_dry_run_info,
    print_summary,
    print_table_list,
    setup_logging,
)


class TestSetupLogging:
    """Tests for setup_logging function."""

    @pytest.fixture(autouse=True)
    def reset_logging(self):
        """Reset logging configuration before each test."""
        root_logger = logging.getLogger()
        # Remove all handlers
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
        # Reset level to NOTSET so basicConfig will work
        root_logger.setLevel(logging.NOTSET)
        yield

    def test_default_log_level(self):
        """Test default log level is INFO."""
        setup_logging({})
        assert logging.getLogger().level == logging.INFO

    def test_custom_log_level(self):
        """Test setting custom log level."""
        setup_logging({"level": "DEBUG"})
        assert logging.getLogger().level == logging.DEBUG

    def test_log_level_case_insensitive(self):
        """Test log level is case insensitive."""
        setup_logging({"level": "warning"})
        assert logging.getLogger().level == logging.WARNING

    def test_log_to_file(self):
        """Test logging to a file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / "test.log"
            setup_logging({"file": str(log_file)})

            logging.info("Test message")

            assert log_file.exists()
            for handler in logging.getLogger().handlers[:]:
                handler.close()

    def test_creates_log_directory(self):
        """Test that log directory is created if it doesn't exist."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / "nested" / "dir" / "test.log"
            setup_logging({"file": str(log_file)})

            assert log_file.parent.exists()
            for handler in logging.getLogger().handlers[:]:
                handler.close()


class TestFormatBytes:
    """Tests for format_bytes function."""

    @pytest.mark.parametrize("size, expected", [
        (0, "0 B"),
        (1023, "1023 B"),
        (1024, "1.0 KB"),
        (1536, "1.5 KB"),
        (1024 ** 2, "1.0 MB"),
        (5 * 1024 ** 3, "5.0 GB"),
        (2 * 1024 ** 4, "2.0 TB"),
        (3 * 1024 ** 5, "3072.0 TB"),
    ])
    def test_format(self, size, expected):
        assert format_bytes(size) == expected


class TestPrintDryRunInfo:
    """Tests for print_dry_run_info function."""

    def test_lists_excluded_tables(self, caplog):
        classification = Classification(
            excluded=("audits", "telescope_entries"),
            included=("users",)
        )

        with caplog.at_level(logging.INFO):
            print_dry_run_info(
                classification,
                "/tmp/shop.sql",
                {"audits": "audits", "telescope_entries": "telescope_*"}
            )

        assert "DRY RUN MODE" in caplog.text
        assert "structure for 3 table(s)" in caplog.text
        assert "exclude data for 2 table(s)" in caplog.text
        assert "- audits" in caplog.text
        assert "- telescope_entries (pattern 'telescope_*')" in caplog.text
        assert "Would create dump file: /tmp/shop.sql" in caplog.text

    def test_exact_match_has_no_pattern_note(self, caplog):
        classification = Classification(excluded=("audits",))
        with caplog.at_level(logging.INFO):
            print_dry_run_info(classification, "out.sql", {"audits": "audits"})
        assert "(pattern" not in caplog.text

    def test_nothing_excluded(self, caplog):
        classification = Classification(included=("users",))
        with caplog.at_level(logging.INFO):
            print_dry_run_info(classification, "out.sql")
        assert "No tables excluded" in caplog.text


class TestPrintTableList:
    """Tests for print_table_list function."""

    def test_marks_excluded(self, capsys):
        tables = [
            TableInfo(name="audits", row_count=1000, size_display="1.0 MB"),
            TableInfo(name="users", row_count=10, size_display="16.0 KB"),
        ]
        print_table_list("shop", tables, {"audits"})

        out = capsys.readouterr().out
        lines = out.splitlines()
        audit_line = next(line for line in lines if "audits" in line)
        users_line = next(line for line in lines if "users" in line)
        assert audit_line.startswith(" x ")
        assert users_line.startswith("   ")
        assert "Tables in database 'shop'" in out
        assert "Total: 2 tables, 1 with data excluded" in out


class TestPrintSummary:
    """Tests for print_summary function."""

    def test_summary(self, caplog):
        result = DumpResult(
            output_file="/tmp/shop.sql",
            duration=2.5,
            excluded_tables=["audits"],
            file_size=2048,
            file_size_display="2.0 KB"
        )
        with caplog.at_level(logging.INFO):
            print_summary(result)

        assert "DUMP COMPLETE" in caplog.text
        assert "/tmp/shop.sql (2.0 KB)" in caplog.text
        assert "Excluded 1 table(s)" in caplog.text

    def test_summary_without_excludes(self, caplog):
        with caplog.at_level(logging.INFO):
            print_summary(DumpResult(output_file="out.sql"))
        assert "Excluded" not in caplog.text
