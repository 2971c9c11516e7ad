"""
Two-pass mysqldump orchestration for dbdump.

The first pass writes the structure of every table. The second pass writes
row data for every table except the excluded ones, so excluded tables are
restored empty.
"""

import logging
import os
import shutil
import subprocess
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO

from .exceptions import DumpError
from .models import DumpOptions, DumpResult
from .utils import format_bytes


MYSQLDUMP = "mysqldump"

STRUCTURE_ARGS = [
    "--no-data",
    "--triggers",
    "--events",
    "--set-gtid-purged=OFF",
    "--column-statistics=0",
]

DATA_ARGS = [
    "--no-create-info",
    "--skip-triggers",
    "--skip-routines",
    "--skip-events",
    "--set-gtid-purged=OFF",
    "--column-statistics=0",
]


def check_mysqldump() -> str:
    """Return the path of the mysqldump binary or raise DumpError."""
    path = shutil.which(MYSQLDUMP)
    if path is None:
        raise DumpError("mysqldump is required but not found in PATH")
    return path


def default_output_file(database: str, now: Optional[datetime] = None) -> str:
    """Build `<database>_<timestamp>.sql` as an absolute path."""
    timestamp = (now or datetime.now()).strftime('%Y%m%d_%H%M%S')
    return str(Path(f"{database}_{timestamp}.sql").resolve())


class MySQLDumper:
    """Runs mysqldump for structure and then for data."""

    def __init__(self, options: DumpOptions):
        self.options = options

    def dump(self) -> DumpResult:
        """Perform the dump and return its result."""
        if self.options.dry_run:
            return DumpResult(
                output_file=self.options.output_file,
                excluded_tables=list(self.options.exclude_tables)
            )

        start = time.monotonic()
        output_path = Path(self.options.output_file)

        with self._open_output_file(output_path) as file_handle:
            logging.info("Dumping structure for all tables")
            self._run_pass("structure", self.build_structure_args(), file_handle)

            logging.info(
                f"Dumping data, skipping {len(self.options.exclude_tables)} excluded table(s)"
            )
            self._run_pass("data", self.build_data_args(), file_handle)

        file_size = output_path.stat().st_size
        return DumpResult(
            output_file=str(output_path),
            duration=time.monotonic() - start,
            excluded_tables=list(self.options.exclude_tables),
            file_size=file_size,
            file_size_display=format_bytes(file_size)
        )

    def _open_output_file(self, output_path: Path) -> TextIO:
        """Create or truncate the output file, readable by the owner only."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(output_path, os.O_CREAT | os.O_TRUNC | os.O_WRONLY, 0o600)
        return os.fdopen(fd, 'w', encoding='utf-8')

    def build_common_args(self) -> list[str]:
        """Connection and performance flags shared by both passes.

        The password is passed through MYSQL_PWD, never on the command line.
        """
        conn = self.options.connection
        return [
            "-h", conn.host,
            "-P", str(conn.port),
            "-u", conn.user,
            "--single-transaction",
            "--quick",
            "--lock-tables=false",
            "--max-allowed-packet=1G",
            "--net-buffer-length=1M",
            "--skip-comments",
            "--hex-blob",
        ]

    def build_structure_args(self) -> list[str]:
        return self.build_common_args() + STRUCTURE_ARGS + [self.options.connection.database]

    def build_data_args(self) -> list[str]:
        database = self.options.connection.database
        ignore = [f"--ignore-table={database}.{table}" for table in self.options.exclude_tables]
        return self.build_common_args() + DATA_ARGS + ignore + [database]

    def _build_env(self) -> dict[str, str]:
        env = dict(os.environ)
        if self.options.connection.password:
            env["MYSQL_PWD"] = self.options.connection.password
        return env

    def _run_pass(self, name: str, args: list[str], file_handle: TextIO) -> None:
        logging.debug(f"Running {MYSQLDUMP} {' '.join(args)}")
        file_handle.flush()

        try:
            completed = subprocess.run(
                [MYSQLDUMP, *args],
                stdout=file_handle,
                env=self._build_env(),
                check=False
            )
        except OSError as e:
            raise DumpError(f"mysqldump {name} failed to start: {e}") from e

        if completed.returncode != 0:
            raise DumpError(f"mysqldump {name} failed with exit code {completed.returncode}")
