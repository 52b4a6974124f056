# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import logging
from pathlib import Path
from typing import List, Optional

import typer

from ..adapters.filesystem.local_fs import LocalFS
from ..adapters.hashing.sha256 import SHA256Hasher
from ..domain.config import DEFAULT_TRIVIAL_EXTENSIONS, DEFAULT_WORKERS, RotConfig
from ..domain.errors import EmptyIndex, FilesystemError
from ..domain.models import RotResult
from ..logging_config import setup_logging
from ..services import ReportService, RotService

setup_logging()

app = typer.Typer(help="rotscan - find Redundant, Obsolete and Trivial files")

logger = logging.getLogger(__name__)

EXIT_EMPTY_INDEX = 1
EXIT_BAD_ROOT = 2


@app.callback()
def main() -> None:
    """
    Classify files under a directory into Redundant, Obsolete and Trivial reports.
    """


def _wire(config: RotConfig) -> RotService:
    """
    Minimal composition root:
      LocalFS + SHA256Hasher + RotService
    """
    return RotService(LocalFS(), SHA256Hasher(), config)


def _summarise(result: RotResult, written: dict) -> None:
    dup_files = sum(len(s.members) for s in result.redundant)
    wasted = sum(s.wasted_bytes for s in result.redundant)
    counts = {
        "redundant": f"{len(result.redundant)} sets ({dup_files} files, {wasted} bytes reclaimable)",
        "obsolete": f"{len(result.obsolete)} files",
        "trivial": f"{len(result.trivial)} files",
    }
    typer.echo(f"Indexed {len(result.index)} files under {result.root}")
    for category, count in counts.items():
        target = written.get(category)
        where = f" -> {target}" if target else " (no report written)"
        typer.echo(f"  {category.capitalize()}: {count}{where}")
    if result.diagnostics:
        typer.echo(f"  Skipped {len(result.diagnostics)} unreadable entries")


@app.command()
def scan(
    path: Path = typer.Option(
        ...,
        "--path",
        help="Directory to scan",
    ),
    out: Path = typer.Option(
        Path("."),
        "--out",
        "--output",
        envvar="ROT_OUT",
        help="Directory that receives Redundant.csv, Obsolete.csv and Trivial.csv.",
        file_okay=False,
        resolve_path=True,
    ),
    years: str = typer.Option(
        "7",
        "--years",
        envvar="ROT_YEARS",
        help="Age threshold in years; invalid values fall back to 7.",
    ),
    timestamp: str = typer.Option(
        "modified",
        "--timestamp",
        envvar="ROT_TIMESTAMP",
        help="Timestamp compared to the age threshold: modified, accessed or created.",
        case_sensitive=False,
    ),
    ext: Optional[List[str]] = typer.Option(
        None,
        "--ext",
        help="Trivial extension (repeatable). Replaces the built-in list.",
    ),
    ignore: Optional[List[str]] = typer.Option(
        None,
        "--ignore",
        help="Glob of paths to leave out of the index (repeatable).",
    ),
    workers: str = typer.Option(
        str(DEFAULT_WORKERS),
        "--workers",
        help="Concurrent hashing tasks (1-8); invalid values fall back to 4.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        help="Suppress the final summary.",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
):
    """
    Index a directory once and write one CSV report per non-empty ROT category.
    """
    if verbose:
        setup_logging(verbose=True)
        logger.debug("Verbose logging enabled")

    config = RotConfig.from_values(
        years=years,
        timestamp_kind=timestamp,
        trivial_extensions=ext or None,
        workers=workers,
        ignore_patterns=ignore,
    )
    reports = ReportService(out)
    reports.clear()

    try:
        result = _wire(config).run(path)
    except FilesystemError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=EXIT_BAD_ROOT)
    except EmptyIndex as e:
        typer.echo(f"{e}; nothing to classify.", err=True)
        raise typer.Exit(code=EXIT_EMPTY_INDEX)

    for diag in result.diagnostics:
        logger.debug("Skipped: %s", diag)

    written = reports.write_all(result)

    if not quiet:
        _summarise(result, written)


@app.command()
def extensions():
    """
    Print the built-in trivial extension list.
    """
    for e in DEFAULT_TRIVIAL_EXTENSIONS:
        typer.echo(e)
