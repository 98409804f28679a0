"""Bulk import of the postcode lookup table from a zipped CSV download."""

from __future__ import annotations

import csv
import logging
import sys
import zipfile
from pathlib import Path
from typing import Iterator, Optional

import httpx

from ..config import settings
from ..data.postcodes_repository import PostcodeRepository
from ..errors import InvalidInputError, PostcodeImportError
from ..models.domain import Coordinate, PostcodeRecord
from ..services.postcodes import normalize_postcode

DEFAULT_CHUNK_SIZE = 500
REQUIRED_COLUMNS = {"postcode", "latitude", "longitude"}

logger = logging.getLogger(__name__)


class PostcodeImporter:
    """Download, extract and load postcode coordinates in fixed-size chunks."""

    def __init__(
        self,
        repository: PostcodeRepository,
        *,
        url: Optional[str] = None,
        work_dir: Optional[Path] = None,
        csv_filename: Optional[str] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        client: Optional[httpx.Client] = None,
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        self.repository = repository
        self.url = url if url is not None else settings.postcode_import_url
        self.work_dir = Path(work_dir or settings.postcode_import_dir)
        self.csv_filename = csv_filename or settings.postcode_csv_filename
        self.chunk_size = chunk_size
        self._client = client

    def run(self) -> int:
        """Run the full import and return the number of postcodes loaded."""
        if not self.url:
            raise PostcodeImportError("Postcode import URL is not configured.")

        archive_path = self._download(self.url)
        csv_path: Optional[Path] = None
        try:
            csv_path = self._extract(archive_path)
            return self.import_csv(csv_path)
        finally:
            self._cleanup(archive_path, csv_path)

    def import_csv(self, csv_path: Path) -> int:
        """Load postcode rows from a local CSV file.

        Chunks are committed as they are written, so a failure part-way through
        leaves the earlier chunks in the table. Rows are upserted on the postcode
        key, so re-running the import after a failure is safe.
        """
        logger.info(f"Starting import from CSV: {csv_path}")
        loaded = 0
        chunk: list[PostcodeRecord] = []
        for record in self._iter_records(csv_path):
            chunk.append(record)
            if len(chunk) >= self.chunk_size:
                self._insert_chunk(chunk)
                loaded += len(chunk)
                chunk = []
                logger.info(f"Progress: {loaded} postcodes imported")
        if chunk:
            self._insert_chunk(chunk)
            loaded += len(chunk)

        logger.info(f"Import complete, processed {loaded} postcodes")
        return loaded

    def _download(self, url: str) -> Path:
        logger.info(f"Downloading postcodes file from: {url}")
        client = self._client or httpx.Client(timeout=httpx.Timeout(settings.http_timeout_seconds, connect=10.0))
        try:
            response = client.get(url, follow_redirects=True)
        except httpx.HTTPError as exc:
            raise PostcodeImportError(f"Failed to download file from: {url}: {exc}") from exc
        finally:
            if self._client is None:
                client.close()

        if response.status_code != 200:
            raise PostcodeImportError(f"Failed to download file from: {url} (HTTP {response.status_code})")

        self.work_dir.mkdir(parents=True, exist_ok=True)
        archive_path = self.work_dir / "postcodes.zip"
        archive_path.write_bytes(response.content)
        logger.info(f"Zip file saved to {archive_path}")
        return archive_path

    def _extract(self, archive_path: Path) -> Path:
        logger.info(f"Extracting {archive_path}")
        try:
            with zipfile.ZipFile(archive_path) as archive:
                archive.extractall(self.work_dir)
        except zipfile.BadZipFile as exc:
            raise PostcodeImportError(f"Failed to open zip file: {archive_path}") from exc

        csv_path = self.work_dir / self.csv_filename
        if not csv_path.is_file():
            raise PostcodeImportError(f"Failed to find CSV file: {csv_path}")
        return csv_path

    def _iter_records(self, csv_path: Path) -> Iterator[PostcodeRecord]:
        with csv_path.open(mode="r", encoding="utf-8-sig", newline="") as handle:
            reader = csv.DictReader(handle)
            if not reader.fieldnames:
                raise PostcodeImportError(f"CSV file '{csv_path}' is missing a header row.")
            missing = REQUIRED_COLUMNS - {name.strip().lower() for name in reader.fieldnames}
            if missing:
                raise PostcodeImportError(f"CSV file missing columns: {', '.join(sorted(missing))}")

            for line_number, row in enumerate(reader, start=2):
                row = {(key or "").strip().lower(): value for key, value in row.items()}
                try:
                    yield PostcodeRecord(
                        postcode=normalize_postcode(row["postcode"]),
                        location=Coordinate(float(row["latitude"]), float(row["longitude"])),
                    )
                except (InvalidInputError, TypeError, ValueError) as e:
                    logger.warning(f"Skipping invalid postcode row {line_number}: {e}")

    def _insert_chunk(self, chunk: list[PostcodeRecord]) -> None:
        try:
            self.repository.insert_many(chunk)
        except Exception as exc:
            raise PostcodeImportError(f"Failed to insert chunk: {exc}") from exc

    def _cleanup(self, archive_path: Path, csv_path: Optional[Path]) -> None:
        for path in (archive_path, csv_path):
            if path is None:
                continue
            if path.exists():
                path.unlink()
                logger.info(f"Deleted {path}")
            else:
                logger.warning(f"File not found for deletion: {path}")


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    from ..api.dependencies import get_postcode_repository

    importer = PostcodeImporter(
        get_postcode_repository(),
        chunk_size=settings.postcode_import_chunk_size,
    )
    try:
        importer.run()
    except PostcodeImportError as exc:
        logger.error(str(exc))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
