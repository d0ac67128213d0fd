import csv
import logging
from typing import Iterable, Iterator, List

from .errors import SourceError
from .models import Job

log = logging.getLogger(__name__)

HEADER = ["suggestedName", "Link"]

SAMPLE_ROWS = [
    ["Jack Jones Portfolio", "https://www.jackljones.com/"],
    ["Books", "https://books.toscrape.com/"],
    ["This is a test of getting, JSON", "https://jsonplaceholder.typicode.com/todos/1"],
]


def ensure_links_file(path: str) -> bool:
    """
    Create `path` with a header and sample links if it does not exist yet.
    Returns True if the file was created. Never overwrites.
    """
    try:
        with open(path, "x", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(HEADER)
            writer.writerows(SAMPLE_ROWS)
    except FileExistsError:
        return False
    except OSError as e:
        raise SourceError(f"Cannot create links file {path}: {e}")
    log.info("Created sample links file %s", path, extra={"event": "links_file_created"})
    return True


def _decoded_lines(raw_lines: Iterable[bytes], path: str) -> Iterator[str]:
    for lineno, raw in enumerate(raw_lines, start=1):
        try:
            yield raw.decode("utf-8-sig" if lineno == 1 else "utf-8")
        except UnicodeDecodeError as e:
            log.warning("Skipping line %d of %s: %s", lineno, path, e,
                        extra={"event": "record_skipped"})


def parse_jobs(lines: Iterable[str], source: str = "<input>") -> Iterator[Job]:
    """
    Jobs from CSV text lines. The first record is a header and is skipped.
    Records without exactly two fields are skipped with a warning.
    Blank fields are kept; validation happens when the job is processed.
    """
    reader = csv.reader(lines, strict=True)
    try:
        next(reader)
    except StopIteration:
        return
    except csv.Error as e:
        log.warning("Skipping header of %s: %s", source, e, extra={"event": "record_skipped"})

    while True:
        try:
            record: List[str] = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            log.warning("Skipping record %d of %s: %s", reader.line_num, source, e,
                        extra={"event": "record_skipped"})
            continue

        if not record:
            continue
        if len(record) != 2:
            log.warning("Skipping record %d of %s: expected 2 fields, got %d",
                        reader.line_num, source, len(record),
                        extra={"event": "record_skipped"})
            continue

        yield Job(suggested_name=record[0].strip(), target_url=record[1].strip())


def read_jobs(path: str) -> Iterator[Job]:
    """Open `path` now so a missing file fails before any work starts."""
    try:
        f = open(path, "rb")
    except OSError as e:
        raise SourceError(f"Cannot open links file {path}: {e}")
    return _iter_file(f, path)


def _iter_file(f, path: str) -> Iterator[Job]:
    with f:
        yield from parse_jobs(_decoded_lines(f, path), source=path)
