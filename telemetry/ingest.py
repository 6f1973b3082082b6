from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union


@contextmanager
def open_lines(path: Union[str, Path]) -> Iterator[Iterator[str]]:
    """
    Open a telemetry log and yield a lazy iterator over its lines.

    Trailing newlines are stripped. The file is closed when the block
    exits, including when ingestion aborts with an error.
    Missing or unreadable files raise OSError.
    """
    with open(path, encoding="utf-8") as f:
        yield (line.rstrip("\r\n") for line in f)
