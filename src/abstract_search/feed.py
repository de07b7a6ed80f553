"""Streaming reader for Wikipedia abstract dumps.

The dump is a (usually gzip-compressed) XML document shaped like::

    <feed>
      <doc>
        <title>Wikipedia: Anarchism</title>
        <url>https://en.wikipedia.org/wiki/Anarchism</url>
        <abstract>Anarchism is a political philosophy ...</abstract>
        <links>...</links>
      </doc>
      ...
    </feed>

Records are yielded one ``<doc>`` at a time and parsed elements are
released immediately, so memory stays flat regardless of dump size.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import gzip
import logging
from pathlib import Path
from typing import IO

from lxml import etree  # type: ignore[import-untyped]

from abstract_search.domain.model import RawRecord


logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"
DOC_TAG = "doc"


class FeedError(RuntimeError):
    """The feed could not be read to the end (missing, corrupt, truncated)."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


@contextmanager
def _open_feed(path: Path) -> Iterator[IO[bytes]]:
    with path.open("rb") as raw:
        magic = raw.read(len(GZIP_MAGIC))
        raw.seek(0)
        if magic == GZIP_MAGIC:
            with gzip.GzipFile(fileobj=raw, mode="rb") as stream:
                yield stream
        else:
            yield raw


def _record_from_element(element: etree._Element) -> RawRecord:
    return RawRecord(
        title=element.findtext("title", default=""),
        body=element.findtext("abstract", default=""),
        url=element.findtext("url"),
    )


def iter_abstract_records(path: Path | str) -> Iterator[RawRecord]:
    """Yield a :class:`RawRecord` for every ``<doc>`` in the dump at ``path``.

    The iterator is single pass. Any failure to read the stream to the end is
    raised as :class:`FeedError`; records yielded before the failure must not
    be treated as a complete corpus.
    """
    feed_path = Path(path)
    count = 0
    try:
        with _open_feed(feed_path) as stream:
            for _event, element in etree.iterparse(stream, events=("end",), tag=DOC_TAG, huge_tree=True):
                yield _record_from_element(element)
                count += 1
                element.clear(keep_tail=True)
                while element.getprevious() is not None:
                    del element.getparent()[0]
    except etree.XMLSyntaxError as exc:
        raise FeedError(feed_path, f"malformed XML after {count} documents: {exc}") from exc
    except EOFError as exc:
        raise FeedError(feed_path, f"truncated stream after {count} documents: {exc}") from exc
    except OSError as exc:
        raise FeedError(feed_path, f"unreadable feed after {count} documents: {exc}") from exc

    logger.debug("Found %d documents in %s", count, feed_path)
