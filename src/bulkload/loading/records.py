"""
Record reading for delimited source files.

Shared by the loader and the pre-flight validator so that both see the same
records, line numbers and failures for a file.
"""

import csv
from collections.abc import Iterable, Iterator

from bulkload.config.settings import SourceConfig
from bulkload.loading.errors import FormatFailure

TERMINATOR_NAMES = {"\n": "LF", "\r\n": "CRLF", "\r": "CR"}


def _line_ending(line: str) -> str | None:
    if line.endswith("\r\n"):
        return "\r\n"
    if line.endswith("\n"):
        return "\n"
    if line.endswith("\r"):
        return "\r"
    return None


class _Lines:
    """Physical lines of a file, remembering how the last one ended."""

    def __init__(self, lines: Iterable[str]) -> None:
        self._lines = iter(lines)
        self.ending: str | None = None

    def __iter__(self) -> "_Lines":
        return self

    def __next__(self) -> str:
        line = next(self._lines)
        self.ending = _line_ending(line)
        return line


def read_records(
    f: Iterable[str],
    source: SourceConfig,
    delimiter: str,
) -> Iterator[tuple[int, list[str]]]:
    """
    Yield (line, fields) for every data record of an open source file.

    The file must be opened with newline="" so that line endings reach the
    reader untranslated. Every record, header included, must end with the
    configured row terminator; only the last line of the file may end
    without one. Line breaks inside quoted fields are not checked. Header
    records and blank lines are skipped.

    Args:
        f: Open text file (or any iterable of lines).
        source: Source dialect (quote char, terminator, header rows).
        delimiter: Field delimiter.

    Yields:
        Line number on which the record ends and its fields.

    Raises:
        FormatFailure: If a record is malformed, ends with another
            terminator, or the file cannot be decoded.
    """
    lines = _Lines(f)
    reader = csv.reader(
        lines,
        delimiter=delimiter,
        quotechar=source.quote_char,
        strict=True,
    )
    expected = source.row_terminator
    try:
        for index, fields in enumerate(reader):
            if lines.ending is not None and lines.ending != expected:
                msg = (
                    f"Record ends with {TERMINATOR_NAMES[lines.ending]}, "
                    f"expected {TERMINATOR_NAMES[expected]}"
                )
                raise FormatFailure("malformed_record", msg, line=reader.line_num)
            if index < source.header_rows or not fields:
                continue
            yield reader.line_num, fields
    except csv.Error as e:
        raise FormatFailure("malformed_record", str(e), line=reader.line_num) from e
    except UnicodeDecodeError as e:
        msg = f"File is not valid {source.encoding}: {e.reason}"
        raise FormatFailure("encoding", msg, line=reader.line_num + 1) from e
