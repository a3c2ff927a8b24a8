"""
Single pass insert size aggregation over an alignment file.

A run moves strictly forward through its states::

    OPENING -> STREAMING -> FINALIZING -> RENDERING -> DONE

and ends in ERRORED when the input cannot be opened, the decoder stops making
progress, or the chart cannot be written. A record that fails to decode is
skipped and counted, it never aborts the run.
"""

import enum
import time
from dataclasses import dataclass

import click

from insert_size_plot.alignment_source import open_alignment_file
from insert_size_plot.errors import RecordParseError, StreamReadError
from insert_size_plot.histogram import DEFAULT_MAX_INSERT_SIZE, InsertSizeHistogram
from insert_size_plot.plot_histogram import plot_histogram
from insert_size_plot.read_filter import DEFAULT_FILTER, extract_insert_size
from insert_size_plot.summary_statistics import InsertSizeSummary, summarize

# parse errors echoed in full before only counting them
MAX_REPORTED_PARSE_ERRORS = 10


class RunState(enum.Enum):
    OPENING = "opening"
    STREAMING = "streaming"
    FINALIZING = "finalizing"
    RENDERING = "rendering"
    DONE = "done"
    ERRORED = "errored"


@dataclass
class StreamCounts:
    records_read: int = 0
    eligible: int = 0
    ineligible: int = 0
    parse_errors: int = 0


@dataclass
class AggregationResult:
    histogram: InsertSizeHistogram
    summary: InsertSizeSummary
    counts: StreamCounts


def aggregate_records(records, histogram, read_filter=None, counts=None):
    """Filter, extract and record every read of ``records`` into ``histogram``.

    Also usable on its own to build partial histograms over chunks of reads
    which are then combined with ``InsertSizeHistogram.merge``.
    """
    read_filter = read_filter or DEFAULT_FILTER
    counts = counts if counts is not None else StreamCounts()
    for read in records:
        _count_read(read, histogram, read_filter, counts)
    return counts


def _count_read(read, histogram, read_filter, counts):
    counts.records_read += 1
    if read_filter.accepts(read):
        counts.eligible += 1
        histogram.record(extract_insert_size(read))
    else:
        counts.ineligible += 1


def format_progress(counts, rate=None):
    """Format progress message for consistent logging."""
    base = f"Records: {counts.records_read:12,d} | Eligible: {counts.eligible:12,d}"
    if rate is not None:
        base += f" | Rate: {rate:8.0f} records/sec"
    return base


class InsertSizeRun:

    def __init__(self, max_insert_size=DEFAULT_MAX_INSERT_SIZE, read_filter=None,
                 opener=open_alignment_file, max_consecutive_errors=1000, progress_every=0):
        self.max_insert_size = max_insert_size
        self.read_filter = read_filter or DEFAULT_FILTER
        self.opener = opener
        self.max_consecutive_errors = max_consecutive_errors
        self.progress_every = progress_every
        self.state = None

    def run(self, input_path, output_path, image_format=None):
        result = self.aggregate(input_path)
        self.render(result, output_path, image_format)
        return result

    def aggregate(self, input_path):
        if self.state is not None:
            raise RuntimeError(f'run already started (state: {self.state.value})')
        try:
            self.state = RunState.OPENING
            stream = self.opener(input_path)

            self.state = RunState.STREAMING
            with stream:
                histogram = InsertSizeHistogram(self.max_insert_size)
                counts = self._stream(stream, histogram)

            self.state = RunState.FINALIZING
            summary = summarize(histogram)
        except Exception:
            self.state = RunState.ERRORED
            raise
        return AggregationResult(histogram=histogram, summary=summary, counts=counts)

    def _stream(self, stream, histogram):
        counts = StreamCounts()
        consecutive_errors = 0
        start_time = time.time()

        while True:
            try:
                read = stream.read_next()
            except RecordParseError as e:
                counts.parse_errors += 1
                consecutive_errors += 1
                if consecutive_errors > self.max_consecutive_errors:
                    raise StreamReadError(
                        f'giving up after {consecutive_errors} consecutive unreadable records: {e}') from e
                if counts.parse_errors <= MAX_REPORTED_PARSE_ERRORS:
                    click.echo(f'skipping unreadable record: {e}', err=True)
                elif counts.parse_errors == MAX_REPORTED_PARSE_ERRORS + 1:
                    click.echo('further unreadable records are counted but not reported', err=True)
                continue

            if read is None:
                break
            consecutive_errors = 0
            _count_read(read, histogram, self.read_filter, counts)

            if self.progress_every and counts.records_read % self.progress_every == 0:
                elapsed_time = time.time() - start_time
                rate = counts.records_read / elapsed_time if elapsed_time > 0 else 0
                click.echo(format_progress(counts, rate), err=True)

        return counts

    def render(self, result, output_path, image_format=None):
        if self.state is not RunState.FINALIZING:
            raise RuntimeError(f'cannot render from state {self.state}')
        self.state = RunState.RENDERING
        try:
            plot_histogram(result.histogram, result.summary, output_path, image_format)
        except Exception:
            self.state = RunState.ERRORED
            raise
        self.state = RunState.DONE
