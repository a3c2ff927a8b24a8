"""
Thin wrapper around pysam for streaming alignment records.

pysam may reuse the memory behind an AlignedSegment on the next iteration,
so only the handful of fields needed for filtering are copied out of each
record and the segment itself is dropped immediately.
"""

from dataclasses import dataclass

import pysam

from insert_size_plot.errors import RecordParseError, SourceOpenError

# sam flag bits
FLAG_PAIRED = 0x1
FLAG_PROPER_PAIR = 0x2
FLAG_READ1 = 0x40
FLAG_SECONDARY = 0x100
FLAG_SUPPLEMENTARY = 0x800


@dataclass(frozen=True)
class ReadFields:
    """The fields of one alignment record that the insert size filter looks at."""

    flag: int
    template_length: int
    mapping_quality: int = 255
    reference_id: int = -1
    next_reference_id: int = -1

    @classmethod
    def from_segment(cls, read):
        return cls(
            flag=read.flag,
            template_length=read.template_length,
            mapping_quality=read.mapping_quality,
            reference_id=read.reference_id,
            next_reference_id=read.next_reference_id,
        )

    @property
    def is_paired(self):
        return bool(self.flag & FLAG_PAIRED)

    @property
    def is_proper_pair(self):
        return bool(self.flag & FLAG_PROPER_PAIR)

    @property
    def is_read1(self):
        return bool(self.flag & FLAG_READ1)

    @property
    def is_secondary(self):
        return bool(self.flag & FLAG_SECONDARY)

    @property
    def is_supplementary(self):
        return bool(self.flag & FLAG_SUPPLEMENTARY)


class AlignmentStream:
    """Pulls records one at a time from a BAM/SAM/CRAM file."""

    def __init__(self, path):
        self.path = path
        try:
            # mode 'r' lets htslib detect the container format
            self._bam = pysam.AlignmentFile(str(path), "r", check_sq=False)
        except (OSError, ValueError) as e:
            raise SourceOpenError(path, e) from e
        self._reads = iter(self._bam)

    def read_next(self):
        """Return the next record's fields, or None once the file is exhausted.

        Raises RecordParseError when htslib fails to decode a record.
        """
        try:
            read = next(self._reads)
        except StopIteration:
            return None
        except (OSError, ValueError) as e:
            raise RecordParseError(f'{self.path}: {e}') from e
        return ReadFields.from_segment(read)

    def close(self):
        self._bam.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def open_alignment_file(path):
    return AlignmentStream(path)
