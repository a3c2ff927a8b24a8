import pysam

from insert_size_plot.alignment_source import ReadFields
from insert_size_plot.errors import RecordParseError

# paired, properly paired, first in pair
PROPER_READ1 = 0x1 | 0x2 | 0x40
PROPER_READ2 = 0x1 | 0x2 | 0x80


def make_read(template_length, flag=PROPER_READ1, mapping_quality=60, reference_id=0, next_reference_id=0):
    return ReadFields(
        flag=flag,
        template_length=template_length,
        mapping_quality=mapping_quality,
        reference_id=reference_id,
        next_reference_id=next_reference_id,
    )


class FakeStream:
    """In-memory stand-in for AlignmentStream.

    Items that are exceptions are raised from read_next instead of returned.
    """

    def __init__(self, items):
        self._items = list(items)
        self.closed = False

    def read_next(self):
        if not self._items:
            return None
        item = self._items.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def fake_opener(items):
    streams = []

    def opener(path):
        stream = FakeStream(items)
        streams.append(stream)
        return stream

    opener.streams = streams
    return opener


def corrupt_record():
    return RecordParseError('truncated record')


def write_bam(path, reads):
    """Write ``(flag, template_length)`` pairs to a small coordinate sorted BAM."""
    header = pysam.AlignmentHeader.from_dict({
        'HD': {'VN': '1.6', 'SO': 'coordinate'},
        'SQ': [{'SN': 'chr1', 'LN': 100000}, {'SN': 'chr2', 'LN': 100000}],
    })
    with pysam.AlignmentFile(str(path), 'wb', header=header) as out:
        for i, (flag, template_length) in enumerate(reads):
            segment = pysam.AlignedSegment(header)
            segment.query_name = f'read{i}'
            segment.query_sequence = 'ACGTACGTAC'
            segment.query_qualities = pysam.qualitystring_to_array('IIIIIIIIII')
            segment.flag = flag
            segment.reference_id = 0
            segment.reference_start = 1000 + i
            segment.mapping_quality = 60
            segment.cigartuples = [(0, 10)]
            segment.next_reference_id = 0
            segment.next_reference_start = 1000 + i + max(template_length, 0)
            segment.template_length = template_length
            out.write(segment)
    return path


def write_sam(path, template_lengths, corrupt_at=None):
    """Write properly paired first reads to a SAM file.

    The record at index ``corrupt_at`` is replaced by a line htslib cannot parse.
    """
    lines = ['@HD\tVN:1.6\tSO:unsorted', '@SQ\tSN:chr1\tLN:100000', '@SQ\tSN:chr2\tLN:100000']
    for i, template_length in enumerate(template_lengths):
        if i == corrupt_at:
            lines.append('this line is not an alignment record')
            continue
        lines.append('\t'.join([
            f'read{i}', str(PROPER_READ1), 'chr1', str(1000 + i), '60', '10M', '=',
            str(1000 + i + abs(template_length)), str(template_length), 'ACGTACGTAC', 'IIIIIIIIII',
        ]))
    path.write_text('\n'.join(lines) + '\n')
    return path
