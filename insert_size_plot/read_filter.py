# decides which alignment records contribute an insert size and extracts it


def is_eligible(read):
    # only reads that are part of a pair and flagged properly paired by the aligner
    if not read.is_paired or not read.is_proper_pair:
        return False

    # make sure read is primary alignment, split and multi-mapped records would count a fragment twice
    if read.is_secondary or read.is_supplementary:
        return False

    # a template length of zero means unset
    return read.template_length != 0


def extract_insert_size(read):
    # template length is negative for the rightmost read of the pair
    return abs(read.template_length)


class ReadFilter:
    """Default eligibility policy, optionally tightened.

    Args:

        first_of_pair_only (bool): count a fragment once, through its first read

        same_reference_only (bool): drop pairs whose mate maps to another reference

        min_mapping_quality (int): drop reads with a lower mapping quality
    """

    def __init__(self, first_of_pair_only=False, same_reference_only=False, min_mapping_quality=0):
        if min_mapping_quality < 0:
            raise ValueError('min_mapping_quality must not be negative')
        self.first_of_pair_only = first_of_pair_only
        self.same_reference_only = same_reference_only
        self.min_mapping_quality = min_mapping_quality

    def accepts(self, read):
        if not is_eligible(read):
            return False
        if self.first_of_pair_only and not read.is_read1:
            return False
        if self.same_reference_only and read.reference_id != read.next_reference_id:
            return False
        return read.mapping_quality >= self.min_mapping_quality

    def __repr__(self):
        return (f'ReadFilter(first_of_pair_only={self.first_of_pair_only}, '
                f'same_reference_only={self.same_reference_only}, '
                f'min_mapping_quality={self.min_mapping_quality})')


DEFAULT_FILTER = ReadFilter()
