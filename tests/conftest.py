import pytest

from helpers import write_bam


@pytest.fixture
def bam_factory(tmp_path):
    def factory(reads, name='sample.bam'):
        return write_bam(tmp_path / name, reads)
    return factory
