import json
import pathlib

import click

from insert_size_plot import __version__
from insert_size_plot.aggregate import InsertSizeRun
from insert_size_plot.errors import InsertSizeError, RenderError
from insert_size_plot.histogram import DEFAULT_MAX_INSERT_SIZE
from insert_size_plot.plot_histogram import image_format_from_path
from insert_size_plot.read_filter import ReadFilter


def _check_output(ctx, param, value):
    try:
        image_format_from_path(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e
    return value


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.version_option(__version__, '-V', '--version')
@click.argument('bam', type=click.Path(exists=True, path_type=pathlib.Path, dir_okay=False))
@click.option('-o', '--output', 'output_file', required=True, callback=_check_output,
              type=click.Path(writable=True, path_type=pathlib.Path, dir_okay=False),
              help='Output plot path, the .png or .svg suffix selects the format.')
@click.option('-m', '--max-insert-size', default=DEFAULT_MAX_INSERT_SIZE, show_default=True,
              type=click.IntRange(min=0),
              help='Maximum insert size to record. Bigger numbers cost more memory, larger inserts are only counted.')
@click.option('--first-of-pair', is_flag=True, help='Only count the first read of each pair.')
@click.option('--same-reference', is_flag=True, help='Only count pairs with both mates on the same reference.')
@click.option('-q', '--min-mapq', default=0, show_default=True, type=click.IntRange(min=0),
              help='Minimum mapping quality of a counted read.')
@click.option('--progress-every', default=0, show_default=True, type=click.IntRange(min=0),
              help='Report progress every N records, 0 disables.')
def main(bam, output_file, max_insert_size, first_of_pair, same_reference, min_mapq, progress_every):
    """Plot the insert size distribution of BAM and print summary statistics as JSON."""
    read_filter = ReadFilter(
        first_of_pair_only=first_of_pair,
        same_reference_only=same_reference,
        min_mapping_quality=min_mapq,
    )
    run = InsertSizeRun(max_insert_size=max_insert_size, read_filter=read_filter,
                        progress_every=progress_every)

    click.echo(f'alignment file: {bam}', err=True)
    click.echo(f'output path: {output_file}', err=True)
    try:
        result = run.aggregate(bam)
    except InsertSizeError as e:
        raise click.ClickException(str(e)) from e

    counts = result.counts
    click.echo(f'records read: {counts.records_read}, eligible: {counts.eligible}, '
               f'ineligible: {counts.ineligible}, unreadable: {counts.parse_errors}', err=True)

    # the statistics are reported even when the plot cannot be written
    click.echo(json.dumps(result.summary.to_dict(), indent=2))
    try:
        run.render(result, output_file, image_format_from_path(output_file))
    except RenderError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f'plot written to {output_file}', err=True)


if __name__ == '__main__':
    main()
