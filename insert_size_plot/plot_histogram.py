import pathlib

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from insert_size_plot.errors import RenderError

IMAGE_FORMATS = {'.png': 'png', '.svg': 'svg'}


def image_format_from_path(output_file):
    suffix = pathlib.Path(output_file).suffix.lower()
    if suffix not in IMAGE_FORMATS:
        raise ValueError(f'unsupported image format {suffix or "(none)"!r}, use .png or .svg')
    return IMAGE_FORMATS[suffix]


def plot_histogram(histogram, summary, output_file, image_format=None):
    if image_format is None:
        image_format = image_format_from_path(output_file)

    data = histogram.to_frame()
    # plot proportions, an empty histogram stays a flat line at zero
    if summary.in_range_count > 0:
        data["proportion"] = data["count"] / summary.in_range_count
    else:
        data["proportion"] = 0.0

    plt.figure(figsize=(10, 6))
    try:
        plt.plot(data["insert_size"], data["proportion"], color='red', linewidth=1)
        plt.xlim([0, histogram.max_insert_size + 1])
        plt.ylim(bottom=0)
        plt.xlabel("Insert Size (bp)")
        plt.ylabel("Proportion")
        plt.title(f"Fragment Length Distribution (n={summary.in_range_count:,})")
        plt.savefig(output_file, format=image_format, dpi=300)
    except (OSError, ValueError, RuntimeError) as e:
        raise RenderError(output_file, e) from e
    finally:
        plt.close()
