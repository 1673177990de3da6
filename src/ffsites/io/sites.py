"""Output writer for four-fold site tables.

The table is tab-separated with a fixed header row:

    chr	FBgn	pos
    chr2L	FBgn0031208	7682
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Sequence

if TYPE_CHECKING:
    from ffsites.core.fourfold import FourFoldSite

logger = logging.getLogger(__name__)

DEFAULT_HEADER = ("chr", "FBgn", "pos")
DEFAULT_CHROM_PREFIX = "chr"


def write_sites_tsv(
    sites: Iterable["FourFoldSite"],
    output_path: Path | str,
    chrom_prefix: str = DEFAULT_CHROM_PREFIX,
    header: Sequence[str] = DEFAULT_HEADER,
) -> int:
    """Write four-fold sites to a TSV file in emission order.

    Args:
        sites: Sites to write.
        output_path: Output file path.
        chrom_prefix: String prepended to every chromosome name.
        header: Column names for the header row.

    Returns:
        Number of sites written.
    """
    output_path = Path(output_path)
    n_written = 0

    with open(output_path, "w", newline="") as f:
        writer = csv.writer(f, delimiter="\t", lineterminator="\n")
        writer.writerow(header)
        for site in sites:
            writer.writerow([f"{chrom_prefix}{site.chromosome}", site.gene_id, site.position])
            n_written += 1

    logger.info(f"Wrote {n_written:,} sites to {output_path}")
    return n_written
