"""Command-line interface for ffsites.

This module provides the main entry point for the ffsites CLI tool.
It uses Click to define the commands.

Commands:
    sort: Sort a CDS FASTA file by chromosome and start position
    extract: Extract four-fold synonymous sites from a sorted CDS FASTA file

Example:
    $ ffsites --help
    $ ffsites sort -i dmel-all-CDS.fasta -o cds_sorted.fasta
    $ ffsites extract -i cds_sorted.fasta -o ffsites.tsv -l extract.log
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from ffsites import __version__

# Initialize rich console for pretty output
console = Console()


def _verbosity(ctx: click.Context, default: int) -> int:
    if ctx.obj.get("verbose"):
        return 2
    if ctx.obj.get("quiet"):
        return 0
    return default


@click.group()
@click.version_option(version=__version__, prog_name="ffsites")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def main(ctx: click.Context, verbose: bool, quiet: bool) -> None:
    """ffsites: Extract four-fold synonymous sites from coding sequences.

    Regions covered by more than one overlapping CDS are discarded, and
    every surviving codon keeps its reading frame.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# =============================================================================
# sort command
# =============================================================================


@main.command("sort")
@click.option(
    "-i",
    "--input",
    "input_path",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="CDS FASTA file with loc= annotations.",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    required=True,
    help="Output sorted FASTA file.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="TOML configuration file.",
)
@click.pass_context
def sort_command(
    ctx: click.Context,
    input_path: Path,
    output: Path,
    config_path: Optional[Path],
) -> None:
    """Sort CDS records by chromosome and start position.

    Records sharing a start position are collapsed to the longest one.
    Records on unrecognized chromosomes are skipped. Each sequence is
    written on a single line, as required by 'ffsites extract'.

    \b
    Example:
        $ ffsites sort -i dmel-all-CDS.fasta -o cds_sorted.fasta
    """
    from ffsites.config import Config
    from ffsites.io.fasta import sort_cds_fasta
    from ffsites.utils.logging import Timer, setup_logging

    verbose = ctx.obj.get("verbose", False)
    quiet = ctx.obj.get("quiet", False)

    try:
        config = Config.load(config_path)
        setup_logging(verbosity=_verbosity(ctx, config.logging.verbosity))

        if not quiet:
            console.print(f"[blue]Input:[/blue] {input_path}")
            console.print(f"[blue]Output:[/blue] {output}")

        with Timer("Sorting"):
            summary = sort_cds_fasta(input_path, output, config.extract.arm_set)

        if not quiet:
            console.print("")
            console.print("[bold]Sort Summary:[/bold]")
            console.print(f"  Records read:       {summary.n_read:,}")
            console.print(f"  Records written:    {summary.n_written:,}")
            console.print(f"  Skipped:            {summary.n_skipped:,}")
            console.print(f"  Collapsed:          {summary.n_collapsed:,}")
            console.print(f"  Chromosomes:        {', '.join(summary.chromosomes)}")
            console.print("")
            console.print(f"[green]Wrote sorted FASTA:[/green] {output}")

    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        if verbose:
            import traceback
            traceback.print_exc()
        raise SystemExit(1)


# =============================================================================
# extract command
# =============================================================================


@main.command("extract")
@click.option(
    "-i",
    "--input",
    "input_path",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Sorted CDS FASTA file (one sequence line per record).",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    required=True,
    help="Output TSV of four-fold sites.",
)
@click.option(
    "-l",
    "--log",
    "log_file",
    type=click.Path(path_type=Path),
    help="Diagnostic log file (overlaps, dropped records).",
)
@click.option(
    "--chrom-prefix",
    type=str,
    default=None,
    help="Prefix for chromosome names in the output [default: chr].",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="TOML configuration file.",
)
@click.pass_context
def extract_command(
    ctx: click.Context,
    input_path: Path,
    output: Path,
    log_file: Optional[Path],
    chrom_prefix: Optional[str],
    config_path: Optional[Path],
) -> None:
    """Extract four-fold synonymous sites.

    The input must be sorted by chromosome and start position (see
    'ffsites sort'). Where consecutive CDS overlap, the shared region is
    removed from both, rounded up to whole codons; a CDS lying within
    the overlap is dropped.

    \b
    Output columns:
    - chr: chromosome name with prefix
    - FBgn: parent gene identifier
    - pos: genomic position of the four-fold site

    \b
    Example:
        $ ffsites extract -i cds_sorted.fasta -o ffsites.tsv -l extract.log
    """
    from ffsites.config import Config
    from ffsites.core.cursor import extract_from_file
    from ffsites.errors import FFSitesError
    from ffsites.io.sites import write_sites_tsv
    from ffsites.utils.logging import Timer, setup_logging

    verbose = ctx.obj.get("verbose", False)
    quiet = ctx.obj.get("quiet", False)

    try:
        config = Config.load(config_path)
        if chrom_prefix is not None:
            config.extract.chrom_prefix = chrom_prefix
        if log_file is not None:
            config.logging.log_file = str(log_file)

        setup_logging(
            verbosity=_verbosity(ctx, config.logging.verbosity),
            log_file=config.logging.log_file,
        )

        if not quiet:
            console.print(f"[blue]Input:[/blue] {input_path}")
            console.print(f"[blue]Output:[/blue] {output}")
            if config.logging.log_file:
                console.print(f"[blue]Log:[/blue] {config.logging.log_file}")

        with Timer("Extraction"):
            sites, stats = extract_from_file(input_path, config.extract.arm_set)

        write_sites_tsv(
            sites,
            output,
            chrom_prefix=config.extract.chrom_prefix,
            header=config.extract.header,
        )

        if not quiet:
            console.print("")
            console.print("[bold]Extraction Summary:[/bold]")
            console.print(f"  Records read:       {stats.n_records:,}")
            console.print(f"  Records emitted:    {stats.n_flushed:,}")
            console.print(f"  Records dropped:    {stats.n_dropped:,}")
            console.print(f"  Overlaps resolved:  {stats.n_overlaps:,}")
            console.print(f"  Chromosomes:        {stats.n_chromosomes:,}")
            console.print(f"  Four-fold sites:    {stats.n_sites:,}")
            console.print("")
            console.print(f"[green]Wrote sites:[/green] {output}")

    except FFSitesError as e:
        console.print(f"[red]Error ({e.kind.value}):[/red] {e}")
        if verbose:
            import traceback
            traceback.print_exc()
        raise SystemExit(1)
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        if verbose:
            import traceback
            traceback.print_exc()
        raise SystemExit(1)


if __name__ == "__main__":
    main()
