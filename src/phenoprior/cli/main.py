"""Main CLI entry point for phenoprior.

Provides the command group with global options and the prioritisation subcommands.
"""

import logging
from pathlib import Path

import click

from phenoprior import __version__
from phenoprior.config.loader import load_config
from phenoprior.cli.prioritise_cmd import prioritise


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@click.group()
@click.option(
    '--config',
    type=click.Path(exists=True, path_type=Path),
    default='config/default.yaml',
    help='Path to prioritiser configuration YAML file'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Enable verbose logging (DEBUG level)'
)
@click.pass_context
def cli(ctx, config, verbose):
    """Phenoprior: cross-species phenotype and PPI based candidate gene prioritisation.

    Scores candidate genes by semantic similarity of their human disease,
    mouse and zebrafish model phenotypes to a query, then propagates strong
    hits through a protein interaction network.
    """
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")


@cli.command()
@click.pass_context
def info(ctx):
    """Display version and configuration summary."""
    config_path = ctx.obj['config_path']

    click.echo(f"Phenoprior v{__version__}")
    click.echo(f"Config: {config_path}")
    click.echo()

    try:
        config = load_config(config_path)

        config_hash = config.config_hash()
        click.echo(f"Config Hash: {config_hash[:16]}...")
        click.echo()

        click.echo(click.style("Run Signals:", bold=True))
        click.echo(f"  PPI:    {config.run.run_ppi}")
        click.echo(f"  Human:  {config.run.run_human}")
        click.echo(f"  Mouse:  {config.run.run_mouse}")
        click.echo(f"  Fish:   {config.run.run_fish}")
        click.echo(f"  Parallel species: {config.run.parallel_species}")
        click.echo()

        click.echo(click.style("Thresholds:", bold=True))
        click.echo(f"  High quality cutoff: {config.thresholds.high_quality_cutoff}")
        click.echo(f"  Walker floor: {config.thresholds.walker_floor}")
        click.echo(f"  Rank ceiling: {config.thresholds.rank_ceiling}")
        click.echo(f"  Baseline mode: {config.thresholds.baseline_mode}")
        click.echo()

        click.echo(click.style("Paths:", bold=True))
        click.echo(f"  Data Directory: {config.data_dir}")
        click.echo(f"  DuckDB Path: {config.duckdb_path}")
        if config.network is not None:
            click.echo(f"  PPI Matrix: {config.network.matrix_path}")
            click.echo(f"  PPI Index: {config.network.index_path}")
        else:
            click.echo("  PPI Matrix: (not configured)")

        if config.benchmark is not None:
            click.echo()
            click.echo(click.style("Benchmark:", bold=True))
            click.echo(f"  Disease: {config.benchmark.disease_id}")
            click.echo(f"  Candidate gene: {config.benchmark.candidate_gene_symbol}")

    except Exception as e:
        click.echo(click.style(f"Error loading config: {e}", fg='red'), err=True)
        ctx.exit(1)


cli.add_command(prioritise)


if __name__ == '__main__':
    cli()
