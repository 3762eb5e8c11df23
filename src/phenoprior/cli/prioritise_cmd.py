"""Prioritise command: rank candidate genes for a phenotype query."""

import logging
import sys
from pathlib import Path

import click
import polars as pl

from phenoprior.config.loader import load_config
from phenoprior.config.schema import BenchmarkTarget, RunOptions
from phenoprior.output import results_to_frame, write_priority_output
from phenoprior.persistence import PhenotypeStore, ProvenanceTracker
from phenoprior.scoring import CandidateGene, Prioritiser

logger = logging.getLogger(__name__)

PRIORITY_RESULTS_TABLE = "priority_results"
TERM_MATCH_EVIDENCE_TABLE = "term_match_evidence"


def read_candidate_genes(path: Path) -> list[CandidateGene]:
    """
    Read candidate genes from a tab-separated file.

    The file needs a gene_id column; gene_symbol is optional.

    Raises:
        ValueError: If the gene_id column is missing
    """
    df = pl.read_csv(path, separator="\t", infer_schema_length=0)
    if "gene_id" not in df.columns:
        raise ValueError(f"{path} has no gene_id column (found {df.columns})")

    symbols = df["gene_symbol"].to_list() if "gene_symbol" in df.columns else [""] * df.height
    return [
        CandidateGene(gene_id=gene_id.strip(), gene_symbol=(symbol or "").strip())
        for gene_id, symbol in zip(df["gene_id"].to_list(), symbols)
        if gene_id and gene_id.strip()
    ]


def parse_term_ids(hpo: str) -> list[str]:
    return [term.strip() for term in hpo.split(",") if term.strip()]


@click.command('prioritise')
@click.option(
    '--genes',
    'genes_path',
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help='TSV of candidate genes (gene_id, optional gene_symbol)'
)
@click.option(
    '--hpo',
    default='',
    help='Comma-separated query HPO ids (may be empty with --disease-id)'
)
@click.option(
    '--run-params',
    default=None,
    help='Signals to run, e.g. "ppi,human,mouse" (default: from config)'
)
@click.option(
    '--disease-id',
    default=None,
    help='Benchmark disease id whose own models are suppressed'
)
@click.option(
    '--candidate-gene',
    default=None,
    help='Benchmark candidate gene symbol (used with --disease-id)'
)
@click.option(
    '--output-dir',
    type=click.Path(path_type=Path),
    default=None,
    help='Output directory (default: {data_dir}/priorities)'
)
@click.option(
    '--skip-persist',
    is_flag=True,
    help='Do not write results back to DuckDB'
)
@click.pass_context
def prioritise(ctx, genes_path, hpo, run_params, disease_id, candidate_gene, output_dir, skip_persist):
    """Rank candidate genes by phenotype similarity and PPI proximity.

    Scores every candidate gene against human disease, mouse and zebrafish
    model annotations, then propagates strong hits through the PPI network.
    Writes TSV + Parquet results with a provenance sidecar.

    Examples:

        # Score genes against two HPO terms
        phenoprior prioritise --genes genes.tsv --hpo HP:0001156,HP:0001363

        # Benchmark: query terms taken from the disease, its own models hidden
        phenoprior prioritise --genes genes.tsv --disease-id OMIM:101600 --candidate-gene FGFR2
    """
    config_path = ctx.obj['config_path']

    click.echo(click.style("=== Phenotype Prioritisation ===", bold=True))
    click.echo()

    store = None
    try:
        config = load_config(config_path)

        updates = {}
        if run_params is not None:
            run_options = RunOptions.from_param_string(run_params)
            updates['run'] = run_options.model_copy(
                update={'parallel_species': config.run.parallel_species}
            )
        if disease_id or candidate_gene:
            if not (disease_id and candidate_gene):
                raise click.UsageError("--disease-id and --candidate-gene must be given together")
            updates['benchmark'] = BenchmarkTarget(
                disease_id=disease_id,
                candidate_gene_symbol=candidate_gene,
            )
        if updates:
            config = config.model_copy(update=updates)

        click.echo(click.style(f"  Config loaded: {config_path}", fg='green'))
        click.echo(f"  Run signals: {config.run.to_param_string() or '(none)'}")

        candidates = read_candidate_genes(genes_path)
        query_term_ids = parse_term_ids(hpo)
        click.echo(f"  Candidate genes: {len(candidates)}")
        click.echo(f"  Query terms: {len(query_term_ids)}")
        click.echo()

        store = PhenotypeStore.from_config(config)
        provenance = ProvenanceTracker.from_config(config)

        click.echo("Loading reference data...")
        prioritiser = Prioritiser.from_config(config, store, provenance)
        click.echo(click.style("  Reference data loaded", fg='green'))
        click.echo()

        click.echo("Scoring candidates...")
        results = prioritiser.prioritise(candidates, query_term_ids)
        run = prioritiser.last_run
        summary = run.summary

        if summary.dropped_terms:
            click.echo(click.style(
                f"  Dropped unrecognised terms: {', '.join(summary.dropped_terms)}",
                fg='yellow'
            ))
        for species, reason in summary.species_skipped.items():
            click.echo(click.style(f"  Skipped {species.value}: {reason}", fg='yellow'))
        click.echo(click.style(f"  {summary.describe()}", fg='green'))
        click.echo()

        df = results_to_frame(results)

        if output_dir is None:
            output_dir = config.data_dir / "priorities"
        paths = write_priority_output(df, output_dir, summary=summary)
        provenance.save_sidecar(paths['tsv'])

        if not skip_persist:
            store.save_dataframe(
                df,
                PRIORITY_RESULTS_TABLE,
                description=f"Prioritised {len(results)} genes against {len(summary.query_terms)} terms"
            )
            store.save_dataframe(
                run.context.evidence.to_frame(),
                TERM_MATCH_EVIDENCE_TABLE,
                description="Best term match per model and query term"
            )
            provenance.save_to_store(store)

        click.echo(click.style("=== Top Candidates ===", bold=True))
        for row in df.head(10).iter_rows(named=True):
            click.echo(f"  {row['gene_symbol'] or row['gene_id']}\t{row['final_score']:.4f}")
        click.echo()
        click.echo(f"TSV: {paths['tsv']}")
        click.echo(f"Parquet: {paths['parquet']}")
        click.echo(f"Provenance: {paths['provenance']}")
        click.echo()
        click.echo(click.style("Prioritisation complete!", fg='green', bold=True))

    except click.UsageError:
        raise
    except Exception as e:
        click.echo(click.style(f"Prioritisation failed: {e}", fg='red'), err=True)
        logger.exception("Prioritise command failed")
        sys.exit(1)
    finally:
        if store is not None:
            store.close()
