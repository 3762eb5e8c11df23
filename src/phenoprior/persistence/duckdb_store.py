"""DuckDB storage for phenotype reference tables and prioritisation results."""

from pathlib import Path
from typing import Optional

import duckdb
import polars as pl


class PhenotypeStore:
    """
    DuckDB-backed store for the prioritiser's tables.

    Holds the reference data the engine reads (term_mappings,
    phenotype_models, phenotype_terms) and the tables a run writes
    (priority_results, term_match_evidence). Every table written through
    the store is registered in a _tables metadata table.
    """

    def __init__(self, db_path: Path, read_only: bool = False):
        """
        Open (or create) a DuckDB database.

        Args:
            db_path: Path to DuckDB database file. Parent directories
                     are created automatically unless read_only is set.
            read_only: Open the database without write access
        """
        self.db_path = db_path
        self.read_only = read_only

        if not read_only:
            db_path.parent.mkdir(parents=True, exist_ok=True)

        self.conn = duckdb.connect(str(db_path), read_only=read_only)

        if not read_only:
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS _tables (
                    table_name VARCHAR PRIMARY KEY,
                    written_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    row_count INTEGER,
                    description VARCHAR
                )
            """)

    def save_dataframe(
        self,
        df: pl.DataFrame,
        table_name: str,
        description: str = "",
        replace: bool = True
    ) -> None:
        """
        Write a polars DataFrame to a table.

        Args:
            df: DataFrame to write
            table_name: Name of the DuckDB table
            description: Free text stored in the _tables metadata
            replace: If True, replace an existing table; if False, append
        """
        if not isinstance(df, pl.DataFrame):
            raise ValueError("df must be a polars.DataFrame")

        if replace or not self.has_table(table_name):
            self.conn.execute(f"CREATE OR REPLACE TABLE {table_name} AS SELECT * FROM df")
        else:
            self.conn.execute(f"INSERT INTO {table_name} SELECT * FROM df")

        row_count = self.conn.execute(f"SELECT COUNT(*) FROM {table_name}").fetchone()[0]
        self.conn.execute("""
            INSERT OR REPLACE INTO _tables (table_name, row_count, description, written_at)
            VALUES (?, ?, ?, CURRENT_TIMESTAMP)
        """, [table_name, row_count, description])

    def load_dataframe(self, table_name: str) -> Optional[pl.DataFrame]:
        """
        Read a table as a polars DataFrame.

        Returns:
            DataFrame or None if the table doesn't exist
        """
        try:
            return self.conn.execute(f"SELECT * FROM {table_name}").pl()
        except duckdb.CatalogException:
            return None

    def has_table(self, table_name: str) -> bool:
        """True if the table exists, whether or not it was written by the store."""
        result = self.conn.execute(
            "SELECT COUNT(*) FROM information_schema.tables WHERE table_name = ?",
            [table_name]
        ).fetchone()
        return result[0] > 0

    def list_tables(self) -> list[dict]:
        """
        List tables written through the store, newest first.

        Returns:
            List of dicts with keys table_name, written_at, row_count, description
        """
        if not self.has_table("_tables"):
            return []

        result = self.conn.execute("""
            SELECT table_name, written_at, row_count, description
            FROM _tables
            ORDER BY written_at DESC, table_name
        """).fetchall()

        return [
            {
                "table_name": row[0],
                "written_at": row[1],
                "row_count": row[2],
                "description": row[3],
            }
            for row in result
        ]

    def drop_table(self, table_name: str) -> None:
        """Drop a table and its metadata row."""
        self.conn.execute(f"DROP TABLE IF EXISTS {table_name}")
        self.conn.execute(
            "DELETE FROM _tables WHERE table_name = ?",
            [table_name]
        )

    def export_parquet(self, table_name: str, output_path: Path) -> None:
        """Copy a table to a Parquet file with DuckDB's native writer."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn.execute(
            f"COPY {table_name} TO '{output_path}' (FORMAT PARQUET)"
        )

    def execute_query(
        self,
        query: str,
        params: Optional[list] = None
    ) -> pl.DataFrame:
        """Run a SQL query and return the result as a polars DataFrame."""
        if params:
            result = self.conn.execute(query, params)
        else:
            result = self.conn.execute(query)
        return result.pl()

    def close(self) -> None:
        """Close the DuckDB connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @classmethod
    def from_config(cls, config: "PrioritiserConfig", read_only: bool = False) -> "PhenotypeStore":
        """Open the store at config.duckdb_path."""
        return cls(config.duckdb_path, read_only=read_only)
