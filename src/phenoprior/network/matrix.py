"""Precomputed gene x gene PPI diffusion matrix."""

import gzip
from pathlib import Path
from typing import Sequence

import numpy as np
import structlog

logger = structlog.get_logger(__name__)


def _open_text(path: Path, mode: str = "rt"):
    if path.suffix == ".gz":
        return gzip.open(path, mode)
    return open(path, mode.replace("t", "") or "r")


class ProximityMatrix:
    """Read-only square diffusion matrix over a fixed gene universe.

    Column j holds the proximity of every gene to the gene of row/column j.
    Cells are stored as float32.

    Args:
        data: Square array of proximities
        gene_index: gene_id -> row (and column) index
    """

    def __init__(self, data: np.ndarray, gene_index: dict[str, int]):
        data = np.asarray(data, dtype=np.float32)
        if data.ndim != 2 or data.shape[0] != data.shape[1]:
            raise ValueError(f"Proximity matrix must be square, got shape {data.shape}")
        if len(gene_index) != data.shape[0]:
            raise ValueError(
                f"Gene index has {len(gene_index)} entries but matrix has {data.shape[0]} rows"
            )
        out_of_range = [g for g, i in gene_index.items() if not 0 <= i < data.shape[0]]
        if out_of_range:
            raise ValueError(f"Gene index out of matrix bounds for {out_of_range[:5]}")

        self._data = data
        self._gene_index = dict(gene_index)

    @classmethod
    def from_dense(cls, data, gene_ids: Sequence[str]) -> "ProximityMatrix":
        """Build from an array whose row order follows gene_ids."""
        return cls(np.asarray(data), {str(gene_id): i for i, gene_id in enumerate(gene_ids)})

    @classmethod
    def from_files(
        cls,
        matrix_path: Path,
        index_path: Path,
        use_exponent: bool = False,
    ) -> "ProximityMatrix":
        """
        Load the matrix from tab-separated (optionally gzipped) files.

        Args:
            matrix_path: One matrix row per line, tab-separated values
            index_path: "gene_id<TAB>index" per line
            use_exponent: Apply exp() to every cell (matrix stored as logs)

        Returns:
            ProximityMatrix

        Raises:
            FileNotFoundError: If either file is missing
            ValueError: If row or column counts disagree with the index
        """
        matrix_path = Path(matrix_path)
        index_path = Path(index_path)
        for path in (matrix_path, index_path):
            if not path.exists():
                raise FileNotFoundError(f"Proximity matrix file not found: {path}")

        gene_index: dict[str, int] = {}
        with _open_text(index_path) as f:
            for line_number, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                fields = line.split("\t")
                if len(fields) < 2:
                    raise ValueError(f"{index_path}:{line_number}: expected 'gene_id<TAB>index'")
                gene_index[fields[0]] = int(fields[1])

        size = len(gene_index)
        data = np.zeros((size, size), dtype=np.float32)

        with _open_text(matrix_path) as f:
            row = 0
            for line in f:
                line = line.rstrip("\n")
                if not line:
                    continue
                if row >= size:
                    raise ValueError(
                        f"{matrix_path} has more rows than the {size} genes in {index_path}"
                    )
                values = np.array(line.split("\t"), dtype=np.float32)
                if values.shape[0] != size:
                    raise ValueError(
                        f"{matrix_path} row {row} has {values.shape[0]} columns, expected {size}"
                    )
                data[row] = values
                row += 1
                if row % 500 == 0:
                    logger.debug("proximity_matrix_rows_read", rows=row)

        if row != size:
            raise ValueError(f"{matrix_path} has {row} rows, expected {size}")

        if use_exponent:
            data = np.exp(data)

        logger.info(
            "proximity_matrix_loaded",
            matrix_path=str(matrix_path),
            genes=size,
            use_exponent=use_exponent,
        )

        return cls(data, gene_index)

    def to_files(self, matrix_path: Path, index_path: Path) -> None:
        """Write the matrix and index in the format read by from_files()."""
        matrix_path = Path(matrix_path)
        index_path = Path(index_path)
        matrix_path.parent.mkdir(parents=True, exist_ok=True)
        index_path.parent.mkdir(parents=True, exist_ok=True)

        with _open_text(index_path, "wt") as f:
            for gene_id, index in sorted(self._gene_index.items(), key=lambda item: item[1]):
                f.write(f"{gene_id}\t{index}\n")
        with _open_text(matrix_path, "wt") as f:
            for row in self._data:
                f.write("\t".join(f"{value:.5f}" for value in row) + "\n")

    @property
    def num_rows(self) -> int:
        return self._data.shape[0]

    @property
    def gene_ids(self) -> list[str]:
        return sorted(self._gene_index, key=self._gene_index.__getitem__)

    def contains_gene(self, gene_id: str) -> bool:
        return gene_id in self._gene_index

    def row_index_for_gene(self, gene_id: str) -> int:
        """Raises KeyError for genes outside the universe."""
        return self._gene_index[gene_id]

    def column_for_gene(self, gene_id: str) -> np.ndarray:
        """Read-only view of the gene's column."""
        column = self._data[:, self._gene_index[gene_id]]
        column.flags.writeable = False
        return column
