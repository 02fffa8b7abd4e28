"""
CSV reader for spreadsheet exports.

Reads a CSV file into its header list and string rows, with encoding and
delimiter detection. Mapping rows onto domain records is left to the importers.
"""

import logging
from pathlib import Path

import pandas as pd
from pydantic import BaseModel, Field

from fitness_rpg_ledger.utils.exceptions import ParsingError
from fitness_rpg_ledger.utils.parameters import CSVConfig

logger = logging.getLogger(__name__)


class ParsedCSV(BaseModel):
    """Headers and rows of a CSV file; every cell is a string, empty cells are ``""``."""

    headers: list[str] = Field(default_factory=list)
    rows: list[dict[str, str]] = Field(default_factory=list)


class CSVReader:
    """
    Reader for CSV files.

    Handles encoding detection, delimiter detection and header cleanup.
    """

    def __init__(self, config: CSVConfig | None = None) -> None:
        """
        Initialize CSV reader.

        Args:
            config: CSV reading configuration.
        """
        self.config = config or CSVConfig()

    def _detect_encoding(self, file_path: Path) -> str:
        """
        Detect file encoding.

        Args:
            file_path: Path to CSV file.

        Returns:
            Detected encoding.
        """
        for encoding in self.config.encodings:
            try:
                with open(file_path, encoding=encoding) as f:
                    f.read()
                logger.debug(f"Detected encoding: {encoding}")
                return encoding
            except (UnicodeDecodeError, LookupError):
                continue

        logger.warning("Encoding detection failed, using utf-8")
        return "utf-8"

    def _detect_delimiter(self, file_path: Path, encoding: str) -> str:
        """
        Detect CSV delimiter from the header line.

        Args:
            file_path: Path to CSV file.
            encoding: File encoding.

        Returns:
            Detected delimiter.
        """
        with open(file_path, encoding=encoding) as f:
            first_line = f.readline()

        for delimiter in self.config.delimiters:
            if delimiter in first_line:
                logger.debug(f"Detected delimiter: {repr(delimiter)}")
                return delimiter

        logger.warning("Delimiter detection failed, using comma")
        return ","

    def read(self, file_path: Path) -> ParsedCSV:
        """
        Read a CSV file.

        Args:
            file_path: Path to CSV file.

        Returns:
            Parsed headers and rows. Blank lines are skipped.

        Raises:
            ParsingError: If the file cannot be read.
        """
        try:
            encoding = self._detect_encoding(file_path)
            delimiter = self._detect_delimiter(file_path, encoding)

            df = pd.read_csv(
                file_path,
                encoding=encoding,
                sep=delimiter,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
            )

        except pd.errors.EmptyDataError:
            logger.warning(f"{file_path.name} is empty")
            return ParsedCSV()
        except Exception as e:
            raise ParsingError(f"Failed to read CSV file {file_path}: {e}") from e

        df.columns = [str(col).strip() for col in df.columns]
        rows = [
            {str(key): str(value) for key, value in record.items()}
            for record in df.to_dict(orient="records")
        ]

        logger.info(f"Read {len(rows)} rows from {file_path.name}")
        return ParsedCSV(headers=list(df.columns), rows=rows)
