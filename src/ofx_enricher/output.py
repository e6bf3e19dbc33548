"""Writing the enriched OFX export (and optionally the original) to disk."""

from pathlib import Path
from typing import Optional
import logging

from .config import OutputConfig
from .models.transaction import ExportOutcome, ReportingPeriod

logger = logging.getLogger(__name__)


def output_filename(config: OutputConfig, period: ReportingPeriod, original: bool = False) -> str:
    """
    Build the output file name for a period.

    Args:
        config: Output configuration
        period: Exported month
        original: Name the untransformed copy instead

    Returns:
        File name such as ``bankAustralia-09-2025.ofx``
    """
    name = config.filename_template.format(month=period.month, year=period.year)
    if original:
        path = Path(name)
        name = f"{path.stem}{config.original_suffix}{path.suffix}"
    return name


def write_outputs(
    outcome: ExportOutcome,
    period: ReportingPeriod,
    output_dir: Path,
    config: OutputConfig,
    keep_original: Optional[bool] = None,
) -> list[Path]:
    """
    Write the rewritten export, plus the original when requested.

    Documents are written verbatim, without newline translation.

    Returns:
        Paths written, original first when present
    """
    if keep_original is None:
        keep_original = config.keep_original

    output_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []

    if keep_original:
        original_path = output_dir / output_filename(config, period, original=True)
        _write_text(original_path, outcome.original)
        written.append(original_path)

    updated_path = output_dir / output_filename(config, period)
    _write_text(updated_path, outcome.document)
    written.append(updated_path)

    for path in written:
        logger.info(f"Wrote {path}")
    return written


def _write_text(path: Path, text: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)
