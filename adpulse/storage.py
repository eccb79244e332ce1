"""ADPULSE — Output File Storage."""

from pathlib import Path

from adpulse.config import settings
from adpulse.core.logging import get_logger
from adpulse.models.output_models import OutputFile

logger = get_logger("storage")


def output_path(date: str, account_id: str, output_dir: str | Path | None = None) -> Path:
    return Path(output_dir or settings.output_dir) / f"ad_data_{account_id}_{date}.json"


def save_output(
    output: OutputFile,
    date: str,
    account_id: str,
    output_dir: str | Path | None = None,
) -> Path:
    """Write the output file as pretty-printed JSON; returns its path."""
    path = output_path(date, account_id, output_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(output.model_dump_json(indent=2), encoding="utf-8")
    logger.info(f"Output saved to: {path}")
    return path
