"""Export of batch results for downstream consumers.

Two formats are produced:
- JSON matching the response shape the dashboard consumes
  (``results``, ``totalDurationMs``, ``totalDurationSec``);
- an Excel workbook with one sheet per view of the data, built with pandas.
"""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pandas as pd

from config.settings import GlobalConfig, get_config
from artistpulse.exceptions import ReportGenerationError
from artistpulse.logger import get_logger
from artistpulse.models import BatchResult, TargetSuccess

log = get_logger(__name__)


def _outcome_payload(outcome: Any) -> dict[str, Any]:
    if isinstance(outcome, TargetSuccess):
        record = outcome.record
        return {
            "artistId": outcome.target_id,
            "artistName": record.artist_name,
            "imageSrc": record.image_src,
            "username": record.username,
            "followers": record.followers,
            "monthlyListeners": record.monthly_listeners,
            "cities": [{"label": city.label, "count": city.count} for city in record.cities],
            "socialLink": record.social_link,
            "durationMs": round(outcome.duration_ms, 2),
            "error": None,
        }
    return {"artistId": outcome.target_id, "error": outcome.error}


def batch_to_payload(result: BatchResult) -> dict[str, Any]:
    """Serialize a batch into the dashboard response shape."""
    return {
        "results": [_outcome_payload(outcome) for outcome in result.results],
        "totalDurationMs": round(result.total_duration_ms, 2),
        "totalDurationSec": result.total_duration_sec,
        "cancelled": result.cancelled,
    }


class ReportGenerator:
    """Writes JSON and Excel exports of a batch result.

    Example:
        reporter = ReportGenerator(config)
        paths = reporter.generate_all(result)
    """

    def __init__(self, config: GlobalConfig | None = None) -> None:
        self.config = config or get_config()
        self._timestamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")

    def _ensure_output_dir(self) -> Path:
        try:
            self.config.output_dir.mkdir(parents=True, exist_ok=True)
            return self.config.output_dir
        except OSError as exc:
            raise ReportGenerationError(
                report_type="output_directory",
                reason=f"Cannot create output directory: {exc}",
                output_path=str(self.config.output_dir),
            ) from exc

    def generate_json(self, result: BatchResult, filename: str | None = None) -> Path:
        """Write the batch as a JSON document.

        Raises:
            ReportGenerationError: If the file cannot be written.
        """
        output_dir = self._ensure_output_dir()
        output_path = output_dir / f"{filename or f'artistpulse_batch_{self._timestamp}'}.json"

        try:
            output_path.write_text(
                json.dumps(batch_to_payload(result), indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as exc:
            raise ReportGenerationError(
                report_type="JSON",
                reason=str(exc),
                output_path=str(output_path),
            ) from exc

        log.info("JSON export written", output_path=str(output_path), targets=len(result.results))
        return output_path

    def _artists_frame(self, result: BatchResult) -> pd.DataFrame:
        rows = [
            {
                "artist_id": outcome.target_id,
                "artist_name": outcome.record.artist_name,
                "username": outcome.record.username,
                "followers": outcome.record.followers,
                "monthly_listeners": outcome.record.monthly_listeners,
                "image_src": outcome.record.image_src,
                "social_link": outcome.record.social_link,
                "duration_ms": round(outcome.duration_ms, 2),
            }
            for outcome in result.results
            if outcome.status == "success"
        ]
        return pd.DataFrame(
            rows,
            columns=[
                "artist_id",
                "artist_name",
                "username",
                "followers",
                "monthly_listeners",
                "image_src",
                "social_link",
                "duration_ms",
            ],
        )

    def _cities_frame(self, result: BatchResult) -> pd.DataFrame:
        rows = [
            {
                "artist_id": outcome.target_id,
                "rank": rank,
                "city": city.label,
                "listeners": city.count,
            }
            for outcome in result.results
            if outcome.status == "success"
            for rank, city in enumerate(outcome.record.cities, start=1)
        ]
        return pd.DataFrame(rows, columns=["artist_id", "rank", "city", "listeners"])

    def _failures_frame(self, result: BatchResult) -> pd.DataFrame:
        rows = [
            {"artist_id": outcome.target_id, "error": outcome.error}
            for outcome in result.results
            if outcome.status == "failure"
        ]
        return pd.DataFrame(rows, columns=["artist_id", "error"])

    def _summary(self, result: BatchResult) -> dict[str, Any]:
        return {
            "Report Generated": datetime.now(UTC).isoformat(),
            "Total Targets": len(result.results),
            "Succeeded": result.succeeded,
            "Failed": result.failed,
            "Success Rate": f"{result.success_rate:.1%}",
            "Cancelled": result.cancelled,
            "Total Duration (s)": result.total_duration_sec,
        }

    def generate_excel(self, result: BatchResult, filename: str | None = None) -> Path:
        """Write Artists, Top Cities, Failures and Summary sheets.

        Raises:
            ReportGenerationError: If the workbook cannot be produced.
        """
        output_dir = self._ensure_output_dir()
        output_path = output_dir / f"{filename or f'artistpulse_export_{self._timestamp}'}.xlsx"

        log.info("Generating Excel report", output_path=str(output_path))

        try:
            with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
                self._artists_frame(result).to_excel(writer, sheet_name="Artists", index=False)
                self._cities_frame(result).to_excel(writer, sheet_name="Top Cities", index=False)
                self._failures_frame(result).to_excel(writer, sheet_name="Failures", index=False)
                pd.DataFrame([self._summary(result)]).to_excel(
                    writer, sheet_name="Summary", index=False
                )
        except Exception as exc:
            raise ReportGenerationError(
                report_type="Excel",
                reason=str(exc),
                output_path=str(output_path),
            ) from exc

        log.info("Excel report generated", output_path=str(output_path))
        return output_path

    def generate_all(self, result: BatchResult) -> dict[str, Path]:
        return {
            "json": self.generate_json(result),
            "excel": self.generate_excel(result),
        }
