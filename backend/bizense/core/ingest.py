"""
Ingestion of one uploaded CSV export.

Stages: RECEIVED -> PARSED -> TRANSFORMED -> PERSISTED -> RECORDED, with
FAILED reachable from each. The campaign batch is inserted in one call;
the upload-history entry written afterwards is best-effort and its failure
does not fail the ingestion. The staged file is always discarded.
"""
import csv
import enum
import io
import logging
import uuid
from dataclasses import dataclass, field

from opentelemetry import trace

from bizense.core.errors import IngestionError, StoreError
from bizense.core.staging import StagedFile
from bizense.core.store import CampaignStore
from bizense.core.transform import CampaignRecord, transform_row
from bizense.models import CampaignReport, Platform, UploadStatus

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

ALLOWED_PLATFORMS = tuple(p.value for p in Platform)


class IngestionStage(str, enum.Enum):
    RECEIVED = "RECEIVED"
    PARSED = "PARSED"
    TRANSFORMED = "TRANSFORMED"
    PERSISTED = "PERSISTED"
    RECORDED = "RECORDED"
    FAILED = "FAILED"


@dataclass
class IngestionResult:
    upload_id: uuid.UUID
    platform: str
    file_name: str
    stage: IngestionStage = IngestionStage.RECEIVED
    rows_processed: int = 0
    inserted: list[CampaignReport] = field(default_factory=list)
    history_recorded: bool = False


def normalize_platform_input(platform: str | None) -> str:
    """Lower-case and validate the declared platform."""
    value = (platform or "").strip().lower()
    if value not in ALLOWED_PLATFORMS:
        raise IngestionError(
            "invalid_platform",
            "Invalid platform specified",
            stage=IngestionStage.RECEIVED.value,
        )
    return value


def parse_csv(content: bytes) -> list[dict[str, str]]:
    """Decode delimited text into header -> value rows; blank lines are dropped."""
    text = content.decode("utf-8-sig", errors="replace")
    reader = csv.DictReader(io.StringIO(text, newline=""))
    rows = []
    for raw in reader:
        # Short rows yield None values; overflow cells land under the None key
        row = {k: (v if v is not None else "") for k, v in raw.items() if k is not None}
        if any(v.strip() for v in row.values()):
            rows.append(row)
    return rows


class Ingestion:
    def __init__(self, store: CampaignStore, max_rows: int | None = None):
        self.store = store
        self.max_rows = max_rows

    async def run(self, staged: StagedFile, platform: str | None, user_id: uuid.UUID) -> IngestionResult:
        result = IngestionResult(upload_id=uuid.uuid4(), platform=platform or "", file_name=staged.file_name)
        with tracer.start_as_current_span("ingestion.run") as span:
            span.set_attribute("bizense.upload_id", str(result.upload_id))
            span.set_attribute("bizense.file_size_bytes", staged.size_bytes)
            span.set_attribute("bizense.file_sha256", staged.sha256)
            try:
                return await self._run(result, staged, user_id)
            except (IngestionError, StoreError) as e:
                logger.warning(
                    "Ingestion of %s failed after stage %s: %s", staged.file_name, result.stage.value, e
                )
                result.stage = IngestionStage.FAILED
                raise
            finally:
                span.set_attribute("bizense.platform", result.platform)
                span.set_attribute("bizense.stage", result.stage.value)
                span.set_attribute("bizense.rows_processed", result.rows_processed)
                staged.discard()

    async def _run(self, result: IngestionResult, staged: StagedFile, user_id: uuid.UUID) -> IngestionResult:
        platform = result.platform = normalize_platform_input(result.platform)

        rows = parse_csv(staged.read_bytes())
        if not rows:
            raise IngestionError("empty_file", "CSV file is empty or invalid", stage=IngestionStage.PARSED.value)
        if self.max_rows and len(rows) > self.max_rows:
            raise IngestionError(
                "too_many_rows",
                f"File exceeds maximum row limit: {len(rows)} rows (max {self.max_rows})",
                stage=IngestionStage.PARSED.value,
            )
        result.stage = IngestionStage.PARSED
        logger.info(
            "Parsed %d rows from %s (platform=%s, sha256=%s)",
            len(rows),
            staged.file_name,
            platform,
            staged.sha256,
        )

        settings = await self.store.product_settings_map(user_id)
        records: list[CampaignRecord] = [
            transform_row(
                row,
                user_id,
                platform,
                staged.file_name,
                upload_id=result.upload_id,
                revenue_per_conversion=settings,
            )
            for row in rows
        ]
        result.stage = IngestionStage.TRANSFORMED
        logger.info("Transformed %d rows for upload %s", len(records), result.upload_id)

        # One bulk insert; a store fault here fails the whole upload
        result.inserted = await self.store.insert_campaign_reports(records)
        result.rows_processed = len(records)
        result.stage = IngestionStage.PERSISTED
        logger.info("Persisted %d campaign records for upload %s", result.rows_processed, result.upload_id)

        try:
            await self.store.insert_upload_history(
                user_id=user_id,
                file_name=staged.file_name,
                platform=platform,
                rows_processed=result.rows_processed,
                status=UploadStatus.COMPLETED,
                upload_id=result.upload_id,
            )
        except StoreError:
            logger.exception("Upload history write failed for upload %s", result.upload_id)
        else:
            result.history_recorded = True
            result.stage = IngestionStage.RECORDED

        logger.info(
            "Ingested %d rows for user %s (upload=%s, stage=%s)",
            result.rows_processed,
            user_id,
            result.upload_id,
            result.stage.value,
        )
        return result
