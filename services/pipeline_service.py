"""
Cleanup pipeline orchestrator.

Groups input rows by Handle and runs every record through the fixed
phase order:

    1 identity → 2 vendor + category → 3a title → 3b body → 3c SEO (parent only)
    → 3d variant technicals → body framing → 3e tags → 4 Google Shopping
    → 4b tag re-validation

A failing record becomes an error issue and the run moves on; only
run-level problems (lock, missing sheet/column, bad config) abort.
"""

import tempfile
from io import BytesIO
from pathlib import Path
from typing import Callable, Optional, Union
import structlog

from config import settings
from exceptions import AppError, MissingColumnError
from models import (
    CleanupConfig,
    CleanupResult,
    Finding,
    Issue,
    Phase,
    ProductRecord,
    RecordContext,
    RecordResult,
    RunMode,
    RunSummary,
    Severity,
)
from parsers import Table, open_workbook, parse_config, read_config_entries, read_table
from services.body_service import BodyService, get_body_service
from services.category_service import CategoryService, get_category_service
from services.export_service import ExportService, get_export_service
from services.seo_service import SeoService, get_seo_service
from services.tag_service import TagService, get_tag_service
from services.taxonomy_service import TaxonomyService, get_taxonomy_service
from services.title_service import TitleService, get_title_service
from services.variant_service import VariantService, get_variant_service
from services.vendor_service import VendorService, get_vendor_service
from utils.run_lock import RunLock

logger = structlog.get_logger(__name__)

REQUIRED_COLUMN = "Handle"

ProgressCallback = Callable[[int, int], None]


class CleanupService:
    """
    Pipeline orchestrator.

    Collaborators default to the module singletons; tests pass their own.
    """

    def __init__(
        self,
        vendors: Optional[VendorService] = None,
        categories: Optional[CategoryService] = None,
        titles: Optional[TitleService] = None,
        bodies: Optional[BodyService] = None,
        seo: Optional[SeoService] = None,
        variants: Optional[VariantService] = None,
        tags: Optional[TagService] = None,
        taxonomy: Optional[TaxonomyService] = None,
        exporter: Optional[ExportService] = None,
    ):
        self.vendors = vendors or get_vendor_service()
        self.categories = categories or get_category_service()
        self.titles = titles or get_title_service()
        self.bodies = bodies or get_body_service()
        self.seo = seo or get_seo_service()
        self.variants = variants or get_variant_service()
        self.tags = tags or get_tag_service()
        self.taxonomy = taxonomy or get_taxonomy_service()
        self.exporter = exporter or get_export_service()

    # ===================
    # ENTRY POINTS
    # ===================

    def run_workbook(
        self,
        source: Union[str, Path, BytesIO],
        mode: RunMode,
        dataset: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> CleanupResult:
        """
        Lock the dataset, load Config and Input sheets, run the pipeline.

        Args:
            source: Workbook path or in-memory upload
            mode: RunMode.VALIDATE (dry run) or RunMode.FULL
            dataset: Name the run lock is keyed on (defaults to the path)
            on_progress: Called with (processed, total) per progress batch

        Raises:
            RunLockedError: Another run holds the dataset
            MissingSheetError / MissingColumnError / ConfigParseError / TableReadError
        """
        lock = self.dataset_lock(source, dataset)
        try:
            with lock:
                return self.load_and_run(source, mode, on_progress)
        except AppError as e:
            logger.error("cleanup_failed", dataset=lock.dataset, code=e.code, message=e.message, details=e.details)
            raise

    def export_workbook(
        self,
        source: Union[str, Path, BytesIO],
        mode: RunMode,
        destination: Optional[Union[str, Path]] = None,
        dataset: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> tuple[CleanupResult, BytesIO]:
        """
        Run the pipeline and write the Output, Issues and Summary sheets
        without releasing the dataset lock in between.

        Returns:
            (CleanupResult, workbook bytes as also written to destination)
        """
        lock = self.dataset_lock(source, dataset)
        try:
            with lock:
                result = self.load_and_run(source, mode, on_progress)
                output = self.exporter.export_result(source, result, destination=destination)
        except AppError as e:
            logger.error("cleanup_failed", dataset=lock.dataset, code=e.code, message=e.message, details=e.details)
            raise
        return result, output

    def dataset_lock(self, source: Union[str, Path, BytesIO], dataset: Optional[str] = None) -> RunLock:
        """Lock keyed on the dataset name, or the path for files on disk."""
        in_memory = isinstance(source, BytesIO)
        dataset = dataset or ("upload.xlsx" if in_memory else str(source))
        lock_dir = settings.lock_dir or (tempfile.gettempdir() if in_memory else None)
        return RunLock(dataset, settings.lock_timeout_seconds, lock_dir)

    def load_and_run(
        self,
        source: Union[str, Path, BytesIO],
        mode: RunMode,
        on_progress: Optional[ProgressCallback] = None,
    ) -> CleanupResult:
        excel = open_workbook(source)
        config = parse_config(read_config_entries(excel, settings.config_sheet))
        table = read_table(excel, settings.input_sheet)
        return self.run(table, config, mode, on_progress)

    def run(
        self,
        table: Table,
        config: CleanupConfig,
        mode: RunMode,
        on_progress: Optional[ProgressCallback] = None,
    ) -> CleanupResult:
        """Run every record of an already-loaded table through the phases."""
        if not table.has_column(REQUIRED_COLUMN):
            raise MissingColumnError(REQUIRED_COLUMN, table.headers)

        total = len(table.rows)
        logger.info("cleanup_started", mode=mode.value, rows=total)
        if table.is_empty:
            logger.warning("cleanup_input_empty", mode=mode.value)

        batch_size = settings.progress_batch_size
        outputs: list[dict[str, str]] = []
        issues: list[Issue] = []
        failed = 0
        processed = 0

        for handle, members in group_by_handle(table.rows):
            parent_category: Optional[str] = None

            for position, (index, row) in enumerate(members):
                is_parent = position == 0
                result, category = self.process_record(
                    row=row,
                    row_number=index + 2,
                    headers=table.headers,
                    config=config,
                    mode=mode,
                    is_parent=is_parent,
                    parent_category=parent_category,
                )
                if is_parent:
                    parent_category = category

                outputs.append(result.output)
                issues.extend(result.issues)
                if not result.success:
                    failed += 1

                processed += 1
                if processed % batch_size == 0 or processed == total:
                    logger.info("cleanup_progress", processed=processed, total=total)
                    if on_progress:
                        on_progress(processed, total)

        summary = RunSummary.from_results(mode, len(outputs), failed, issues)
        logger.info(
            "cleanup_completed",
            mode=mode.value,
            rows=summary.rows_processed,
            records_failed=summary.records_failed,
            issues=summary.total_issues,
            errors=summary.errors,
            warnings=summary.warnings,
        )
        return CleanupResult(headers=table.headers, rows=outputs, issues=issues, summary=summary)

    # ===================
    # PER RECORD
    # ===================

    def process_record(
        self,
        row: dict[str, str],
        row_number: int,
        headers: list[str],
        config: CleanupConfig,
        mode: RunMode,
        is_parent: bool = True,
        parent_category: Optional[str] = None,
    ) -> tuple[RecordResult, Optional[str]]:
        """
        Run one record through all phases.

        Returns:
            (RecordResult, phase-2 category or None if not reached)
        """
        untouched = {h: row.get(h, "") for h in headers}
        ctx = RecordContext(
            row_number=row_number,
            handle=str(row.get(REQUIRED_COLUMN, "")),
            product_title=str(row.get("Title", "")),
        )
        issues: list[Issue] = []
        category: Optional[str] = None

        try:
            original = ProductRecord.from_row(row)
            record = original.model_copy(deep=True)

            ctx = ctx.at_phase(Phase.IDENTITY)
            if not record.handle.strip():
                issues.append(ctx.issue(Finding("Handle", "", "", "Missing handle", Severity.ERROR)))
                return RecordResult(row_number, "", untouched, issues, error="Missing handle"), None

            ctx = ctx.at_phase(Phase.CLASSIFY)
            vendor = self.vendors.resolve(record, config)
            record.vendor = vendor.vendor
            issues.extend(ctx.issues(vendor.findings))

            if is_parent or not parent_category:
                decision = self.categories.classify(record, config)
                record.product_category = decision.category
                issues.extend(ctx.issues(decision.findings))
            else:
                record.product_category = parent_category
                issues.append(ctx.issue(Finding(
                    "Product Category", "", parent_category, "Inherited from parent product",
                )))
            category = record.product_category

            ctx = ctx.at_phase(Phase.TITLE)
            title, findings = self.titles.review(record, config)
            record.title = title
            issues.extend(ctx.issues(findings))

            ctx = ctx.at_phase(Phase.BODY)
            body = self.bodies.rebuild(record, config)
            record.body_html = body.body
            issues.extend(ctx.issues(body.findings))

            if is_parent:
                ctx = ctx.at_phase(Phase.SEO)
                seo, findings = self.seo.review(record, config)
                record.seo_title = seo.seo_title
                record.seo_description = seo.seo_description
                issues.extend(ctx.issues(findings))
            else:
                record.seo_title = ""
                record.seo_description = ""

            ctx = ctx.at_phase(Phase.VARIANT)
            changes = self.variants.normalize(record)
            self.variants.apply(record, changes)
            issues.extend(ctx.issues(changes))

            # Body framing needs the final SEO fields and SKU
            ctx = ctx.at_phase(Phase.BODY)
            record.body_html = self.bodies.frame(record, config)

            ctx = ctx.at_phase(Phase.TAGS)
            tags = self.tags.curate(record, config, check_alignment=False)
            record.tags = tags.joined
            issues.extend(ctx.issues(tags.findings))

            ctx = ctx.at_phase(Phase.TAXONOMY)
            mapped = self.taxonomy.apply(record, config)
            record.google_product_category = mapped.google_category
            record.product_category = mapped.product_category
            record.condition = mapped.condition
            issues.extend(ctx.issues(mapped.findings))

            ctx = ctx.at_phase(Phase.TAG_REVALIDATION)
            issues.extend(ctx.issues(self.tags.revalidate(record, config)))

            record.restore_immutables(original)

        except Exception as e:
            logger.warning(
                "record_failed",
                row=row_number,
                handle=ctx.handle,
                phase=ctx.phase.value,
                error=str(e)
            )
            issues.append(Issue(
                row_number=row_number,
                handle=ctx.handle,
                product_title=ctx.product_title or "Unknown",
                field="System",
                reason=f"Row processing failed: {e}",
                severity=Severity.ERROR,
                phase=ctx.phase.value,
            ))
            return RecordResult(row_number, ctx.handle, untouched, issues, error=str(e)), category

        output = record.to_row(headers) if mode.mutate else untouched
        return RecordResult(row_number, record.handle, output, issues), category


def group_by_handle(rows: list[dict[str, str]]) -> list[tuple[str, list[tuple[int, dict[str, str]]]]]:
    """
    Group rows by Handle in first-appearance order.

    Each member keeps its input index; the first member is the parent.
    """
    groups: dict[str, list[tuple[int, dict[str, str]]]] = {}
    for index, row in enumerate(rows):
        handle = str(row.get(REQUIRED_COLUMN, "") or "").strip()
        groups.setdefault(handle, []).append((index, row))
    return list(groups.items())


# Singleton instance
_cleanup_service: Optional[CleanupService] = None


def get_cleanup_service() -> CleanupService:
    """Get or create CleanupService instance."""
    global _cleanup_service
    if _cleanup_service is None:
        _cleanup_service = CleanupService()
    return _cleanup_service
