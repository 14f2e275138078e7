"""
Cleanup API routes.

Upload a workbook (Input + Config sheets) and get it back with Output,
Issues and Summary sheets.
"""

from io import BytesIO

import structlog
from fastapi import APIRouter, UploadFile, File
from fastapi.responses import JSONResponse, StreamingResponse

from exceptions import AppError, ValidationError
from models import RunMode, CleanupResult
from services.pipeline_service import get_cleanup_service

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/cleanup", tags=["Cleanup"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


def summary_headers(result: CleanupResult) -> dict[str, str]:
    """Run summary as X-Cleanup-* response headers."""
    summary = result.summary
    return {
        "X-Cleanup-Mode": summary.mode.value,
        "X-Cleanup-Rows": str(summary.rows_processed),
        "X-Cleanup-Failed": str(summary.records_failed),
        "X-Cleanup-Issues": str(summary.total_issues),
        "X-Cleanup-Errors": str(summary.errors),
        "X-Cleanup-Warnings": str(summary.warnings),
    }


async def _process_upload(file: UploadFile, mode: RunMode):
    filename = file.filename or "upload.xlsx"
    logger.info(
        "cleanup_upload_started",
        filename=filename,
        content_type=file.content_type,
        mode=mode.value
    )

    try:
        if not filename.lower().endswith(".xlsx"):
            raise ValidationError(
                message="Upload must be an .xlsx workbook",
                details={"filename": filename}
            )

        content = await file.read()
        source = BytesIO(content)

        result, output = get_cleanup_service().export_workbook(
            source,
            mode,
            dataset=f"upload-{filename}",
        )

        logger.info(
            "cleanup_upload_completed",
            filename=filename,
            rows=result.summary.rows_processed,
            issues=result.summary.total_issues
        )

        headers = summary_headers(result)
        headers["Content-Disposition"] = f'attachment; filename="{_output_name(filename)}"'
        return StreamingResponse(output, media_type=XLSX_MEDIA_TYPE, headers=headers)

    except Exception as e:
        logger.error("cleanup_upload_failed", filename=filename, error=str(e))
        return handle_error(e)


def _output_name(filename: str) -> str:
    stem = filename[:-len(".xlsx")] if filename.lower().endswith(".xlsx") else filename
    return f"{stem}-cleaned.xlsx"


# ===================
# ROUTES
# ===================

@router.post("/validate")
async def validate_workbook(file: UploadFile = File(..., description="Workbook with Input and Config sheets")):
    """
    Dry run: compute and log every change, leave the rows untouched.

    Returns:
        Workbook with Output (original rows), Issues and Summary sheets

    Raises:
        409: Another run is in progress for this file
        422: Missing sheet/column or unparseable config
    """
    return await _process_upload(file, RunMode.VALIDATE)


@router.post("/run")
async def run_cleanup(file: UploadFile = File(..., description="Workbook with Input and Config sheets")):
    """
    Full cleanup: compute, log and apply every change.

    Returns:
        Workbook with Output (cleaned rows), Issues and Summary sheets

    Raises:
        409: Another run is in progress for this file
        422: Missing sheet/column or unparseable config
    """
    return await _process_upload(file, RunMode.FULL)
