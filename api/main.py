"""
FastAPI Backend for Bank Statement Transaction Extractor
RESTful API endpoints for extracting transactions from statements and receipts
"""

from fastapi import Depends, FastAPI, File, UploadFile, Form, HTTPException
from fastapi.responses import FileResponse, JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from typing import Optional
from pathlib import Path
from datetime import datetime
import tempfile
import logging

from config import config
from logging_config import setup_logging
from pipeline import StatementProcessor, result_to_dict
from output.writer import generate_pdf_report
from ai.gemini_client import AIExtractionError, GeminiClient
from ai.receipt_ai import parse_receipt_with_ai, receipt_to_transaction

setup_logging()
logger = logging.getLogger(__name__)

# Validate AI credentials once at startup; AI endpoints answer 503 without them
AI_SETTINGS_VALID, AI_SETTINGS_ERROR = config.validate_ai_settings()
if not AI_SETTINGS_VALID:
    logger.error(f"AI extractors disabled: {AI_SETTINGS_ERROR}")

# Initialize FastAPI app
app = FastAPI(
    title="Bank Statement Extractor API",
    description="Extract categorized transactions from bank statement PDFs and receipts",
    version=config.VERSION
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class StatementTextRequest(BaseModel):
    text: str
    owner_id: str


def get_ai_client() -> Optional[GeminiClient]:
    """AI client, or None when GEMINI_API_KEY is missing."""
    if not AI_SETTINGS_VALID:
        return None
    return GeminiClient()


def reports_dir() -> Path:
    return config.OUTPUT_DIR / "api_reports"


async def _save_upload(upload: UploadFile, suffix: str) -> str:
    """Write an upload to a temporary file and return its path."""
    content = await upload.read()
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp_file:
        tmp_file.write(content)
        return tmp_file.name


def _envelope_response(result: dict) -> JSONResponse:
    status_code = 200 if result["success"] else 422
    return JSONResponse(status_code=status_code, content=result_to_dict(result))


@app.get("/")
async def root():
    """Root endpoint - API information"""
    return {
        "message": config.APP_NAME,
        "version": config.VERSION,
        "endpoints": {
            "POST /statements/process": "Extract transactions from a statement PDF",
            "POST /statements/parse-text": "Extract transactions from rendered statement text",
            "POST /receipts/parse": "Extract a receipt with the AI extractor",
            "GET /health": "Health check",
            "GET /reports/{filename}": "Download generated report"
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "ai_configured": AI_SETTINGS_VALID,
        "timestamp": datetime.now().isoformat()
    }


@app.post("/statements/parse-text")
async def parse_statement_text(request: StatementTextRequest):
    """
    Extract transactions from statement text that was rendered elsewhere.

    - **text**: Full statement text, one visual line per line
    - **owner_id**: Identifier stored on every transaction
    """
    processor = StatementProcessor()
    return _envelope_response(processor.process_text(request.text, request.owner_id))


@app.post("/statements/process")
async def process_statement(
    file: UploadFile = File(..., description="Statement PDF"),
    owner_id: str = Form(..., description="Owner identifier"),
    use_ai_fallback: bool = Form(False, description="Use the AI extractor when no transactions are found"),
    generate_report: bool = Form(False, description="Also generate a PDF summary report"),
    ai_client: Optional[GeminiClient] = Depends(get_ai_client)
):
    """
    Process a bank statement PDF.

    Returns the extraction envelope, plus a report download link when requested.
    """
    content_size = file.size if file.size is not None else 0
    is_valid, error = config.validate_file(file.filename or "", content_size)
    if not is_valid:
        raise HTTPException(status_code=400, detail=error)

    if use_ai_fallback and ai_client is None:
        raise HTTPException(status_code=503, detail=f"AI fallback unavailable: {AI_SETTINGS_ERROR}")

    logger.info(f"Processing statement {file.filename} for owner {owner_id}")

    tmp_path = await _save_upload(file, ".pdf")
    try:
        processor = StatementProcessor(ai_client=ai_client)
        result = processor.process_statement(tmp_path, owner_id, use_ai_fallback=use_ai_fallback)
    finally:
        Path(tmp_path).unlink(missing_ok=True)

    response = _envelope_response(result)
    if not result["success"] or not generate_report:
        return response

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    report_filename = f"report_{timestamp}.pdf"
    try:
        generate_pdf_report(str(reports_dir() / report_filename), result["transactions"], owner_id)
    except OSError as e:
        logger.error(f"Error generating report: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Report generation failed: {str(e)}")

    logger.info(f"Report generated: {report_filename}")
    content = result_to_dict(result)
    content["report"] = {
        "filename": report_filename,
        "download_url": f"/reports/{report_filename}",
        "generated_at": datetime.now().isoformat()
    }
    return content


@app.post("/receipts/parse")
async def parse_receipt(
    file: UploadFile = File(..., description="Receipt image (JPEG, PNG or WEBP)"),
    owner_id: str = Form(..., description="Owner identifier"),
    ai_client: Optional[GeminiClient] = Depends(get_ai_client)
):
    """
    Extract total, date and merchant from a receipt image with the AI extractor.
    """
    if ai_client is None:
        raise HTTPException(status_code=503, detail=f"AI extractor unavailable: {AI_SETTINGS_ERROR}")

    content_size = file.size if file.size is not None else 0
    is_valid, error = config.validate_receipt_file(file.filename or "", content_size)
    if not is_valid:
        raise HTTPException(status_code=400, detail=error)

    tmp_path = await _save_upload(file, Path(file.filename).suffix.lower())
    try:
        result = parse_receipt_with_ai(tmp_path, ai_client)
    except AIExtractionError as e:
        logger.error(f"Receipt extraction failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    finally:
        Path(tmp_path).unlink(missing_ok=True)

    transaction = receipt_to_transaction(result["data"], owner_id, receipt_source=file.filename)
    result["transaction"] = transaction.to_dict() if transaction else None
    return result


@app.get("/reports/{filename}")
async def download_report(filename: str):
    """
    Download a generated PDF report.

    - **filename**: Name of the report file to download
    """
    if Path(filename).name != filename:
        raise HTTPException(status_code=400, detail="Invalid report name")

    report_path = reports_dir() / filename

    if not report_path.exists():
        raise HTTPException(status_code=404, detail="Report not found")

    return FileResponse(
        path=str(report_path),
        media_type="application/pdf",
        filename=filename
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT)
