from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pathlib import Path
import json
import logging
import re

from api.config import settings
from api.export import write_csv
from scrapers.config import get_site_summary
from scrapers.exceptions import CrawlRequestError
from scrapers.manager import CrawlOrchestrator

# Setup logging directory
settings.log_dir.mkdir(exist_ok=True)


# Custom formatter to strip ANSI color codes from file logs
class ColorStripFormatter(logging.Formatter):
    """Formatter that strips ANSI color codes from log messages."""
    ansi_escape = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')

    def format(self, record):
        message = super().format(record)
        return self.ansi_escape.sub('', message)


# Setup logging with color support for console, stripped for file
file_handler = logging.FileHandler(settings.log_file, encoding='utf-8')
file_handler.setFormatter(ColorStripFormatter(settings.log_format))

console_handler = logging.StreamHandler()
console_handler.setFormatter(logging.Formatter(settings.log_format))

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    handlers=[file_handler, console_handler],
    force=True  # Override any existing configuration
)

# Scraper loggers get their own handlers and do not propagate to root,
# so crawl progress lines appear exactly once
scraper_logger = logging.getLogger('scraper')
scraper_logger.propagate = False
# Only add handlers if not already present (prevents duplicates on module reload)
if not scraper_logger.handlers:
    scraper_file_handler = logging.FileHandler(settings.log_file, encoding='utf-8')
    scraper_file_handler.setFormatter(ColorStripFormatter(settings.log_format))
    scraper_logger.addHandler(scraper_file_handler)

    scraper_console_handler = logging.StreamHandler()
    scraper_console_handler.setFormatter(logging.Formatter(settings.log_format))
    scraper_logger.addHandler(scraper_console_handler)
scraper_logger.setLevel(getattr(logging, settings.log_level.upper()))

logger = logging.getLogger(__name__)


# Filter to suppress noisy liveness-probe access logs
class PollingEndpointFilter(logging.Filter):
    SUPPRESSED_ENDPOINTS = ['/test']

    def filter(self, record):
        try:
            msg = record.getMessage()
        except Exception:
            msg = str(record.msg)
        for endpoint in self.SUPPRESSED_ENDPOINTS:
            if f'"GET {endpoint} ' in msg:
                return False
        return True


uvicorn_access_logger = logging.getLogger("uvicorn.access")
uvicorn_access_logger.addFilter(PollingEndpointFilter())

SCRAPE_FAILED_MESSAGE = "An error occurred while scraping."


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info("=" * 60)
    logger.info("Local Services Scraper Starting Up")
    logger.info("=" * 60)
    logger.info(f"Log file: {settings.log_file}")
    logger.info(f"CSV export: {settings.output_csv_path}")
    logger.info(f"CORS origins: {settings.cors_origins}")
    logger.info("Backend ready to accept requests")

    yield  # Application runs here

    logger.info("=" * 60)
    logger.info("Local Services Scraper Shutting Down")
    logger.info("=" * 60)


app = FastAPI(
    title="Local Services Scraper API",
    version="1.0.0",
    lifespan=lifespan
)

# Note: allow_credentials must be False when allow_origins is ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_orchestrator() -> CrawlOrchestrator:
    """Build a crawl orchestrator from application settings."""
    return CrawlOrchestrator()


def get_export_path() -> Path:
    """Destination of the CSV export."""
    return settings.output_csv_path


@app.get("/favicon.ico", include_in_schema=False)
async def favicon():
    """Return empty response for favicon requests"""
    return Response(status_code=204)


# API Endpoints

@app.get("/")
async def root():
    return {"message": "Local Services Scraper API", "version": "1.0.0"}


@app.get("/test")
async def test_server():
    """Liveness check"""
    return {"message": "The server is running correctly!"}


@app.get("/api/sites")
async def list_sites():
    """List configured listing sites"""
    return {"sites": get_site_summary()}


@app.post("/scrape")
async def scrape(
    request: Request,
    orchestrator: CrawlOrchestrator = Depends(get_orchestrator),
    export_path: Path = Depends(get_export_path),
):
    """
    Crawl every keyword and export the aggregated records.

    Body: {"keywords": [...], "page": 1, "lci": "..."}
    """
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return JSONResponse(status_code=400, content={"error": "Request body must be valid JSON."})

    try:
        result = await orchestrator.run(payload)
        logger.info("Scraping completed. Generating CSV file...")
        file_path = write_csv(result, export_path)
    except CrawlRequestError as e:
        logger.warning(f"Rejected scrape request: {e}")
        return JSONResponse(status_code=400, content={"error": str(e)})
    except Exception as e:
        logger.exception(f"Error during scraping: {e}")
        return JSONResponse(status_code=500, content={"error": SCRAPE_FAILED_MESSAGE})

    return {
        "success": True,
        "data": [record.to_dict() for record in result],
        "file": str(file_path),
        "summary": result.summary(),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        access_log=True,
        log_config=None,  # Keep the logging configured above
        timeout_keep_alive=5,
        timeout_graceful_shutdown=5.0,
    )
