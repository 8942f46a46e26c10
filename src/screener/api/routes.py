"""JSON API endpoints for scan status, results and auto-scan control."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from screener.api.serializers import scan_result_to_dict
from screener.auto_scan import AutoScanner
from screener.exceptions import ScanAbandonedError, ScanInProgressError, ScreenerError
from screener.logging import get_logger

log = get_logger(__name__)

router = APIRouter()


def _scanner(request: Request) -> AutoScanner:
    return request.app.state.auto_scanner


@router.get("/status")
async def get_status(request: Request) -> JSONResponse:
    """Driver state plus the rotating status line."""
    return JSONResponse(content=_scanner(request).get_status())


@router.get("/scan/latest")
async def get_latest_scan(request: Request) -> JSONResponse:
    """Most recent successful scan, 404 before the first one."""
    scanner = _scanner(request)
    latest = scanner.latest_result
    if latest is None:
        return JSONResponse(status_code=404, content={"error": "no scan has completed yet"})
    return JSONResponse(content=scan_result_to_dict(latest, scanner.last_deliveries))


@router.post("/scan")
async def run_scan(request: Request) -> JSONResponse:
    """Run one scan cycle now and return its result."""
    scanner = _scanner(request)
    try:
        result = await scanner.scan_once()
    except ScanInProgressError as e:
        return JSONResponse(status_code=409, content={"error": str(e)})
    except ScanAbandonedError as e:
        return JSONResponse(status_code=409, content={"error": str(e)})
    except ScreenerError:
        log.warning("manual_scan_failed", error=scanner.last_error)
        return JSONResponse(status_code=502, content={"error": scanner.last_error})
    return JSONResponse(content=scan_result_to_dict(result, scanner.last_deliveries))


@router.post("/auto-scan/start")
async def start_auto_scan(request: Request) -> JSONResponse:
    scanner = _scanner(request)
    await scanner.start()
    return JSONResponse(content=scanner.get_status())


@router.post("/auto-scan/stop")
async def stop_auto_scan(request: Request) -> JSONResponse:
    scanner = _scanner(request)
    await scanner.stop()
    return JSONResponse(content=scanner.get_status())
