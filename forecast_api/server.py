"""FastAPI app serving the normalized Taitung township forecast."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from forecast_api.config.schema import ServiceConfig
from forecast_api.ingest.cwa_client import CwaClient
from forecast_api.ingest.errors import (
    ConfigurationError,
    DataNotFoundError,
    ForecastError,
    UpstreamHttpError,
)
from forecast_api.ingest.normalizer import normalize
from forecast_api.models.common import utc_now_iso

logger = logging.getLogger(__name__)

TAITUNG_PATH = "/api/weather/taitung"
HEALTH_PATH = "/api/health"

# Client-facing messages
MSG_CONFIG_ERROR = "伺服器設定錯誤"
MSG_CONFIG_HINT = "請在 .env 檔案或環境變數中設定 CWA_API_KEY"
MSG_NOT_FOUND = "查無資料"
MSG_NO_TOWNSHIP = "無法取得臺東縣鄉鎮天氣資料"
MSG_UPSTREAM_ERROR = "CWA API 錯誤"
MSG_SERVER_ERROR = "伺服器錯誤"
MSG_FETCH_FAILED = "無法取得天氣資料，請稍後再試"
MSG_NO_ROUTE = "找不到此路徑"


def create_app(config: ServiceConfig, client: CwaClient | None = None) -> FastAPI:
    """Build the app around an explicit config and (optionally) a client."""
    app = FastAPI(title="CWA Township Forecast API", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.config = config
    app.state.cwa = client or CwaClient(config)

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)

    @app.get("/")
    def index():
        return {
            "message": "歡迎使用 CWA 天氣預報 API",
            "endpoints": {
                "taitung": TAITUNG_PATH,
                "health": HEALTH_PATH,
            },
        }

    @app.get(HEALTH_PATH)
    def health():
        return {"status": "OK", "timestamp": utc_now_iso()}

    @app.get(TAITUNG_PATH)
    async def taitung_weather(request: Request):
        return await get_forecast_response(
            request.app.state.cwa, request.app.state.config.target_city
        )

    return app


async def get_forecast_response(cwa: CwaClient, target_city: str) -> JSONResponse:
    """Run fetch -> normalize and map every failure to an HTTP response."""
    try:
        raw = await cwa.fetch_raw_forecast()
        data = normalize(raw, target_city)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return JSONResponse(
            status_code=500,
            content={"error": MSG_CONFIG_ERROR, "message": MSG_CONFIG_HINT},
        )
    except DataNotFoundError as e:
        logger.error("No usable forecast data: %s", e)
        return JSONResponse(
            status_code=404,
            content={"error": MSG_NOT_FOUND, "message": MSG_NO_TOWNSHIP},
        )
    except UpstreamHttpError as e:
        logger.error("CWA API error %d: %s", e.status_code, e.payload)
        message = None
        if isinstance(e.payload, dict):
            message = e.payload.get("message")
        return JSONResponse(
            status_code=e.status_code,
            content={
                "error": MSG_UPSTREAM_ERROR,
                "message": message or MSG_FETCH_FAILED,
                "details": e.payload,
            },
        )
    except ForecastError as e:
        logger.error("Failed to fetch forecast: %s", e)
        return JSONResponse(
            status_code=500,
            content={"error": MSG_SERVER_ERROR, "message": MSG_FETCH_FAILED},
        )
    except Exception:
        logger.exception("Unexpected error while building forecast")
        return JSONResponse(
            status_code=500,
            content={"error": MSG_SERVER_ERROR, "message": MSG_FETCH_FAILED},
        )

    return JSONResponse(content={"success": True, "data": data.to_dict()})


async def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    # Unknown paths and unsupported methods both read as "no such route"
    if exc.status_code in (404, 405):
        return JSONResponse(status_code=404, content={"error": MSG_NO_ROUTE})
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": MSG_SERVER_ERROR, "message": str(exc.detail)},
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": MSG_SERVER_ERROR, "message": str(exc)},
    )
