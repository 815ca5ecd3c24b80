"""FastAPI routes for the wolweb dashboard and API."""

import asyncio
import dataclasses
import functools
import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.concurrency import run_in_threadpool

from wolweb import __version__
from wolweb.api.flash import COOKIE_NAME, generate_secret, make_flash_cookie, read_flash_cookie
from wolweb.api.models import (
    DeviceListResponse,
    DeviceResponse,
    ReloadResponse,
    WakeRequest,
    WakeResponse,
)
from wolweb.config.loader import WebSettings, load_app_config
from wolweb.core.mac import is_valid_mac
from wolweb.core.registry import ConfigLoadError, RegistryHandle
from wolweb.core.wake import Settings, WakeResult, WakeStatus, wake_device

logger = logging.getLogger(__name__)

_TEMPLATES_DIR = Path(__file__).parent / "templates"

DEFAULT_CONFIG = Path.home() / ".config" / "wolweb" / "config.yaml"

_STATUS_CODES = {
    WakeStatus.SUCCESS: 200,
    WakeStatus.UNKNOWN_DEVICE: 404,
    WakeStatus.INVALID_ADDRESS: 500,
    WakeStatus.NETWORK_ERROR: 502,
}


def create_app(
    config_path: Optional[str] = None,
    devices_path: Optional[str] = None,
    settings: Optional[Settings] = None,
    web: Optional[WebSettings] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    The device list is loaded before the app is returned; a malformed list
    raises ConfigLoadError so the process never serves a partial registry.

    Args:
        config_path: Path to wolweb config.yaml. If None, uses the default location.
        devices_path: Overrides devices_file from the config.
        settings: Pre-built Settings; skips reading config_path.
        web: Pre-built WebSettings (title, flash secret). Defaults are used when
            settings is given without it.

    Returns:
        FastAPI application instance

    Raises:
        ConfigError: If the settings file is invalid
        ConfigLoadError: If the device list cannot be loaded
    """
    if settings is None:
        settings, loaded_web = load_app_config(
            Path(config_path) if config_path else DEFAULT_CONFIG
        )
        web = web or loaded_web
    if web is None:
        web = WebSettings()
    if devices_path:
        settings = dataclasses.replace(settings, devices_file=Path(devices_path))

    app = FastAPI(
        title="wolweb",
        version=__version__,
        description="Wake-on-LAN for named machines",
    )

    # ── App state ─────────────────────────────────────────────────────────────
    app.state.settings = settings
    app.state.web = web
    app.state.registry = RegistryHandle(settings.devices_file)
    app.state.flash_secret = web.session_secret or generate_secret()

    templates = Jinja2Templates(directory=str(_TEMPLATES_DIR))

    # ── Helpers ────────────────────────────────────────────────────────────────

    async def _wake(key: str) -> WakeResult:
        registry = app.state.registry.current
        loop = asyncio.get_running_loop()
        # On timeout the executor job is abandoned; send_timeout bounds the thread.
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(None, functools.partial(wake_device, registry, key, settings)),
                timeout=settings.request_timeout,
            )
        except asyncio.TimeoutError:
            logger.error("Wake request for %r timed out after %.1fs", key, settings.request_timeout)
            return WakeResult(
                status=WakeStatus.NETWORK_ERROR,
                device_key=key,
                message=f"Wake request for '{key}' timed out.",
                detail=f"timed out after {settings.request_timeout:g}s",
            )

    def _to_response(r: WakeResult) -> WakeResponse:
        return WakeResponse(
            status=r.status.value,
            device=r.device_key,
            message=r.message,
            display_name=r.display_name,
            detail=r.detail,
            destination=r.destination,
        )

    # ── HTML Dashboard ────────────────────────────────────────────────────────

    @app.get("/", response_class=HTMLResponse)
    async def dashboard(request: Request) -> HTMLResponse:
        flash = read_flash_cookie(request.cookies.get(COOKIE_NAME, ""), app.state.flash_secret)
        resp = templates.TemplateResponse(
            request,
            "dashboard.html",
            {
                "title": web.title,
                "devices": list(app.state.registry.current),
                "devices_file": str(app.state.registry.path),
                "flash": flash,
            },
        )
        if COOKIE_NAME in request.cookies:
            resp.delete_cookie(COOKIE_NAME)
        return resp

    @app.post("/wake/form")
    async def post_wake_form(device: str = Form("")) -> RedirectResponse:
        if not device.strip():
            category, message = "error", "No device selected."
        else:
            result = await _wake(device)
            category = "success" if result.ok else "error"
            message = result.message
        resp = RedirectResponse("/", status_code=303)
        resp.set_cookie(
            COOKIE_NAME,
            make_flash_cookie(app.state.flash_secret, category, message),
            httponly=True,
            samesite="lax",
        )
        return resp

    # ── JSON API ──────────────────────────────────────────────────────────────

    @app.post("/wake", response_model=WakeResponse)
    async def post_wake(req: WakeRequest) -> JSONResponse:
        result = await _wake(req.device)
        return JSONResponse(
            _to_response(result).model_dump(), status_code=_STATUS_CODES[result.status]
        )

    @app.get("/devices", response_model=DeviceListResponse)
    async def get_devices() -> DeviceListResponse:
        registry = app.state.registry.current
        return DeviceListResponse(
            devices=[
                DeviceResponse(
                    key=e.key,
                    display_name=e.display_name,
                    hardware_address=e.hardware_address,
                    broadcast_address=e.broadcast_address,
                    address_valid=is_valid_mac(
                        e.hardware_address, reject_suspicious=settings.reject_suspicious
                    ),
                )
                for e in registry
            ],
            source=registry.source,
        )

    @app.post("/reload", response_model=None)
    async def post_reload() -> JSONResponse:
        try:
            registry = await run_in_threadpool(app.state.registry.reload)
        except ConfigLoadError as exc:
            logger.error("Registry reload failed, keeping previous device list: %s", exc)
            return JSONResponse({"error": str(exc)}, status_code=400)
        resp = ReloadResponse(status="reloaded", device_count=len(registry))
        return JSONResponse(resp.model_dump())

    return app
