"""Admin API routes for the scan configuration."""

from fastapi import APIRouter, Depends, Request

from .settings_schemas import ScanSettingsResponse, ScanSettingsUpdateRequest
from .settings_service import SettingsService

router = APIRouter(prefix="/api/settings", tags=["settings"])


def get_settings_service(request: Request) -> SettingsService:
    try:
        return request.app.state.settings_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover
        raise RuntimeError("SettingsService is not configured") from exc


@router.get("/scan", response_model=ScanSettingsResponse)
def read_scan_settings(
    service: SettingsService = Depends(get_settings_service),
) -> ScanSettingsResponse:
    return ScanSettingsResponse(**service.get_scan_config().to_dict())


@router.put("/scan", response_model=ScanSettingsResponse)
def update_scan_settings(
    payload: ScanSettingsUpdateRequest,
    actor: str | None = None,
    service: SettingsService = Depends(get_settings_service),
) -> ScanSettingsResponse:
    config = service.update(payload.model_dump(exclude_none=True), actor=actor or "admin-api")
    return ScanSettingsResponse(**config.to_dict())
