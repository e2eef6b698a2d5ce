"""Pydantic schemas for the scan settings admin API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ScanSettingsResponse(BaseModel):
    scan_content: bool
    scan_filename: bool
    scan_postmeta_id: bool
    scan_postmeta_url: bool
    scan_termmeta_url: bool
    scan_options_url: bool
    scan_comments_url: bool
    background_processing: bool
    supported_post_types: list[str] = Field(default_factory=list)
    protected_media_ids: list[int] = Field(default_factory=list)


class ScanSettingsUpdateRequest(BaseModel):
    scan_content: bool | None = None
    scan_filename: bool | None = None
    scan_postmeta_id: bool | None = None
    scan_postmeta_url: bool | None = None
    scan_termmeta_url: bool | None = None
    scan_options_url: bool | None = None
    scan_comments_url: bool | None = None
    background_processing: bool | None = None
    supported_post_types: list[str] | None = Field(default=None, max_length=100)
    protected_media_ids: list[int] | None = Field(default=None, max_length=10_000)
