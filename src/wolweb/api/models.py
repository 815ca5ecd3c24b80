"""Pydantic request/response models for the wolweb API."""

from typing import Optional

from pydantic import BaseModel


class WakeRequest(BaseModel):
    device: str


class WakeResponse(BaseModel):
    status: str
    device: str
    message: str
    display_name: Optional[str] = None
    detail: Optional[str] = None
    destination: Optional[str] = None


class DeviceResponse(BaseModel):
    key: str
    display_name: str
    hardware_address: str
    broadcast_address: Optional[str]
    address_valid: bool


class DeviceListResponse(BaseModel):
    devices: list[DeviceResponse]
    source: str


class ReloadResponse(BaseModel):
    status: str
    device_count: int
