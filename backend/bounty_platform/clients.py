from __future__ import annotations
from typing import AsyncGenerator
import httpx
from fastapi import Depends
from bounty_platform.config import Settings, get_settings
from bounty_platform.services.bounties import BountyService
from bounty_platform.services.cloudinary import CloudinaryClient
from bounty_platform.services.privy import PrivyClient


async def get_http_client(settings: Settings = Depends(get_settings)) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
        yield client


def get_bounty_service(
    http: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
) -> BountyService:
    return BountyService(http, settings)


def get_cloudinary(
    http: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
) -> CloudinaryClient:
    return CloudinaryClient(http, settings)


def get_privy(
    http: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
) -> PrivyClient:
    return PrivyClient(http, settings)
