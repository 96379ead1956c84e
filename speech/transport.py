from __future__ import annotations  # Blocking HTTP dispatch shared by the speech adapters

import os
from typing import Any, Dict, Optional, Protocol

import httpx

from config import SpeechRoute


class SpeechHttpClient(Protocol):  # Subset of httpx.Client used by the speech adapters
    def post(
        self,
        url: str,
        *,
        headers: Dict[str, str],
        timeout: float,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any: ...


def auth_headers(route: SpeechRoute) -> Dict[str, str]:
    headers: Dict[str, str] = {}
    if route.api_key_env:
        api_key = os.getenv(route.api_key_env)
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
    headers.update(route.extra_headers)
    return headers


def post(
    route: SpeechRoute,
    client: Optional[SpeechHttpClient],
    *,
    data: Optional[Dict[str, Any]] = None,
    files: Optional[Dict[str, Any]] = None,
    json: Optional[Dict[str, Any]] = None,
) -> Any:  # Response is fully read before an owned client closes
    url = f"{route.base_url}{route.endpoint}"
    headers = auth_headers(route)
    if client is not None:
        return client.post(url, headers=headers, timeout=route.timeout_s, data=data, files=files, json=json)
    with httpx.Client(timeout=route.timeout_s) as http_client:
        response = http_client.post(url, headers=headers, data=data, files=files, json=json)
        response.read()
        return response
