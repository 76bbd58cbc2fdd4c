"""Device registry gateway implementation - Infrastructure layer."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
from dependency_injector.wiring import inject

from iiot_coordinator.domain.entities.device import (
    ConnectionState,
    DeviceTwin,
    DirectMethodResponse,
)
from iiot_coordinator.domain.entities.errors import (
    DeviceNotFoundError,
    DeviceRegistryError,
)
from iiot_coordinator.domain.gateways.device_registry_gateway import (
    IDeviceRegistryGateway,
)
from iiot_coordinator.shared import get_logger

logger = get_logger(__name__)

# Headroom on top of the device-side method timeout for the HTTP round trip.
METHOD_TIMEOUT_MARGIN_SECONDS = 5.0


class DeviceRegistryGateway(IDeviceRegistryGateway):
    """HTTP client for the device registry / twin service."""

    @inject
    def __init__(
        self,
        registry_url: str,
        api_key: Optional[str] = None,
        timeout: float = 15.0,
        page_size: int = 100,
    ):
        """
        Initialize Device Registry Gateway.

        Args:
            registry_url: Base URL of the registry service
            api_key: Optional bearer token sent on every request
            timeout: Default HTTP timeout in seconds
            page_size: Twins requested per page when listing
        """
        self.registry_url = registry_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.page_size = page_size

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        if extra:
            headers.update(extra)
        return headers

    async def get_twin(self, device_id: str) -> DeviceTwin:
        url = f"{self.registry_url}/devices/{device_id}/twin"
        logger.debug("registry.twin.request", url=url, device_id=device_id)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, headers=self._headers())
                if response.status_code == httpx.codes.NOT_FOUND:
                    raise DeviceNotFoundError(device_id)
                response.raise_for_status()
                return self._parse_twin(response.json(), device_id)

        except httpx.HTTPStatusError as e:
            logger.error(
                "registry.twin.http_error",
                device_id=device_id,
                status_code=e.response.status_code,
                response_text=e.response.text,
                url=url,
            )
            raise DeviceRegistryError(
                f"Registry returned HTTP {e.response.status_code}: {e.response.text}",
                status_code=e.response.status_code,
            ) from e

        except httpx.RequestError as e:
            logger.error(
                "registry.twin.request_error",
                device_id=device_id,
                error=str(e),
                url=url,
            )
            raise DeviceRegistryError(
                f"Failed to communicate with registry: {str(e)}"
            ) from e

    async def list_twins(self) -> List[DeviceTwin]:
        url = f"{self.registry_url}/devices/twins"
        twins: List[DeviceTwin] = []
        continuation: Optional[str] = None

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                while True:
                    params: Dict[str, Any] = {"pageSize": self.page_size}
                    if continuation:
                        params["continuationToken"] = continuation
                    response = await client.get(
                        url, headers=self._headers(), params=params
                    )
                    response.raise_for_status()

                    payload = response.json()
                    items = payload.get("items") or []
                    twins.extend(
                        self._parse_twin(item, item.get("deviceId", ""))
                        for item in items
                        if isinstance(item, dict)
                    )
                    continuation = payload.get("continuationToken")
                    if not continuation:
                        break

        except httpx.HTTPStatusError as e:
            logger.error(
                "registry.twins.http_error",
                status_code=e.response.status_code,
                response_text=e.response.text,
                url=url,
            )
            raise DeviceRegistryError(
                f"Registry returned HTTP {e.response.status_code}: {e.response.text}",
                status_code=e.response.status_code,
            ) from e

        except httpx.RequestError as e:
            logger.error("registry.twins.request_error", error=str(e), url=url)
            raise DeviceRegistryError(
                f"Failed to list twins from registry: {str(e)}"
            ) from e

        logger.info("registry.twins.listed", count=len(twins))
        return twins

    async def invoke_method(
        self,
        device_id: str,
        method_name: str,
        payload: Optional[Dict[str, Any]] = None,
        *,
        timeout_seconds: float,
    ) -> DirectMethodResponse:
        url = f"{self.registry_url}/devices/{device_id}/methods"
        body = {
            "methodName": method_name,
            "payload": payload or {},
            "responseTimeoutInSeconds": int(timeout_seconds),
        }

        logger.info(
            "registry.method.request",
            device_id=device_id,
            method=method_name,
            timeout_seconds=timeout_seconds,
        )

        try:
            async with httpx.AsyncClient(
                timeout=timeout_seconds + METHOD_TIMEOUT_MARGIN_SECONDS
            ) as client:
                response = await client.post(url, headers=self._headers(), json=body)

            # The registry relays the device status inside a 2xx envelope;
            # a non-2xx response means the call never reached the device.
            response.raise_for_status()
            data = response.json() if response.content else {}
            result = DirectMethodResponse(
                status=int(data.get("status", response.status_code)),
                payload=data.get("payload"),
            )
            logger.info(
                "registry.method.response",
                device_id=device_id,
                method=method_name,
                status=result.status,
            )
            return result

        except httpx.TimeoutException as e:
            logger.error(
                "registry.method.timeout",
                device_id=device_id,
                method=method_name,
                timeout_seconds=timeout_seconds,
            )
            raise DeviceRegistryError(
                f"Direct method {method_name} on {device_id} timed out"
            ) from e

        except httpx.HTTPStatusError as e:
            logger.error(
                "registry.method.http_error",
                device_id=device_id,
                method=method_name,
                status_code=e.response.status_code,
                response_text=e.response.text,
            )
            raise DeviceRegistryError(
                f"Registry returned HTTP {e.response.status_code}: {e.response.text}",
                status_code=e.response.status_code,
            ) from e

        except httpx.RequestError as e:
            logger.error(
                "registry.method.request_error",
                device_id=device_id,
                method=method_name,
                error=str(e),
            )
            raise DeviceRegistryError(
                f"Failed to invoke {method_name} on {device_id}: {str(e)}"
            ) from e

    async def update_desired_property(
        self, device_id: str, property_name: str, value: Any
    ) -> None:
        url = f"{self.registry_url}/devices/{device_id}/twin"
        body = {"properties": {"desired": {property_name: value}}}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.patch(
                    url, headers=self._headers({"If-Match": "*"}), json=body
                )
                if response.status_code == httpx.codes.NOT_FOUND:
                    raise DeviceNotFoundError(device_id)
                response.raise_for_status()

        except httpx.HTTPStatusError as e:
            logger.error(
                "registry.twin_patch.http_error",
                device_id=device_id,
                property_name=property_name,
                status_code=e.response.status_code,
                response_text=e.response.text,
            )
            raise DeviceRegistryError(
                f"Registry returned HTTP {e.response.status_code}: {e.response.text}",
                status_code=e.response.status_code,
            ) from e

        except httpx.RequestError as e:
            logger.error(
                "registry.twin_patch.request_error",
                device_id=device_id,
                property_name=property_name,
                error=str(e),
            )
            raise DeviceRegistryError(
                f"Failed to update twin of {device_id}: {str(e)}"
            ) from e

        logger.info(
            "registry.twin_patch.applied",
            device_id=device_id,
            property_name=property_name,
        )

    def _parse_twin(self, data: Dict[str, Any], device_id: str) -> DeviceTwin:
        properties = data.get("properties") or {}
        raw_state = str(data.get("connectionState") or "")
        connection_state = (
            ConnectionState.CONNECTED
            if raw_state.lower() == ConnectionState.CONNECTED.value.lower()
            else ConnectionState.DISCONNECTED
        )
        return DeviceTwin(
            device_id=str(data.get("deviceId") or device_id),
            connection_state=connection_state,
            reported=self._ensure_dict(properties.get("reported")),
            desired=self._ensure_dict(properties.get("desired")),
            etag=data.get("etag"),
        )

    def _ensure_dict(self, payload: Any) -> Dict[str, Any]:
        return payload if isinstance(payload, dict) else {}
