# OOP boundary for external i/o
# all http/keys/retries live here, so the rest of the code is pure and testable
# one requests session per ThreadPoolExecutor worker thread

from __future__ import annotations
import threading
from typing import Any, Dict, Mapping
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

DEFAULT_USER_AGENT = "cloudcost/0.1"


class APIClientError(RuntimeError):
    # single error type used to propagate clear messages from this layer
    pass


class _HTTPClient:
    # shared session, retry and error handling for the provider clients below
    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = 3,
        backoff_factor: float = 0.5,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.timeout = timeout
        self.user_agent = user_agent

        # each worker thread lazily obtains its own session through _session()
        self._local = threading.local()

        # retry policy for transient network, server or rate-limit issues
        self._retry = Retry(
            total=max_retries,
            backoff_factor=backoff_factor,        # exponential backoff (0.5, 1.0, 2.0, ...)
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=("GET",),
            raise_on_status=False,
        )

    def _build_session(self) -> requests.Session:
        s = requests.Session()
        s.headers.update({"User-Agent": self.user_agent})
        adapter = HTTPAdapter(max_retries=self._retry)
        s.mount("http://", adapter)
        s.mount("https://", adapter)
        return s

    def _session(self) -> requests.Session:
        sess = getattr(self._local, "session", None)
        if sess is None:
            sess = self._build_session()
            self._local.session = sess
        return sess

    def _get_json(
        self,
        url: str,
        what: str,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        try:
            resp = self._session().get(url, params=params, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            # wrap requests exceptions with context for easier debugging
            raise APIClientError(f"Request error for {what}: {exc}") from exc

        if resp.status_code >= 400:
            # include a short response snippet to speed up triage
            snippet = (resp.text or "")[:300]
            raise APIClientError(f"HTTP {resp.status_code} for {what}. Body: {snippet}")

        try:
            return resp.json()
        except ValueError as exc:
            raise APIClientError(f"Invalid JSON for {what}: {exc}") from exc


class AzureMapsWeatherClient(_HTTPClient):
    # current conditions from the Azure Maps weather api, authenticated with a subscription key
    BASE_URL = "https://atlas.microsoft.com/weather"
    API_VERSION = "1.0"

    def __init__(self, subscription_key: str | None, **kwargs: Any):
        if not subscription_key:
            # fail when key is missing to avoid confusing downstream errors
            raise APIClientError("AZURE_MAPS_SUBSCRIPTION_KEY not set")
        super().__init__(**kwargs)
        self.subscription_key = subscription_key

    def get_current_conditions(self, latitude: float, longitude: float) -> Dict[str, Any]:
        params = {
            "api-version": self.API_VERSION,
            "query": f"{latitude},{longitude}",
            "subscription-key": self.subscription_key,
        }
        data = self._get_json(
            f"{self.BASE_URL}/currentConditions/json",
            what=f"current conditions at ({latitude}, {longitude})",
            params=params,
        )

        # ensure the data meets the basic requirements expected by the weather service
        try:
            _ = data["results"][0]
        except (KeyError, IndexError, TypeError) as exc:
            raise APIClientError("Unexpected API shape: missing results[0]") from exc

        return data


class AzureManagementClient(_HTTPClient):
    # subscription locations from Azure Resource Manager, authenticated with a bearer token
    BASE_URL = "https://management.azure.com"
    API_VERSION = "2022-12-01"

    def __init__(self, subscription_id: str | None, access_token: str | None, **kwargs: Any):
        if not subscription_id:
            raise APIClientError("AZURE_SUBSCRIPTION_ID not set")
        if not access_token:
            raise APIClientError("AZURE_ACCESS_TOKEN not set")
        super().__init__(**kwargs)
        self.subscription_id = subscription_id
        self.access_token = access_token

    def list_locations(self) -> Dict[str, Any]:
        data = self._get_json(
            f"{self.BASE_URL}/subscriptions/{self.subscription_id}/locations",
            what=f"locations of subscription {self.subscription_id!r}",
            params={"api-version": self.API_VERSION},
            headers={
                "Authorization": f"Bearer {self.access_token}",
                "Content-Type": "application/json",
            },
        )

        if not isinstance(data, dict) or not isinstance(data.get("value"), list):
            raise APIClientError("Unexpected API shape: missing value list")

        return data
