import logging
from datetime import datetime
from typing import List, Optional

import httpx

from pacer.errors import NotConfigured, StravaAuthError, TransientIOFailure
from pacer.schemas import ExternalActivity

logger = logging.getLogger(__name__)


def _parse_strava_datetime(value: str, local: bool) -> datetime:
    # Strava marks start_date_local with "Z" even though it is wall-clock time
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return parsed.replace(tzinfo=None) if local else parsed


def parse_activity(data: dict) -> Optional[ExternalActivity]:
    """Convert one Strava activity summary, or None if it lacks a start or distance."""
    start = data.get("start_date_local") or data.get("start_date")
    if not start or data.get("distance") is None:
        return None
    return ExternalActivity(
        start_date=_parse_strava_datetime(start, local=bool(data.get("start_date_local"))),
        distance_meters=float(data["distance"]),
        activity_type=data.get("type") or data.get("sport_type") or "",
    )


class StravaClient:
    """Strava API client for the OAuth token flow and the activity feed."""
    OAUTH_URL = "https://www.strava.com/oauth/token"
    API_URL = "https://www.strava.com/api/v3"

    def __init__(self, client_id: str = None, client_secret: str = None, timeout: float = 10.0):
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        self._warned_not_configured = False

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def warn_if_not_configured(self) -> bool:
        """Log the missing credentials once per client. Returns True when unconfigured."""
        if self.configured:
            return False
        if not self._warned_not_configured:
            logger.warning("Strava credentials not configured, sync is disabled")
            self._warned_not_configured = True
        return True

    async def _token_request(self, payload: dict) -> dict:
        if not self.configured:
            raise NotConfigured("STRAVA_CLIENT_ID and STRAVA_CLIENT_SECRET required")

        data = {"client_id": self.client_id, "client_secret": self.client_secret, **payload}
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(self.OAUTH_URL, data=data, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.error(f"Strava token request failed: {e}")
            raise TransientIOFailure(f"Strava token request failed: {e}") from e

        if response.status_code in (400, 401, 403):
            raise StravaAuthError(f"Strava rejected the token request: {response.status_code}")
        if response.status_code != 200:
            raise TransientIOFailure(f"Strava token request failed: {response.status_code}")

        try:
            token = response.json()
        except ValueError as e:
            raise TransientIOFailure("Strava token response was not valid JSON") from e
        if not isinstance(token, dict) or not token.get("access_token"):
            raise TransientIOFailure("Strava token response carried no access token")
        return token

    async def exchange_code(self, code: str) -> dict:
        """Trade an authorization code for access and refresh tokens."""
        token = await self._token_request({"code": code, "grant_type": "authorization_code"})
        logger.info(f"Exchanged Strava code for athlete {token.get('athlete', {}).get('id')}")
        return token

    async def refresh_access_token(self, refresh_token: str) -> dict:
        return await self._token_request({
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        })

    async def fetch_activities(self, access_token: str, per_page: int = 30) -> List[ExternalActivity]:
        """Most recent activities of the athlete, newest first."""
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    f"{self.API_URL}/athlete/activities",
                    headers={"Authorization": f"Bearer {access_token}"},
                    params={"per_page": per_page},
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            logger.error(f"Strava activities request failed: {e}")
            raise TransientIOFailure(f"Strava activities request failed: {e}") from e

        if response.status_code == 401:
            raise StravaAuthError("Strava access token rejected")
        if response.status_code != 200:
            raise TransientIOFailure(f"Strava activities request failed: {response.status_code}")

        try:
            items = response.json()
        except ValueError as e:
            raise TransientIOFailure("Strava activities response was not valid JSON") from e
        if not isinstance(items, list):
            raise TransientIOFailure("Strava activities response was not a list")

        activities = []
        for item in items:
            if not isinstance(item, dict):
                continue
            activity = parse_activity(item)
            if activity is not None:
                activities.append(activity)
        return activities
