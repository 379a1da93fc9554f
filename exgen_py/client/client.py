"""HTTP client for the learning platform REST API."""

import getpass
from typing import List, Optional
from pathlib import Path

import requests
from rich.console import Console

from .models import Draft, GenerationRequest, Topic
from ..config.global_config import GlobalConfig
from ..errors import TransportError


console = Console()

GENERIC_ERROR = "Something went wrong!"
TIMEOUT = 60


class PlatformClient:
    """HTTP client for the exercise, topic and AI-generation endpoints."""

    def __init__(
        self,
        config: Optional[GlobalConfig] = None,
        config_path: Optional[Path] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the client."""
        self.config_path = config_path or GlobalConfig.default_path()
        self.config = config or GlobalConfig.load(self.config_path)
        self.session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return self.config.api_url.rstrip("/")

    def _headers(self) -> dict:
        if self.config.access_token:
            return {"Authorization": f"Bearer {self.config.access_token}"}
        return {}

    def _send(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        response = self.session.request(
            method, url, headers=self._headers(), timeout=TIMEOUT, **kwargs
        )

        # One refresh attempt, then replay the original request
        if response.status_code == 401 and self._refresh_token():
            response = self.session.request(
                method, url, headers=self._headers(), timeout=TIMEOUT, **kwargs
            )

        response.raise_for_status()
        return response

    def _request(self, method: str, path: str, fallback: str = GENERIC_ERROR, **kwargs):
        """Make a request and decode the JSON body, wrapping failures."""
        try:
            response = self._send(method, path, **kwargs)
        except requests.RequestException as e:
            raise TransportError.from_request_error(e, fallback) from e

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(fallback, status_code=response.status_code) from e

    def _get(self, path: str, fallback: str = GENERIC_ERROR, **kwargs):
        return self._request("GET", path, fallback, **kwargs)

    def _post(self, path: str, data: dict, fallback: str = GENERIC_ERROR, **kwargs):
        return self._request("POST", path, fallback, json=data, **kwargs)

    def _refresh_token(self) -> bool:
        """Exchange the saved refresh token for a new access token."""
        if not self.config.refresh_token:
            return False

        try:
            response = self.session.post(
                f"{self.base_url}/auth/refresh",
                json={"refreshToken": self.config.refresh_token},
                timeout=TIMEOUT,
            )
            response.raise_for_status()
            token = (response.json().get("data") or {}).get("accessToken")
        except (requests.RequestException, ValueError, AttributeError):
            return False

        if not token:
            return False

        self.config.access_token = token
        self.config.save(self.config_path)
        return True

    def login(
        self,
        email: Optional[str] = None,
        password: Optional[str] = None,
        remember_me: bool = True,
    ) -> bool:
        """
        Authenticate with the platform.
        If credentials not provided, prompts for them.
        """
        if email is None:
            email = input("Email: ")
        if password is None:
            password = getpass.getpass("Password: ")

        try:
            body = self._post(
                "/auth/login",
                {"email": email, "password": password, "rememberMe": remember_me},
                fallback="Login failed",
            )
        except TransportError as e:
            console.print(f"[red]Login failed: {e.message}[/red]")
            return False

        data = body.get("data") or {}
        token = data.get("accessToken")
        if not token:
            console.print("[red]Login failed: no access token in response[/red]")
            return False

        self.config.email = email
        self.config.access_token = token
        self.config.refresh_token = data.get("refreshToken") or ""
        self.config.save(self.config_path)

        console.print(f"[green]Successfully logged in as {email}[/green]")
        return True

    def logout(self) -> None:
        """Forget the saved tokens."""
        self.config.clear_tokens()
        self.config.save(self.config_path)

    def get_topics(self) -> List[Topic]:
        """Fetch the topic directory."""
        body = self._get(
            "/topics", fallback="Could not load topics!", params={"pageSize": 100}
        )
        return [
            Topic(id=str(item.get("id", "")), name=item.get("name", ""))
            for item in body.get("data") or []
        ]

    def generate_exercises(self, request: GenerationRequest) -> List[Draft]:
        """Ask the AI endpoint to generate exercise drafts."""
        body = self._post("/ai/exercises/generate", request.to_payload())
        return [Draft.from_payload(item) for item in body.get("exercises") or []]

    def create_exercise(self, payload: dict) -> dict:
        """Persist one exercise."""
        return self._post("/exercises", payload)
