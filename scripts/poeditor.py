"""POEditor API Client.

Requests translation exports from the POEditor API v2 and downloads them.
"""

from typing import Any

import requests
from errors import ServiceError

API_URL: str = "https://api.poeditor.com/v2"
REQUEST_TIMEOUT: int = 60

HEADERS: dict[str, str] = {
    "User-Agent": "poeditor-strings-export",
    "Accept": "application/json",
}


class POEditorClient:
    """Minimal client for the POEditor API.

    Attributes:
        api_token (str): The POEditor API token
        session (requests.Session): HTTP session used for all requests
    """

    def __init__(self, api_token: str, session: requests.Session | None = None) -> None:
        self.api_token = api_token
        self.session = session or requests.Session()

    def _post(self, endpoint: str, data: dict[str, str]) -> dict[str, Any]:
        """POST to an API endpoint and return the "result" object.

        Args:
            endpoint (str): Endpoint path such as "projects/export".
            data (dict[str, str]): Form fields besides the API token.

        Returns:
            dict[str, Any]: The result of a successful call.

        Raises:
            ServiceError: If the request fails or POEditor reports a failure.
        """
        url = f"{API_URL}/{endpoint}"
        form = {"api_token": self.api_token, **data}

        try:
            response = self.session.post(url, data=form, headers=HEADERS, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as e:
            raise ServiceError(f"Request to {endpoint} failed: {e}") from e
        except ValueError as e:
            raise ServiceError(f"Invalid JSON from {endpoint}: {e}") from e

        if not isinstance(body, dict):
            raise ServiceError(f"Unexpected response from {endpoint}")

        status = body.get("response")
        if not isinstance(status, dict):
            raise ServiceError(f"Response from {endpoint} has no status")
        if status.get("status") != "success":
            raise ServiceError(
                status.get("message") or f"{endpoint} failed",
                code=str(status.get("code")) if status.get("code") is not None else None,
            )

        result = body.get("result", {})
        return result if isinstance(result, dict) else {}

    def export_translations(self, project_id: str, language: str, export_format: str) -> bytes:
        """Export the translations of one language and download them.

        Args:
            project_id (str): The POEditor project ID.
            language (str): The POEditor language code.
            export_format (str): The POEditor export type, e.g. "json".

        Returns:
            bytes: The exported file.

        Raises:
            ServiceError: If the export or the download fails.
        """
        result = self._post(
            "projects/export",
            {"id": project_id, "language": language, "type": export_format},
        )

        url = result.get("url")
        if not isinstance(url, str) or not url:
            raise ServiceError(f"Export of '{language}' returned no download URL")

        try:
            response = self.session.get(url, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ServiceError(f"Error downloading export of '{language}': {e}") from e

        return response.content

    def list_languages(self, project_id: str) -> list[str]:
        """List the language codes of a project.

        Args:
            project_id (str): The POEditor project ID.

        Returns:
            list[str]: The language codes, in the order POEditor lists them.

        Raises:
            ServiceError: If the request fails.
        """
        result = self._post("languages/list", {"id": project_id})
        return [
            language["code"]
            for language in result.get("languages", [])
            if isinstance(language, dict) and isinstance(language.get("code"), str)
        ]
