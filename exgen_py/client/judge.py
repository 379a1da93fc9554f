"""HTTP client for a Judge0 sandboxed execution service."""

from typing import List, Optional

import requests


# Judge0 language ids for the solution languages offered by the generator
LANGUAGE_ID_MAP = {
    "Java": 62,
    "JavaScript": 63,
    "TypeScript": 74,
    "Python": 71,
    "C++": 54,
    "C": 50,
    "Kotlin": 78,
    "C#": 51,
}

STATUS_FIELDS = "token,status,stdout,stderr,time"
TIMEOUT = 30


def language_id_for(language: Optional[str]) -> Optional[int]:
    """Map a solution language name to its Judge0 id, or None."""
    if not language:
        return None
    return LANGUAGE_ID_MAP.get(language)


def _submissions_from(data) -> List[dict]:
    # Judge0 answers with either a bare list or {"submissions": [...]}
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return data.get("submissions") or []
    return []


class Judge0Client:
    """Batch submit and batch status calls against Judge0."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    def submit_batch(self, submissions: List[dict]) -> List[str]:
        """Submit all submissions in one call and return their tokens."""
        response = self.session.post(
            f"{self.base_url}/submissions/batch",
            params={"base64_encoded": "false"},
            json={"submissions": submissions},
            timeout=TIMEOUT,
        )
        response.raise_for_status()
        return [
            item["token"]
            for item in _submissions_from(response.json())
            if isinstance(item, dict) and item.get("token")
        ]

    def get_batch_status(self, tokens: List[str]) -> List[dict]:
        """Fetch the current state of every token in one call."""
        if not tokens:
            return []

        response = self.session.get(
            f"{self.base_url}/submissions/batch",
            params={
                "tokens": ",".join(tokens),
                "base64_encoded": "false",
                "fields": STATUS_FIELDS,
            },
            timeout=TIMEOUT,
        )
        response.raise_for_status()
        return _submissions_from(response.json())
