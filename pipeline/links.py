"""Candidate-facing links embedded in notifications."""

from typing import Optional

from pipeline.config import get_settings


class LinkBuilder:
    """Builds frontend URLs keyed by candidate id."""

    def __init__(self, base_url: Optional[str] = None):
        self.base_url = (base_url or get_settings().FRONTEND_URL).rstrip("/")

    def assignment_link(self, candidate_id: str) -> str:
        return f"{self.base_url}/assignment/{candidate_id}"

    def booking_link(self, candidate_id: str) -> str:
        return f"{self.base_url}/meet/{candidate_id}"
