"""Claude AI integration for resume screening and job drafting.

The scorer compares a resume with a job and returns a 0-100 relevance score
with a one-sentence reason. It never raises for a low-confidence or
unparseable answer; those come back as an absent score so the candidate goes
to manual review. Only API failures raise ``ScoringError``.
"""

import asyncio
import base64
import json
import re
from string import Template
from typing import Any, Callable, Optional

import structlog
from anthropic import Anthropic, APIError

from pipeline.config import get_settings
from pipeline.credentials import CredentialResolver, Provider
from pipeline.errors import CollaboratorFailure
from pipeline.models import JobContext
from pipeline.screening import ResumeContent, ScoreResult, ScreeningMode, normalize_score

logger = structlog.get_logger()

MISSING_KEY_REASON = "AI screening not configured (missing API key); manual review required"
INVALID_RESPONSE_REASON = "AI returned an invalid response; manual review required"

SCREENING_PROMPT = """You are an expert HR recruiter. Compare the candidate resume against the job description and keywords.

Job Title: {job_title}

Job Description:
{job_description}

Responsibilities:
{responsibilities}

Keywords:
{keywords}

Task:
1. Evaluate the relevance of the resume to the job.
2. Assign a score from 0 to 100 (70 is the passing threshold).
3. Give a brief, honest reason for the score.
   - Below 70: explain what is missing.
   - 70 or above: highlight strengths.

Output ONLY strict JSON:
{{"score": <0-100>, "reason": "<one sentence>"}}
"""

RESPONSIBILITIES_PROMPT = """Write a professional and concise list of job responsibilities for a "{job_title}".
Format it as a bulleted list (Markdown).
Keep it under 200 words.
Focus on key duties and required skills."""


def safe_template_substitute(template: str, **kwargs) -> str:
    """Substitute {name} placeholders without tripping on braces in user content.

    ``{{`` and ``}}`` render as literal braces.
    """
    converted = template.replace("{{", "__DOUBLE_OPEN__").replace("}}", "__DOUBLE_CLOSE__")
    converted = converted.replace("$", "$$")
    converted = re.sub(r"\{(\w+)\}", r"${\1}", converted)
    converted = converted.replace("__DOUBLE_OPEN__", "{").replace("__DOUBLE_CLOSE__", "}")
    return Template(converted).safe_substitute(**kwargs)


def _response_text(response: Any) -> str:
    """Concatenated text blocks of a Messages API reply; empty if there are none."""
    parts = []
    for block in getattr(response, "content", None) or []:
        text = getattr(block, "text", None)
        if isinstance(text, str):
            parts.append(text)
    return "".join(parts)


class ClaudeScorer:
    """Scores resumes with Claude using the job owner's API key."""

    def __init__(
        self,
        credentials: CredentialResolver,
        client_factory: Optional[Callable[[str], Any]] = None,
    ):
        config = get_settings()
        self.credentials = credentials
        self.client_factory = client_factory or (lambda api_key: Anthropic(api_key=api_key))
        self.model = config.CLAUDE_MODEL
        self.max_tokens = config.CLAUDE_MAX_TOKENS

    def _client(self, user_id: Optional[str]) -> Optional[Any]:
        credential = self.credentials.resolve(user_id, Provider.ANTHROPIC)
        if not credential.available:
            return None
        logger.debug("Using Anthropic key", user_id=user_id, source=credential.source.value)
        return self.client_factory(credential.key)

    async def score(self, resume: ResumeContent, job: JobContext) -> ScoreResult:
        """Score a resume against a job.

        Args:
            resume: Extracted text, or the raw PDF for document mode
            job: Job title, description, responsibilities and keywords

        Returns:
            ScoreResult; score is None when no answer could be obtained

        Raises:
            ScoringError: If the Claude API call fails
        """
        if resume.mode == ScreeningMode.SKIPPED:
            return ScoreResult(None, "No resume content provided; manual review required")

        client = self._client(job.owner_id)
        if client is None:
            logger.warning("No Anthropic API key available for screening", owner_id=job.owner_id)
            return ScoreResult(None, MISSING_KEY_REASON)

        prompt = safe_template_substitute(
            SCREENING_PROMPT,
            job_title=job.title,
            job_description=job.description,
            responsibilities=job.responsibilities or "Not specified",
            keywords=", ".join(job.keyword_list()) or "None",
        )

        if resume.mode == ScreeningMode.DOCUMENT:
            content = [
                {
                    "type": "document",
                    "source": {
                        "type": "base64",
                        "media_type": resume.media_type,
                        "data": base64.standard_b64encode(resume.document).decode("ascii"),
                    },
                },
                {"type": "text", "text": prompt},
            ]
        else:
            content = f"{prompt}\nCandidate Resume Text:\n{resume.text}"

        logger.info("Screening resume with Claude", mode=resume.mode.value, job_title=job.title)

        try:
            response = await asyncio.to_thread(
                client.messages.create,
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": content}],
            )
        except APIError as e:
            logger.error("Claude API error during screening", error=str(e))
            raise ScoringError(f"Resume screening failed: {str(e)}") from e

        return self._parse_score_response(_response_text(response))

    async def generate_responsibilities(self, job_title: str, user_id: str) -> str:
        """Draft a bulleted responsibilities list for a job title.

        Raises:
            ScoringError: If no key is configured or the API call fails
        """
        client = self._client(user_id)
        if client is None:
            raise ScoringError(
                "Anthropic API key not configured. Please add it in Settings.",
                retryable=False,
            )

        try:
            response = await asyncio.to_thread(
                client.messages.create,
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[
                    {
                        "role": "user",
                        "content": safe_template_substitute(RESPONSIBILITIES_PROMPT, job_title=job_title),
                    }
                ],
            )
        except APIError as e:
            logger.error("Claude API error during responsibilities draft", error=str(e))
            raise ScoringError(f"Responsibilities generation failed: {str(e)}") from e

        text = _response_text(response).strip()
        if not text:
            raise ScoringError("Claude returned no text for the responsibilities draft")
        return text

    def _parse_score_response(self, response: str) -> ScoreResult:
        """Parse a screening response; anything unusable becomes an absent score."""
        try:
            data = json.loads(self._extract_json(response))
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning("Failed to parse screening response", error=str(e))
            return ScoreResult(None, INVALID_RESPONSE_REASON)

        if not isinstance(data, dict):
            return ScoreResult(None, INVALID_RESPONSE_REASON)

        score = normalize_score(data.get("score"))
        reason = str(data.get("reason") or "No reason provided")
        if score is None:
            logger.warning("Screening response had no numeric score", raw_score=data.get("score"))
        return ScoreResult(score, reason)

    def _extract_json(self, text: str) -> str:
        """Extract JSON from a response that may contain other text."""
        start = text.find("{")
        end = text.rfind("}") + 1

        if start != -1 and end > start:
            return text[start:end]

        raise ValueError("No JSON found in response")


class ScoringError(CollaboratorFailure):
    """Raised when Claude API calls fail."""

    def __init__(self, message: str, retryable: bool = True):
        super().__init__(message, retryable=retryable, collaborator="scorer")
