"""
Resume screening: store, extract, score.

The order of the steps is fixed. The raw file is stored first (a storage
failure aborts the application), text is then extracted best-effort, and the
scoring mode is chosen from what extraction produced:

- at least ``MIN_TEXT_LENGTH`` characters of text: score the text
- otherwise, raw document bytes: score the document itself (vision)
- otherwise: no score, the candidate waits for manual review
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Protocol

import structlog

from pipeline.adjudicator import ScreeningDecision, adjudicate
from pipeline.errors import CollaboratorFailure
from pipeline.models import JobContext, UploadedDocument

logger = structlog.get_logger()

# Extracted text shorter than this is treated as no text at all
MIN_TEXT_LENGTH = 50

MANUAL_REVIEW_REASON = "manual review required"
NO_RESUME_REASON = "No resume provided; manual review required"
UNREADABLE_RESUME_REASON = "Resume could not be read; manual review required"


class ScreeningMode(str, Enum):
    TEXT = "text"
    DOCUMENT = "document"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ResumeContent:
    """What the scorer is shown: extracted text or the raw document."""

    text: Optional[str] = None
    document: Optional[bytes] = None
    media_type: str = "application/pdf"

    @property
    def mode(self) -> ScreeningMode:
        if self.text:
            return ScreeningMode.TEXT
        if self.document:
            return ScreeningMode.DOCUMENT
        return ScreeningMode.SKIPPED


@dataclass(frozen=True)
class ScoreResult:
    """Scorer output. ``score`` is None when the scorer could not decide."""

    score: Optional[int]
    reason: str


@dataclass(frozen=True)
class ScreeningResult:
    score: Optional[int]
    reason: str
    mode: ScreeningMode
    decision: ScreeningDecision
    resume_url: Optional[str] = None


class ResumeScorer(Protocol):
    async def score(self, resume: ResumeContent, job: JobContext) -> ScoreResult:
        ...


class TextExtractor(Protocol):
    def extract_text(self, content: bytes, filename: str, content_type: Optional[str] = None) -> str:
        ...


class DocumentStore(Protocol):
    async def store(self, content: bytes, folder: str, filename: str, content_type: Optional[str] = None) -> str:
        ...

    async def get_presigned_url(self, reference: str, expires_in: int = 3600) -> str:
        ...


def normalize_score(raw: Any) -> Optional[int]:
    """Coerce a model-reported score to an int in 0-100, or None if it isn't numeric."""
    if isinstance(raw, bool) or raw is None:
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if value != value:  # NaN
        return None
    return max(0, min(100, int(round(value))))


def choose_content(text: str, document: Optional[bytes], media_type: str = "application/pdf") -> ResumeContent:
    """Pick the scoring input from extracted text and raw bytes."""
    if text and len(text.strip()) >= MIN_TEXT_LENGTH:
        return ResumeContent(text=text.strip())
    if document:
        return ResumeContent(document=document, media_type=media_type)
    return ResumeContent()


class ScreeningService:
    """Runs the screening steps for one application."""

    def __init__(self, scorer: ResumeScorer, extractor: TextExtractor, store: DocumentStore):
        self.scorer = scorer
        self.extractor = extractor
        self.store = store

    async def store_resume(self, resume: UploadedDocument, job_id: str) -> str:
        """Persist the raw resume. Failures propagate and abort the application."""
        reference = await self.store.store(
            resume.content,
            folder=f"resumes/{job_id}",
            filename=resume.filename,
            content_type=resume.content_type or "application/pdf",
        )
        logger.info("Resume stored", job_id=job_id, reference=reference, size=len(resume.content))
        return reference

    async def extract(self, resume: UploadedDocument) -> str:
        """Best-effort text extraction; any failure yields empty text."""
        try:
            return await asyncio.to_thread(
                self.extractor.extract_text,
                resume.content,
                resume.filename,
                resume.content_type,
            )
        except CollaboratorFailure as e:
            logger.warning("Resume text extraction failed", filename=resume.filename, error=e.message)
            return ""
        except Exception as e:
            logger.error(
                "Unexpected resume extraction error",
                filename=resume.filename,
                error=str(e),
                error_type=type(e).__name__,
            )
            return ""

    async def score(self, content: ResumeContent, job: JobContext) -> ScoreResult:
        """Call the scorer; a scorer failure degrades to a manual-review result."""
        if content.mode == ScreeningMode.SKIPPED:
            return ScoreResult(None, UNREADABLE_RESUME_REASON)
        try:
            result = await self.scorer.score(content, job)
        except CollaboratorFailure as e:
            logger.error("Resume scoring failed", mode=content.mode.value, error=e.message)
            return ScoreResult(None, MANUAL_REVIEW_REASON)
        except Exception as e:
            logger.error(
                "Unexpected resume scoring error",
                mode=content.mode.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            return ScoreResult(None, MANUAL_REVIEW_REASON)
        return ScoreResult(normalize_score(result.score), result.reason or MANUAL_REVIEW_REASON)

    async def screen(
        self,
        resume: Optional[UploadedDocument],
        job: JobContext,
        job_id: str,
    ) -> ScreeningResult:
        """Store, extract, score and adjudicate one resume.

        Raises:
            CollaboratorFailure: if the resume cannot be stored
        """
        if resume is None or resume.is_empty:
            return ScreeningResult(
                score=None,
                reason=NO_RESUME_REASON,
                mode=ScreeningMode.SKIPPED,
                decision=ScreeningDecision.INDETERMINATE,
            )

        resume_url = await self.store_resume(resume, job_id)
        text = await self.extract(resume)
        content = choose_content(text, resume.content, resume.content_type or "application/pdf")
        result = await self.score(content, job)
        decision = adjudicate(result.score)

        logger.info(
            "Resume screened",
            job_id=job_id,
            mode=content.mode.value,
            score=result.score,
            decision=decision.value,
        )
        return ScreeningResult(
            score=result.score,
            reason=result.reason,
            mode=content.mode,
            decision=decision,
            resume_url=resume_url,
        )
