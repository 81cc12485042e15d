"""FastAPI dependencies that assemble the workflow engine per request.

Collaborators are built here and nowhere else, so tests replace them through
``app.dependency_overrides`` on the ``get_*`` providers below.
"""

from functools import lru_cache
from typing import Any, Callable, Optional

import httpx
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from api.config.database import get_db
from pipeline.credentials import CredentialResolver
from pipeline.dispatcher import Notifier, SideEffectDispatcher
from pipeline.engine import TransitionEngine
from pipeline.integrations import ClaudeScorer, GoogleCalendarClient, S3DocumentStore, SESNotifier
from pipeline.links import LinkBuilder
from pipeline.repository import AuditLog, CandidateRepository, JobRepository
from pipeline.scheduling import CalendarProvider, SchedulingCoordinator
from pipeline.screening import DocumentStore, ResumeScorer, ScreeningService
from pipeline.utils import PdfTextExtractor


def get_current_user_id(request: Request) -> str:
    """User id from the validated token (set by AuthMiddleware)."""
    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user_id


@lru_cache
def get_document_store() -> DocumentStore:
    return S3DocumentStore()


@lru_cache
def get_notifier() -> Notifier:
    return SESNotifier()


def get_anthropic_factory() -> Optional[Callable[[str], Any]]:
    """Client factory for the scorer; None uses the real Anthropic client."""
    return None


def get_calendar_transport() -> Optional[httpx.AsyncBaseTransport]:
    """HTTP transport for the calendar client; None uses the network."""
    return None


def get_credentials(db: Session = Depends(get_db)) -> CredentialResolver:
    return CredentialResolver(db)


def get_scorer(
    credentials: CredentialResolver = Depends(get_credentials),
    client_factory: Optional[Callable[[str], Any]] = Depends(get_anthropic_factory),
) -> ClaudeScorer:
    return ClaudeScorer(credentials, client_factory=client_factory)


def get_calendar(
    credentials: CredentialResolver = Depends(get_credentials),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_calendar_transport),
) -> CalendarProvider:
    return GoogleCalendarClient(credentials, transport=transport)


def get_engine(
    db: Session = Depends(get_db),
    scorer: ResumeScorer = Depends(get_scorer),
    calendar: CalendarProvider = Depends(get_calendar),
    store: DocumentStore = Depends(get_document_store),
    notifier: Notifier = Depends(get_notifier),
) -> TransitionEngine:
    jobs = JobRepository(db)
    candidates = CandidateRepository(db)
    audit = AuditLog(db)
    links = LinkBuilder()
    dispatcher = SideEffectDispatcher(notifier, audit)

    return TransitionEngine(
        jobs=jobs,
        candidates=candidates,
        screening=ScreeningService(scorer, PdfTextExtractor(), store),
        scheduling=SchedulingCoordinator(candidates, jobs, calendar, dispatcher, audit, links),
        dispatcher=dispatcher,
        audit=audit,
        store=store,
        links=links,
    )


def get_scheduling(engine: TransitionEngine = Depends(get_engine)) -> SchedulingCoordinator:
    return engine.scheduling
