"""Shared fixtures: in-memory database and a workflow wired to fakes."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("FRONTEND_URL", "http://frontend.test")
os.environ.setdefault("S3_BUCKET", "test-bucket")
os.environ.setdefault("SES_FROM_EMAIL", "hiring@example.com")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.pop("ANTHROPIC_API_KEY", None)

from dataclasses import dataclass  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from api.models import Base  # noqa: E402
from pipeline.dispatcher import SideEffectDispatcher  # noqa: E402
from pipeline.engine import TransitionEngine  # noqa: E402
from pipeline.links import LinkBuilder  # noqa: E402
from pipeline.models import ApplicationSubmission, FormConfigRecord, JobRecord, UploadedDocument  # noqa: E402
from pipeline.repository import AuditLog, CandidateRepository, JobRepository  # noqa: E402
from pipeline.scheduling import SchedulingCoordinator  # noqa: E402
from pipeline.screening import ScreeningService  # noqa: E402
from tests.fakes import (  # noqa: E402
    LONG_RESUME_TEXT,
    OWNER_ID,
    FakeCalendar,
    FakeExtractor,
    FakeNotifier,
    FakeScorer,
    FakeStore,
)


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine) -> Session:
    session = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@dataclass
class Workflow:
    engine: TransitionEngine
    scheduling: SchedulingCoordinator
    candidates: CandidateRepository
    jobs: JobRepository
    scorer: FakeScorer
    extractor: FakeExtractor
    store: FakeStore
    notifier: FakeNotifier
    calendar: FakeCalendar
    session: Session

    def create_job(self, owner_id: str = OWNER_ID, **form_flags) -> JobRecord:
        form_flags.setdefault("include_resume", True)
        return self.engine.create_job(
            owner_id=owner_id,
            title="Backend Engineer",
            description="Build and run the hiring platform APIs.",
            form_config=FormConfigRecord(**form_flags),
            keywords="python, fastapi",
            assignment_details="Build a small REST service.",
        )

    async def apply(self, job: JobRecord, email: str = "ada@example.com", resume: bool = True):
        document = UploadedDocument("resume.pdf", b"%PDF-1.4 resume bytes", "application/pdf") if resume else None
        return await self.engine.submit_application(
            job.id,
            ApplicationSubmission(name="Ada Lovelace", email=email),
            document,
        )


@pytest.fixture
def workflow(db_session) -> Workflow:
    scorer = FakeScorer()
    extractor = FakeExtractor(text=LONG_RESUME_TEXT)
    store = FakeStore()
    notifier = FakeNotifier()
    calendar = FakeCalendar()

    jobs = JobRepository(db_session)
    candidates = CandidateRepository(db_session)
    audit = AuditLog(db_session)
    links = LinkBuilder("http://frontend.test")
    dispatcher = SideEffectDispatcher(notifier, audit)
    scheduling = SchedulingCoordinator(candidates, jobs, calendar, dispatcher, audit, links)
    engine = TransitionEngine(
        jobs=jobs,
        candidates=candidates,
        screening=ScreeningService(scorer, extractor, store),
        scheduling=scheduling,
        dispatcher=dispatcher,
        audit=audit,
        store=store,
        links=links,
    )
    return Workflow(engine, scheduling, candidates, jobs, scorer, extractor, store, notifier, calendar, db_session)


@pytest.fixture
def slots() -> list[datetime]:
    base = datetime.now(timezone.utc).replace(microsecond=0, second=0, minute=0) + timedelta(days=2)
    return [base, base + timedelta(hours=2), base + timedelta(days=1)]
