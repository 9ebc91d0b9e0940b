"""
Unit tests for the per-resource Eventline services.

Each test drives the service against a fake HTTP session and checks the
request sent (method, path, scope, body) and the decoded result.
"""
import pytest

from eventline_provider.core.eventline import (
    PROJECT_ID_HEADER,
    EventService,
    Identity,
    IdentityService,
    JobExecutionInput,
    JobExecutionStatus,
    JobService,
    JobSpec,
    Project,
    ProjectService,
    Step,
    ValidationError,
)
from eventline_provider.core.raw_data import RawData
from tests.factories import (
    ENDPOINT,
    EVENT_ID,
    EXECUTION_ID,
    IDENTITY_ID,
    JOB_ID,
    PROJECT_ID,
    REPLAYED_EVENT_ID,
    execution_payload,
    identity_payload,
    job_payload,
    page_payload,
    project_payload,
)


# ============================================================================
# Projects
# ============================================================================

class TestProjectService:
    def test_list(self, client, session):
        session.queue(page_payload([project_payload()]))
        projects = ProjectService(client).list()

        assert [p.name for p in projects] == ["main"]
        assert session.last["url"] == f"{ENDPOINT}/projects"

    def test_get_by_id(self, client, session):
        session.queue(project_payload())
        project = ProjectService(client).get_by_id(PROJECT_ID)

        assert project.id == PROJECT_ID
        assert session.last["method"] == "GET"
        assert session.last["url"] == f"{ENDPOINT}/projects/id/{PROJECT_ID}"

    def test_get_by_id_validates_before_request(self, client, session):
        with pytest.raises(ValidationError):
            ProjectService(client).get_by_id("p1")
        assert session.requests == []

    def test_get_by_name_escapes_name(self, client, session):
        session.queue(project_payload(name="my project"))
        ProjectService(client).get_by_name("my project")
        assert session.last["url"] == f"{ENDPOINT}/projects/name/my%20project"

    def test_get_by_name_requires_name(self, client):
        with pytest.raises(ValidationError):
            ProjectService(client).get_by_name("")

    def test_create_sends_name_only(self, client, session):
        session.queue(project_payload())
        project = ProjectService(client).create(Project(name="main", id=PROJECT_ID))

        assert project.id == PROJECT_ID
        assert session.last["method"] == "POST"
        assert session.body() == {"name": "main"}

    def test_update(self, client, session):
        session.queue()
        ProjectService(client).update(Project(id=PROJECT_ID, name="renamed"))

        assert session.last["method"] == "PUT"
        assert session.last["url"] == f"{ENDPOINT}/projects/id/{PROJECT_ID}"
        assert session.body() == {"id": PROJECT_ID, "name": "renamed"}

    def test_update_requires_id(self, client):
        with pytest.raises(ValidationError):
            ProjectService(client).update(Project(name="x"))

    def test_delete(self, client, session):
        session.queue()
        ProjectService(client).delete(PROJECT_ID)
        assert session.last["method"] == "DELETE"


# ============================================================================
# Identities
# ============================================================================

class TestIdentityService:
    def test_requires_scoped_client(self, client):
        with pytest.raises(ValidationError, match="project-scoped client"):
            IdentityService(client)

    def test_list_is_scoped(self, scoped_client, session):
        session.queue(page_payload([identity_payload()]))
        identities = IdentityService(scoped_client).list()

        assert identities[0].id == IDENTITY_ID
        assert session.last["headers"][PROJECT_ID_HEADER] == PROJECT_ID

    def test_create(self, scoped_client, session):
        session.queue(identity_payload(status="pending"))
        identity = IdentityService(scoped_client).create(Identity(
            name="gh",
            connector="github",
            type="oauth2",
            data=RawData.from_text('{"client_id": "abc"}'),
        ))

        assert identity.id == IDENTITY_ID
        assert session.last["url"] == f"{ENDPOINT}/identities"
        assert session.body()["data"] == {"client_id": "abc"}

    def test_update_returns_stored_identity(self, scoped_client, session):
        session.queue(identity_payload(status="error"))
        updated = IdentityService(scoped_client).update(Identity(
            id=IDENTITY_ID,
            name="gh",
            connector="github",
            type="oauth2",
            data=RawData.from_text("{}"),
        ))

        assert updated.status.value == "error"
        assert session.last["method"] == "PUT"
        assert session.last["url"] == f"{ENDPOINT}/identities/id/{IDENTITY_ID}"

    def test_delete(self, scoped_client, session):
        session.queue()
        IdentityService(scoped_client).delete(IDENTITY_ID)
        assert session.last["url"] == f"{ENDPOINT}/identities/id/{IDENTITY_ID}"


# ============================================================================
# Jobs
# ============================================================================

def _spec(name="build"):
    return JobSpec(name=name, steps=[Step(code="make")])


class TestJobService:
    def test_requires_scoped_client(self, client):
        with pytest.raises(ValidationError):
            JobService(client)

    def test_deploy_by_name(self, scoped_client, session):
        session.queue(job_payload())
        job = JobService(scoped_client).deploy(_spec())

        assert job.id == JOB_ID
        assert session.last["method"] == "PUT"
        assert session.last["url"] == f"{ENDPOINT}/jobs/name/build"
        assert session.last["params"] == {}
        assert session.body() == {"name": "build", "steps": [{"code": "make"}]}

    def test_deploy_dry_run(self, scoped_client, session):
        session.queue()
        assert JobService(scoped_client).deploy(_spec(), dry_run=True) is None
        assert session.last["params"] == {"dry-run": ""}

    def test_deploy_many(self, scoped_client, session):
        session.queue([job_payload(), job_payload(name="test")])
        jobs = JobService(scoped_client).deploy_many([_spec(), _spec("test")])

        assert [job.spec.name for job in jobs] == ["build", "test"]
        assert session.last["url"] == f"{ENDPOINT}/jobs"
        assert [spec["name"] for spec in session.body()] == ["build", "test"]

    def test_get_by_name(self, scoped_client, session):
        session.queue(job_payload())
        JobService(scoped_client).get_by_name("build")
        assert session.last["url"] == f"{ENDPOINT}/jobs/name/build"

    def test_execute(self, scoped_client, session):
        session.queue(execution_payload())
        execution = JobService(scoped_client).execute(
            JOB_ID, JobExecutionInput(parameters={"branch": "main"})
        )

        assert execution.status is JobExecutionStatus.CREATED
        assert session.last["url"] == f"{ENDPOINT}/jobs/id/{JOB_ID}/execute"
        assert session.body() == {"parameters": {"branch": "main"}}

    def test_execute_without_input(self, scoped_client, session):
        session.queue(execution_payload())
        JobService(scoped_client).execute(JOB_ID)
        assert session.body() == {"parameters": {}}

    def test_get_execution(self, scoped_client, session):
        session.queue(execution_payload(status="successful"))
        execution = JobService(scoped_client).get_execution(EXECUTION_ID)

        assert execution.finished
        assert session.last["url"] == f"{ENDPOINT}/job_executions/id/{EXECUTION_ID}"

    @pytest.mark.parametrize("action", ["abort", "restart"])
    def test_execution_control(self, scoped_client, session, action):
        session.queue()
        getattr(JobService(scoped_client), f"{action}_execution")(EXECUTION_ID)

        assert session.last["method"] == "POST"
        assert session.last["url"] == f"{ENDPOINT}/job_executions/id/{EXECUTION_ID}/{action}"


# ============================================================================
# Events
# ============================================================================

def test_replay_event(scoped_client, session):
    session.queue({
        "id": REPLAYED_EVENT_ID,
        "project_id": PROJECT_ID,
        "connector": "github",
        "name": "push",
        "data": {},
        "original_event_id": EVENT_ID,
    })
    event = EventService(scoped_client).replay(EVENT_ID)

    assert event.original_event_id == EVENT_ID
    assert session.last["method"] == "POST"
    assert session.last["url"] == f"{ENDPOINT}/events/id/{EVENT_ID}/replay"
