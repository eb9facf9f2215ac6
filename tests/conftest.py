from __future__ import annotations

import copy
import itertools
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
import pytz

from absence_workflow.core.enums import ApprovalStage, CollarType, Role
from absence_workflow.employees.model import EmployeeProfile, WorkerClassification
from absence_workflow.escalation.service import EscalationService
from absence_workflow.payroll.cutoff import PayrollCutoffCalculator
from absence_workflow.requests.service import AbsenceRequestService

# Monday 2026-03-02 09:00 in Mexico City.
START = datetime(2026, 3, 2, 15, 0, 0, tzinfo=pytz.UTC)

SUPERVISOR_ID = 2
MANAGER_ID = 3
HR_ID = 4
HR_BLUE_GRAY_ID = 5
SUP_AND_GM_ID = 6
PAYROLL_ID = 7
ADMIN_ID = 8
GM_ID = 9

WHITE_EMPLOYEE_ID = 10
BLUE_EMPLOYEE_ID = 11
SHORTCUT_EMPLOYEE_ID = 12
ORPHAN_EMPLOYEE_ID = 13


class FixedClock:
    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakeTransaction:
    def __init__(self, store: "FakeWorkflowStore"):
        self._store = store

    @property
    def state(self) -> dict:
        return self._store.state

    def get_request(self, request_id, *, for_update=False):
        if for_update:
            self._store.locked.append(int(request_id))
        return self.state["requests"].get(int(request_id))

    def insert_request(self, request):
        request_id = next(self._store.ids)
        self.state["requests"][request_id] = replace(request, request_id=request_id)
        return request_id

    def save_request(self, request):
        if self._store.fail_on_save:
            raise RuntimeError("database unavailable")
        assert request.request_id in self.state["requests"]
        self.state["requests"][request.request_id] = request

    def delete_request(self, request_id):
        del self.state["requests"][int(request_id)]
        self.state["history"] = [h for h in self.state["history"] if h.request_id != int(request_id)]
        self.state["escalations"] = [e for e in self.state["escalations"] if e.request_id != int(request_id)]

    def append_history(self, entry):
        entry_id = next(self._store.ids)
        self.state["history"].append(replace(entry, entry_id=entry_id))
        return entry_id

    def append_escalation(self, entry):
        entry_id = next(self._store.ids)
        self.state["escalations"].append(replace(entry, entry_id=entry_id))
        return entry_id

    @contextmanager
    def savepoint(self, name):
        snapshot = copy.deepcopy(self._store.state)
        try:
            yield
        except Exception:
            self._store.state = snapshot
            self._store.rolled_back_savepoints.append(name)
            raise


class FakeWorkflowStore:
    """In-memory store; a transaction is all-or-nothing over every table."""

    def __init__(self):
        self.state = {"requests": {}, "history": [], "escalations": [], "incidences": {}, "shift_exceptions": {}}
        self.ids = itertools.count(1)
        self.locked = []
        self.commits = 0
        self.rollbacks = 0
        self.rolled_back_savepoints = []
        self.fail_on_save = False
        self.idle_override = None
        self.idle_queries = []

    @contextmanager
    def transaction(self):
        snapshot = copy.deepcopy(self.state)
        try:
            yield FakeTransaction(self)
        except Exception:
            self.state = snapshot
            self.rollbacks += 1
            raise
        self.commits += 1

    def get_request(self, request_id):
        return self.state["requests"].get(int(request_id))

    def put(self, request):
        """Seed a request directly (bypasses the workflow)."""
        self.state["requests"][request.request_id] = request
        return request

    def find_idle_pending(self, *, idle_since, after_id=0, limit=500):
        self.idle_queries.append(after_id)
        if self.idle_override is not None:
            return [r for r in self.idle_override if r.request_id > after_id][:limit]
        return [
            r
            for r in sorted(self.state["requests"].values(), key=lambda r: r.request_id)
            if r.is_open
            and r.current_stage != ApprovalStage.PAYROLL
            and r.last_action_at < idle_since
            and r.request_id > after_id
        ][:limit]

    def list_history(self, request_id):
        return [h for h in self.state["history"] if h.request_id == int(request_id)]

    def list_escalations(self, request_id):
        return [e for e in self.state["escalations"] if e.request_id == int(request_id)]

    @property
    def incidences(self) -> dict:
        return self.state["incidences"]

    @property
    def shift_exceptions(self) -> dict:
        return self.state["shift_exceptions"]


class FakeDirectory:
    def __init__(self):
        self.employees = {}
        self.roles = {}
        self.fail_for = set()

    def add_user(self, user_id, role):
        self.roles[int(user_id)] = role

    def add_employee(self, profile: EmployeeProfile, role=Role.EMPLOYEE):
        self.employees[profile.user_id] = profile
        self.roles[profile.user_id] = role

    def get_employee(self, user_id):
        if int(user_id) in self.fail_for:
            raise RuntimeError("directory unavailable")
        return self.employees.get(int(user_id))

    def get_user_role(self, user_id):
        return self.roles.get(int(user_id))

    def users_with_roles(self, roles):
        roles = set(roles)
        return sorted(uid for uid, role in self.roles.items() if role in roles)


class FakeNotificationSink:
    def __init__(self):
        self.bells = []
        self.messages = []
        self.fail = False

    def notify(self, user_id, request_id, message):
        if self.fail:
            raise RuntimeError("notification service down")
        self.bells.append((int(user_id), int(request_id), message))

    def send_message(self, user_id, subject, body):
        if self.fail:
            raise RuntimeError("mail service down")
        self.messages.append((int(user_id), subject, body))

    def bell_recipients(self):
        return [b[0] for b in self.bells]

    def inbox_recipients(self):
        return [m[0] for m in self.messages]


class FakeIncidenceSink:
    def __init__(self):
        self.fail_create = False
        self.fail_finalize = False
        self.fail_update_flags = False

    def create_placeholder(self, tx, *, request, payroll_employee_id):
        if self.fail_create:
            raise RuntimeError("incidence table locked")
        incidence_id = 1000 + len(tx.state["incidences"]) + 1
        tx.state["incidences"][incidence_id] = {
            "employee_id": payroll_employee_id,
            "absence_request_id": request.request_id,
            "status": "pending",
            "amount": Decimal("0"),
            "late": request.late_approval_flag,
            "excluded": request.excluded_from_payroll,
            "approved_by": None,
        }
        return incidence_id

    def finalize(self, tx, *, incidence_id, amount, late, excluded, approved_by):
        if self.fail_finalize:
            raise RuntimeError("incidence finalize failed")
        tx.state["incidences"][incidence_id].update(
            status="approved", amount=amount, late=late, excluded=excluded, approved_by=approved_by
        )

    def update_flags(self, tx, *, incidence_id, late, excluded):
        if self.fail_update_flags:
            raise RuntimeError("incidence flag update failed")
        tx.state["incidences"][incidence_id].update(late=late, excluded=excluded)

    def discard(self, tx, *, incidence_id):
        tx.state["incidences"].pop(incidence_id, None)


class FakeShiftExceptionSink:
    def __init__(self):
        self.fail = False
        self.calls = 0

    def upsert(self, tx, *, employee_id, work_date, shift_id, created_by):
        self.calls += 1
        if self.fail:
            raise RuntimeError("shift table unavailable")
        table = tx.state["shift_exceptions"]
        key = (int(employee_id), work_date)
        existing = table.get(key)
        exception_id = existing["exception_id"] if existing else len(table) + 1
        table[key] = {"exception_id": exception_id, "shift_id": int(shift_id), "created_by": int(created_by)}
        return exception_id


def _profile(user_id, name, *, collar=CollarType.WHITE_COLLAR, unionized=False, supervisor_id, gm_id, payroll_id):
    return EmployeeProfile(
        user_id=user_id,
        full_name=name,
        classification=WorkerClassification(collar_type=collar, is_unionized=unionized),
        supervisor_id=supervisor_id,
        general_manager_id=gm_id,
        payroll_employee_id=payroll_id,
        daily_salary=Decimal("800.00"),
    )


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def store():
    return FakeWorkflowStore()


@pytest.fixture
def directory():
    d = FakeDirectory()
    d.add_user(SUPERVISOR_ID, Role.SUPERVISOR)
    d.add_user(MANAGER_ID, Role.MANAGER)
    d.add_user(HR_ID, Role.HR)
    d.add_user(HR_BLUE_GRAY_ID, Role.HR_BLUE_GRAY)
    d.add_user(SUP_AND_GM_ID, Role.SUP_AND_GM)
    d.add_user(PAYROLL_ID, Role.PAYROLL_STAFF)
    d.add_user(ADMIN_ID, Role.ADMIN)
    d.add_user(GM_ID, Role.MANAGER)

    d.add_employee(
        _profile(WHITE_EMPLOYEE_ID, "Wendy White", supervisor_id=SUPERVISOR_ID, gm_id=GM_ID, payroll_id=501)
    )
    d.add_employee(
        _profile(
            BLUE_EMPLOYEE_ID,
            "Bob Blue",
            collar=CollarType.BLUE_COLLAR,
            supervisor_id=SUPERVISOR_ID,
            gm_id=GM_ID,
            payroll_id=502,
        )
    )
    d.add_employee(
        _profile(
            SHORTCUT_EMPLOYEE_ID,
            "Carla Direct",
            supervisor_id=SUP_AND_GM_ID,
            gm_id=SUP_AND_GM_ID,
            payroll_id=503,
        )
    )
    d.add_employee(_profile(ORPHAN_EMPLOYEE_ID, "Oscar Orphan", supervisor_id=None, gm_id=GM_ID, payroll_id=504))
    return d


@pytest.fixture
def notifications():
    return FakeNotificationSink()


@pytest.fixture
def incidences():
    return FakeIncidenceSink()


@pytest.fixture
def shift_exceptions():
    return FakeShiftExceptionSink()


@pytest.fixture
def service(store, directory, notifications, incidences, shift_exceptions, clock):
    return AbsenceRequestService(
        store,
        directory,
        notifications,
        incidences,
        shift_exceptions,
        cutoff_calculator=PayrollCutoffCalculator("America/Mexico_City"),
        clock=clock,
    )


@pytest.fixture
def escalation_service(store, directory, notifications, clock):
    return EscalationService(store, directory, notifications, idle_hours=24, clock=clock)
