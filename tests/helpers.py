"""Record builders shared by the test modules."""

import datetime as dt
from decimal import Decimal

from clinicals import (
    AttendanceRecord,
    AttendanceStatus,
    AttendanceType,
    ClinicalLogEntry,
    HourSubmission,
    InMemoryRecordStore,
    MakeupHoursObligation,
    MakeupStatus,
    ReviewStatus,
    Student,
    StudentStatus,
    VrCompletion,
    VrScenario,
)

TODAY = dt.date(2025, 3, 1)


def D(value) -> Decimal:
    return Decimal(str(value))


def make_student(student_id="STU-1", status=StudentStatus.ACTIVE, required=400, completed=0):
    return Student(
        id=student_id,
        first_name="Jordan",
        last_name="Reyes",
        cohort="Fall 2024",
        status=status,
        clinical_hours_required=D(required),
        clinical_hours_completed=D(completed),
    )


def make_log(log_id, hours, is_simulation=None, site="General Hospital",
             status=ReviewStatus.APPROVED, student_id="STU-1", diagnosis="",
             date=dt.date(2025, 1, 10)):
    return ClinicalLogEntry(
        id=log_id,
        student_id=student_id,
        date=date,
        site_name=site,
        hours=D(hours) if hours is not None else None,
        is_simulation=is_simulation,
        patient_diagnosis=diagnosis,
        status=status,
    )


def make_submission(sub_id, hours=8, site="Riverside Clinic", status=ReviewStatus.PENDING,
                    student_id="STU-1", date=dt.date(2025, 2, 3)):
    return HourSubmission(
        id=sub_id,
        student_id=student_id,
        date=date,
        site_name=site,
        hours=D(hours),
        start_time="07:00",
        end_time="15:00",
        activities="Med pass, vitals",
        status=status,
    )


def make_scenario(scenario_id="VR-1", name="Sepsis Response", required=False, hours=2):
    return VrScenario(id=scenario_id, name=name, category="Acute", is_required=required,
                      default_hours=D(hours))


def make_vr(vr_id, hours, scenario_id="VR-1", student_id="STU-1"):
    return VrCompletion(
        id=vr_id,
        student_id=student_id,
        scenario_id=scenario_id,
        completion_date=dt.date(2025, 1, 20),
        hours=D(hours),
    )


def make_obligation(ob_id, owed, completed=0, status=MakeupStatus.PENDING, due=None,
                    student_id="STU-1"):
    return MakeupHoursObligation(
        id=ob_id,
        student_id=student_id,
        hours_owed=D(owed),
        hours_completed=D(completed),
        status=status,
        due_date=due,
    )


def make_attendance(att_id, status, attendance_type=AttendanceType.CLASSROOM,
                    date=dt.date(2025, 2, 15), student_id="STU-1",
                    hours_attended=None, hours_required=None):
    return AttendanceRecord(
        id=att_id,
        student_id=student_id,
        date=date,
        attendance_type=attendance_type,
        status=status,
        hours_attended=D(hours_attended) if hours_attended is not None else None,
        hours_required=D(hours_required) if hours_required is not None else None,
    )


def build_store(students=None, logs=(), vr=(), submissions=(), obligations=(),
                attendance=(), scenarios=()):
    store = InMemoryRecordStore()
    for student in students or [make_student()]:
        store.add_student(student)
    for scenario in scenarios:
        store.add_scenario(scenario)
    for log in logs:
        store.add_clinical_log(log)
    for completion in vr:
        store.add_vr_completion(completion)
    for submission in submissions:
        store.add_hour_submission(submission)
    for obligation in obligations:
        store.add_makeup_obligation(obligation)
    for record in attendance:
        store.add_attendance(record)
    return store
