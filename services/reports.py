"""
Classroom grade reports: a student x assignment grade matrix rendered as JSON
or as an .xlsx workbook.

A missing or ungraded submission counts as 0 in every total.
"""

import logging
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font

from datetime_helpers import isoformat
from errors import InternalError
from extensions import db
from models import Classroom, Submission

logger = logging.getLogger(__name__)

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

DETAIL_HEADERS = [
    'Student Name', 'Email', 'Assignment Title', 'Due Date',
    'Submission Date', 'Submission Status', 'Grade',
]


class GradeReport:
    """Grades of every enrolled student across every classroom assignment."""

    def __init__(self, classroom, students, assignments, submissions):
        self.classroom = classroom
        self.students = students
        self.assignments = assignments
        # (assignment_id, user_id) -> Submission
        self._submissions = submissions

    def submission_for(self, assignment, student):
        return self._submissions.get((assignment.id, student.id))

    def grade_for(self, assignment, student):
        submission = self.submission_for(assignment, student)
        if submission is None or submission.grade is None:
            return 0
        return submission.grade

    def total_for(self, student):
        return sum(self.grade_for(assignment, student) for assignment in self.assignments)

    def classroom_info(self):
        return {
            'name': self.classroom.name,
            'code': self.classroom.code,
            'subject': self.classroom.subject,
        }

    def to_dict(self):
        students = []
        for student in self.students:
            rows = []
            for assignment in self.assignments:
                submission = self.submission_for(assignment, student)
                rows.append({
                    'assignmentId': assignment.id,
                    'title': assignment.title,
                    'dueDate': isoformat(assignment.due_date),
                    'submissionDate': isoformat(submission.submitted_at) if submission else None,
                    'status': submission.status if submission else 'NOT_SUBMITTED',
                    'grade': self.grade_for(assignment, student),
                })
            students.append({
                'student': student.summary(),
                'assignments': rows,
                'totalGrade': self.total_for(student),
            })
        return {'classroom': self.classroom_info(), 'students': students}


def build_grade_report(classroom_id):
    """Load the classroom's students, assignments and submissions."""
    classroom = db.session.get(Classroom, classroom_id)
    if classroom is None:
        logger.error(f"Grade report requested for unknown classroom {classroom_id}")
        raise InternalError('Error generating report', payload={'details': 'Classroom not found'})

    students = [enrollment.user for enrollment in classroom.enrollments if enrollment.user]
    assignments = list(classroom.assignments)

    submissions = {}
    assignment_ids = [a.id for a in assignments]
    if assignment_ids:
        for submission in Submission.query.filter(Submission.assignment_id.in_(assignment_ids)).all():
            submissions[(submission.assignment_id, submission.user_id)] = submission

    return GradeReport(classroom, students, assignments, submissions)


def _format_date(dt):
    return dt.strftime('%Y-%m-%d') if dt else 'N/A'


def render_workbook(report):
    """Render the report as .xlsx bytes with a detail and a summary sheet."""
    workbook = Workbook()

    detail = workbook.active
    detail.title = 'Grade Report'
    detail.append(DETAIL_HEADERS)
    for cell in detail[1]:
        cell.font = Font(bold=True)

    for student in report.students:
        for assignment in report.assignments:
            submission = report.submission_for(assignment, student)
            status = submission.status.replace('_', ' ') if submission else 'Not Submitted'
            detail.append([
                student.name,
                student.email,
                assignment.title,
                _format_date(assignment.due_date),
                _format_date(submission.submitted_at if submission else None),
                status,
                report.grade_for(assignment, student),
            ])

    detail.append([])
    detail.append(['Student Totals'])
    detail.cell(row=detail.max_row, column=1).font = Font(bold=True)
    for student in report.students:
        detail.append([student.name, student.email, 'Total Grade', None, None, None,
                       report.total_for(student)])

    summary = workbook.create_sheet('Student Summary')
    summary.append(['Student Name', 'Email'] + [a.title for a in report.assignments] + ['Total Grade'])
    for cell in summary[1]:
        cell.font = Font(bold=True)
    for student in report.students:
        grades = [report.grade_for(assignment, student) for assignment in report.assignments]
        summary.append([student.name, student.email] + grades + [report.total_for(student)])

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
