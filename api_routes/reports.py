"""
Grade report download for a classroom.
"""

from flask import Blueprint, Response, jsonify, request

from services import XLSX_MIMETYPE, build_grade_report, render_workbook

bp = Blueprint('reports', __name__)


@bp.route('/reports/<int:classroom_id>', methods=['GET'])
def generate_report(classroom_id):
    """JSON with ?format=json, otherwise an .xlsx attachment."""
    report = build_grade_report(classroom_id)

    if request.args.get('format') == 'json':
        return jsonify(report.to_dict())

    response = Response(render_workbook(report), content_type=XLSX_MIMETYPE)
    response.headers['Content-Disposition'] = f'attachment; filename="grade-report-{classroom_id}.xlsx"'
    return response
