"""
Course materials: uploaded files or links shared in a classroom.
"""

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from errors import ValidationError
from extensions import db
from models import Classroom, Material
from services import check_upload
from .utils import file_response, get_or_404, parse_id, request_data, require_fields

bp = Blueprint('materials', __name__)

MATERIAL_TYPES = ('file', 'link')


@bp.route('/materials', methods=['GET'])
@login_required
def list_materials():
    classroom_id = parse_id(request.args.get('classroomId'), 'classroomId')
    materials = Material.query.filter_by(classroom_id=classroom_id) \
        .order_by(Material.created_at.desc()).all()
    return jsonify([m.to_dict() for m in materials])


@bp.route('/materials', methods=['POST'])
@login_required
def create_material():
    data = request_data()
    require_fields(data, 'title', 'type', 'classroomId')

    material_type = data['type']
    if material_type not in MATERIAL_TYPES:
        raise ValidationError('Type must be file or link')

    classroom_id = parse_id(data.get('classroomId'), 'classroomId')
    get_or_404(Classroom, classroom_id, 'Classroom not found')

    material = Material(
        title=data['title'].strip(),
        description=data.get('description') or None,
        type=material_type,
        classroom_id=classroom_id,
        user_id=current_user.id,
    )
    if material_type == 'link':
        if not data.get('url'):
            raise ValidationError('URL is required for link type')
        material.url = data['url']
    else:
        upload = request.files.get('file')
        if upload is None or not upload.filename:
            raise ValidationError('File is required for file type')
        check_upload(upload)
        material.attach_file(upload)

    db.session.add(material)
    db.session.commit()
    current_app.logger.info(f"Material {material.id} ({material_type}) added to classroom {classroom_id}")

    return jsonify(material.to_dict()), 201


@bp.route('/materials/<int:material_id>/download', methods=['GET'])
@login_required
def download_material(material_id):
    material = get_or_404(Material, material_id, 'File not found')
    return file_response(material, 'material')


@bp.route('/materials/<int:material_id>', methods=['DELETE'])
@login_required
def delete_material(material_id):
    material = get_or_404(Material, material_id, 'Material not found')
    db.session.delete(material)
    db.session.commit()
    current_app.logger.info(f"Material {material_id} deleted by user {current_user.id}")
    return '', 204
