from flask import Blueprint, g, jsonify, request

from utils import json_body, login_required, require_confirmation
from utils.payments import PaymentRepository
from utils.reports import search_students
from utils.students import StudentRepository

student_bp = Blueprint('students', __name__, url_prefix='/students')


@student_bp.route('', methods=['GET'])
@login_required
def view_students():
    """List students by name; ``?class=`` narrows to one class, ``?q=`` searches."""
    repo = StudentRepository()
    class_name = (request.args.get('class') or '').strip()
    students = repo.get_by_class(class_name) if class_name else repo.get_all()
    students = search_students(students, request.args.get('q'))
    return jsonify([s.to_dict() for s in students])


@student_bp.route('', methods=['POST'])
@login_required
def add_student():
    student = StudentRepository().add(json_body())
    return jsonify(student.to_dict()), 201


@student_bp.route('/<student_id>', methods=['GET'])
@login_required
def get_student(student_id):
    student = StudentRepository().get_one(student_id)
    if student is None:
        return jsonify({'error': 'Student not found'}), 404
    return jsonify(student.to_dict())


@student_bp.route('/<student_id>', methods=['PUT', 'PATCH'])
@login_required
def edit_student(student_id):
    student = StudentRepository().update(student_id, json_body())
    return jsonify(student.to_dict())


@student_bp.route('/<student_id>', methods=['DELETE'])
@login_required
def delete_student(student_id):
    require_confirmation()
    StudentRepository().delete(student_id)
    return jsonify({'deleted': student_id})


@student_bp.route('/<student_id>/payments', methods=['GET'])
@login_required
def student_payments(student_id):
    payments = PaymentRepository(g.auth).get_by_student(student_id)
    return jsonify([p.to_dict() for p in payments])
