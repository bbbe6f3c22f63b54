from flask import Blueprint, jsonify, request

from utils import json_body, login_required, require_confirmation
from utils.fee_structures import FeeStructureRepository

fee_bp = Blueprint('fees', __name__, url_prefix='/fees')


@fee_bp.route('', methods=['GET'])
@login_required
def view_fee_structures():
    repo = FeeStructureRepository()
    class_name = (request.args.get('class') or '').strip()
    fees = repo.get_by_class(class_name) if class_name else repo.get_all()
    return jsonify([f.to_dict() for f in fees])


@fee_bp.route('', methods=['POST'])
@login_required
def add_fee_structure():
    fee = FeeStructureRepository().add(json_body())
    return jsonify(fee.to_dict()), 201


@fee_bp.route('/<fee_id>', methods=['GET'])
@login_required
def get_fee_structure(fee_id):
    fee = FeeStructureRepository().get_one(fee_id)
    if fee is None:
        return jsonify({'error': 'Fee structure not found'}), 404
    return jsonify(fee.to_dict())


@fee_bp.route('/<fee_id>', methods=['PUT', 'PATCH'])
@login_required
def edit_fee_structure(fee_id):
    fee = FeeStructureRepository().update(fee_id, json_body())
    return jsonify(fee.to_dict())


@fee_bp.route('/<fee_id>', methods=['DELETE'])
@login_required
def delete_fee_structure(fee_id):
    require_confirmation()
    FeeStructureRepository().delete(fee_id)
    return jsonify({'deleted': fee_id})
