from flask import Blueprint, current_app, g, jsonify, request

from utils import json_body, login_required, require_confirmation
from utils.payments import PaymentRepository
from utils.receipts import generate_receipt_number, receipt_payload
from utils.reports import filter_payments
from utils.students import StudentRepository

payment_bp = Blueprint('payments', __name__, url_prefix='/payments')


def load_filtered_payments(repo: PaymentRepository, args) -> list:
    """Fetch payments and apply the list/report query-string filters.

    A full date range is pushed down to the store; everything else is
    filtered on the loaded list.
    """
    start = (args.get('start') or '').strip()
    end = (args.get('end') or '').strip()
    if start and end:
        payments = repo.get_by_date_range(start, end)
    else:
        payments = repo.get_all()
    class_name = (args.get('class') or '').strip()
    students = StudentRepository(repo.session).get_all() if class_name else None
    return filter_payments(
        payments,
        start=start or None,
        end=end or None,
        class_name=class_name or None,
        status=(args.get('status') or '').strip() or None,
        student_id=(args.get('student_id') or '').strip() or None,
        search=args.get('q'),
        students=students,
    )


@payment_bp.route('', methods=['GET'])
@login_required
def view_payments():
    payments = load_filtered_payments(PaymentRepository(g.auth), request.args)
    return jsonify([p.to_dict() for p in payments])


@payment_bp.route('', methods=['POST'])
@login_required
def add_payment():
    """Record a payment. A body with ``items`` records one payment per fee item."""
    data = json_body()
    repo = PaymentRepository(g.auth)
    if 'items' in data:
        items = data.get('items')
        payments = repo.record_payments(
            student_id=data.get('student_id'),
            items=items if isinstance(items, list) else [],
            payment_date=data.get('payment_date'),
            payment_method=data.get('payment_method'),
            status=data.get('status') or 'paid',
            receipt_number=data.get('receipt_number'),
        )
        return jsonify([p.to_dict() for p in payments]), 201
    payment = repo.add(data)
    return jsonify(payment.to_dict()), 201


@payment_bp.route('/receipt-number', methods=['GET'])
@login_required
def suggest_receipt_number():
    return jsonify({'receipt_number': generate_receipt_number()})


@payment_bp.route('/<payment_id>', methods=['GET'])
@login_required
def get_payment(payment_id):
    payment = PaymentRepository(g.auth).get_one(payment_id)
    if payment is None:
        return jsonify({'error': 'Payment not found'}), 404
    return jsonify(payment.to_dict())


@payment_bp.route('/<payment_id>/receipt', methods=['GET'])
@login_required
def payment_receipt(payment_id):
    payment = PaymentRepository(g.auth).get_one(payment_id)
    if payment is None:
        return jsonify({'error': 'Payment not found'}), 404
    return jsonify(receipt_payload(payment, current_app.config.get('APP_NAME', 'School Fee Desk')))


@payment_bp.route('/<payment_id>', methods=['PUT', 'PATCH'])
@login_required
def edit_payment(payment_id):
    payment = PaymentRepository(g.auth).update(payment_id, json_body())
    return jsonify(payment.to_dict())


@payment_bp.route('/<payment_id>', methods=['DELETE'])
@login_required
def delete_payment(payment_id):
    require_confirmation()
    PaymentRepository(g.auth).delete(payment_id)
    return jsonify({'deleted': payment_id})
