from flask import Blueprint, Response, current_app, g, jsonify, request

from routes.payment_routes import load_filtered_payments
from utils import login_required
from utils.fee_structures import FeeStructureRepository
from utils.payments import PaymentRepository
from utils.reports import (
    dashboard_summary,
    export_csv,
    payment_stats,
    report_filename,
    student_summary,
)
from utils.students import StudentRepository

report_bp = Blueprint('reports', __name__, url_prefix='/reports')


@report_bp.route('/summary', methods=['GET'])
@login_required
def summary():
    """Collection totals for the filtered payments (``start``, ``end``, ``class``, ``status``)."""
    payments = load_filtered_payments(PaymentRepository(g.auth), request.args)
    students = StudentRepository().get_all()
    return jsonify(payment_stats(payments, students))


@report_bp.route('/students', methods=['GET'])
@login_required
def students_report():
    payments = load_filtered_payments(PaymentRepository(g.auth), request.args)
    students = StudentRepository().get_all()
    return jsonify(student_summary(payments, students))


@report_bp.route('/export.csv', methods=['GET'])
@login_required
def export():
    payments = load_filtered_payments(PaymentRepository(g.auth), request.args)
    body = export_csv(payments)
    filename = report_filename(request.args.get('start'), request.args.get('end'))
    return Response(
        body,
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename={filename}'},
    )


@report_bp.route('/dashboard', methods=['GET'])
@login_required
def dashboard():
    summary_data = dashboard_summary(
        StudentRepository().get_all(),
        PaymentRepository(g.auth).get_all(),
        FeeStructureRepository().get_all(),
        recent_limit=current_app.config.get('RECENT_PAYMENTS_LIMIT', 5),
    )
    return jsonify(summary_data)
