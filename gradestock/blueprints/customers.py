from flask import Blueprint, jsonify

from gradestock.database import get_session
from gradestock.exceptions import BusinessLogicError
from gradestock.forms import CustomerForm, first_error
from gradestock.middleware import require_admin
from gradestock.services import customer_service

customers_bp = Blueprint('customers', __name__, url_prefix='/customers')


@customers_bp.route('', methods=['GET'])
@require_admin
def list_customers():
    customers = customer_service.list_customers(get_session())
    return jsonify({'status': 'ok', 'customers': [c.to_dict() for c in customers]})


@customers_bp.route('', methods=['POST'])
@require_admin
def create_customer():
    """Create customer from form or JSON body."""
    form = CustomerForm()
    if not form.validate_on_submit():
        raise BusinessLogicError(first_error(form))

    customer = customer_service.create_customer(
        get_session(), form.name.data, form.phone.data, form.email.data
    )
    return jsonify({
        'status': 'ok',
        'message': f'Cliente "{customer.name}" cadastrado',
        'customer': customer.to_dict(),
    }), 201


@customers_bp.route('/<customer_id>/delete', methods=['POST'])
@require_admin
def delete_customer(customer_id):
    customer_service.delete_customer(get_session(), customer_id)
    return jsonify({'status': 'ok'})
