"""Customer service: list, create and delete customers."""
import logging
import re
import uuid
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from gradestock.exceptions import BusinessLogicError, NotFoundError, RemoteReadError
from gradestock.models import Customer
from gradestock.services import stock_store

logger = logging.getLogger(__name__)

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


def is_valid_email(email: str) -> bool:
    """Validate email format."""
    return re.match(EMAIL_PATTERN, email) is not None


def list_customers(session) -> List[Customer]:
    """All customers ordered by name."""
    try:
        return session.query(Customer).order_by(Customer.name, Customer.id).all()
    except SQLAlchemyError as e:
        logger.error("customers.list.failed", exc_info=True)
        raise RemoteReadError() from e


def create_customer(session, name: str, phone: Optional[str] = None,
                    email: Optional[str] = None) -> Customer:
    """
    Create a customer.

    Raises:
        BusinessLogicError: Missing name or malformed email.
    """
    name = (name or '').strip()
    phone = (phone or '').strip() or None
    email = (email or '').strip() or None

    if not name:
        raise BusinessLogicError('O nome do cliente é obrigatório')
    if email and not is_valid_email(email):
        raise BusinessLogicError('Email inválido.')

    customer = Customer(id=str(uuid.uuid4()), name=name, phone=phone, email=email)
    session.add(customer)
    stock_store.commit_write(session, 'Erro ao salvar cliente.', "customers.create.failed")
    logger.info("customers.created", extra={"customer_id": customer.id})
    return customer


def delete_customer(session, customer_id: str) -> None:
    """Delete a customer. Past transactions keep the denormalized name."""
    customer = session.get(Customer, str(customer_id))
    if customer is None:
        raise NotFoundError('Cliente não encontrado')
    session.delete(customer)
    stock_store.commit_write(session, 'Erro ao excluir cliente.', "customers.delete.failed")
    logger.info("customers.deleted", extra={"customer_id": customer_id})
