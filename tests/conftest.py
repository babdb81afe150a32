import pytest
import uuid
from decimal import Decimal

from gradestock import create_app
from gradestock.database import get_session, create_tables, drop_tables
from gradestock.models import Product, Customer


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing (in-memory SQLite, no Redis)."""
    app = create_app('config.TestConfig')
    return app


@pytest.fixture(scope='function')
def client(app, session):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def admin_client(client):
    """Test client with the admin session already set."""
    with client.session_transaction() as sess:
        sess['is_admin'] = True
        sess['username'] = 'admin'
    return client


@pytest.fixture(scope='function')
def session(app):
    """Database session; every table is recreated after the test."""
    with app.app_context():
        session = get_session()
        yield session
        session.rollback()
        session.remove()
        drop_tables()
        create_tables()


@pytest.fixture(scope='function')
def make_product(session):
    """Factory: persist a product with the given stocks."""
    def _make(reference='REF-1', color='Azul', stocks=None, name=None,
              image_url='/img/vestido.jpg', color_hex='#0000ff', price=None):
        product = Product(
            id=str(uuid.uuid4()),
            reference=reference,
            name=name or f'Peça {color}',
            color=color,
            color_hex=color_hex,
            image_url=image_url,
            price=price,
        )
        product.set_stocks(stocks or {})
        session.add(product)
        session.commit()
        return product
    return _make


@pytest.fixture(scope='function')
def product(make_product):
    """Standard-grid product with stock in every size."""
    return make_product(stocks={'P': 2, 'M': 3, 'G': 1, 'GG': 0}, price=Decimal('99.90'))


@pytest.fixture(scope='function')
def customer(session):
    """Create test customer."""
    customer = Customer(id=str(uuid.uuid4()), name='Maria Souza', phone='11 99999-0000')
    session.add(customer)
    session.commit()
    return customer
