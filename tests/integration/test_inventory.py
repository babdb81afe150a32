"""
Integration tests for the inventory endpoints: grid edits, adjustments and
product maintenance.
"""

import pytest

from gradestock.models import Product, StockTransaction, TransactionType


def transactions_for(session, product_id):
    return session.query(StockTransaction).filter_by(product_id=product_id).order_by(
        StockTransaction.size
    ).all()


class TestGridEdit:

    def test_grid_edit_writes_diff(self, admin_client, session, product):
        """P: 2 -> 5 is an IN of 3, M: 3 -> '' is an OUT of 3."""
        response = admin_client.post('/inventory/grid', json={
            'grid': {product.id: {'P': '5', 'M': '', 'G': 1, 'XL': 9}}
        })

        assert response.status_code == 200
        data = response.get_json()
        assert len(data['transactions']) == 2
        assert data['products'][0]['stocks'] == {'P': 5, 'M': 0, 'G': 1, 'GG': 0}

        loaded = session.get(Product, product.id)
        assert loaded.stocks == {'P': 5, 'M': 0, 'G': 1, 'GG': 0}
        assert loaded.total_stock == 6

        rows = transactions_for(session, product.id)
        assert [(t.size, t.type, t.quantity) for t in rows] == [
            ('M', TransactionType.OUT, 3),
            ('P', TransactionType.IN, 3),
        ]
        assert rows[0].date == rows[1].date

    def test_lowercase_size_keys_are_applied(self, admin_client, session, product):
        response = admin_client.post('/inventory/grid', json={'grid': {product.id: {'p': 4}}})

        assert response.status_code == 200
        assert session.get(Product, product.id).stocks['P'] == 4
        rows = transactions_for(session, product.id)
        assert [(t.size, t.type, t.quantity) for t in rows] == [('P', TransactionType.IN, 2)]

    def test_history_keeps_batch_order(self, admin_client, session, product, make_product):
        other = make_product(reference='REF-2', color='Rosa')
        admin_client.post('/inventory/grid', json={'grid': {
            product.id: {'GG': 1, 'P': 5, 'M': 0},
            other.id: {'G1': 2, 'M': 1},
        }})

        history = admin_client.get('/transactions').get_json()['transactions']

        assert [(t['product_id'], t['size']) for t in history] == [
            (product.id, 'P'), (product.id, 'M'), (product.id, 'GG'),
            (other.id, 'M'), (other.id, 'G1'),
        ]

    def test_unchanged_grid_is_noop(self, admin_client, session, product):
        response = admin_client.post('/inventory/grid', json={
            'grid': {product.id: {'P': 2, 'M': 3}}
        })

        assert response.status_code == 200
        assert response.get_json()['transactions'] == []
        assert transactions_for(session, product.id) == []

    def test_unknown_record_is_ignored(self, admin_client, session, product):
        response = admin_client.post('/inventory/grid', json={
            'grid': {'does-not-exist': {'P': 4}, product.id: {'G': 3}}
        })

        assert response.status_code == 200
        assert [t['product_id'] for t in response.get_json()['transactions']] == [product.id]

    def test_missing_grid(self, admin_client, session):
        response = admin_client.post('/inventory/grid', json={'rows': []})
        assert response.status_code == 400


class TestAdjust:

    def test_out_with_customer(self, admin_client, session, product, customer):
        response = admin_client.post('/inventory/adjust', json={
            'candidate_ids': [product.id],
            'size': 'M',
            'type': 'OUT',
            'quantity': '2',
            'customer_id': customer.id,
        })

        assert response.status_code == 200
        transaction = response.get_json()['transaction']
        assert transaction['type'] == 'OUT'
        assert transaction['quantity'] == 2
        assert transaction['customer_name'] == 'Maria Souza'

        loaded = session.get(Product, product.id)
        assert loaded.stock_for('M') == 1
        assert loaded.total_stock == 4

    def test_in_discards_customer(self, admin_client, session, product, customer):
        response = admin_client.post('/inventory/adjust', json={
            'candidate_ids': [product.id],
            'size': 'GG',
            'type': 'IN',
            'quantity': 4,
            'customer_id': customer.id,
        })

        assert response.status_code == 200
        transaction = response.get_json()['transaction']
        assert transaction['customer_id'] is None
        assert transaction['customer_name'] is None
        assert session.get(Product, product.id).stock_for('GG') == 4

    def test_out_beyond_stock_is_rejected_before_write(self, admin_client, session, product):
        response = admin_client.post('/inventory/adjust', json={
            'candidate_ids': [product.id],
            'size': 'G',
            'type': 'OUT',
            'quantity': 2,
        })

        assert response.status_code == 409
        assert response.get_json()['available'] == 1
        assert transactions_for(session, product.id) == []
        assert session.get(Product, product.id).stock_for('G') == 1

    @pytest.mark.parametrize('quantity', ['0', '-1', 'abc', ''])
    def test_invalid_quantity(self, admin_client, session, product, quantity):
        response = admin_client.post('/inventory/adjust', json={
            'candidate_ids': [product.id],
            'size': 'P',
            'type': 'IN',
            'quantity': quantity,
        })

        assert response.status_code == 400
        assert transactions_for(session, product.id) == []

    def test_default_candidate_has_stock_in_size(self, admin_client, session, make_product):
        first = make_product(reference='A-1', stocks={'M': 2})
        second = make_product(reference='A-2', stocks={'P': 1})

        response = admin_client.post('/inventory/adjust', json={
            'candidate_ids': [first.id, second.id],
            'size': 'P',
            'type': 'OUT',
            'quantity': 1,
        })

        assert response.status_code == 200
        assert response.get_json()['product']['id'] == second.id
        assert session.get(Product, second.id).stock_for('P') == 0

    def test_explicit_selection_must_be_a_candidate(self, admin_client, session, make_product):
        first = make_product(reference='A-1', stocks={'M': 2})
        other = make_product(reference='B-1', color='Rosa', stocks={'M': 2})

        response = admin_client.post('/inventory/adjust', json={
            'candidate_ids': [first.id],
            'product_id': other.id,
            'size': 'M',
            'type': 'IN',
            'quantity': 1,
        })

        assert response.status_code == 400

    def test_unknown_size(self, admin_client, session, product):
        response = admin_client.post('/inventory/adjust', json={
            'candidate_ids': [product.id],
            'size': 'XL',
            'type': 'IN',
            'quantity': 1,
        })
        assert response.status_code == 400


class TestProductMatrix:

    MATRIX = {
        'name': '',
        'description': 'Viscose',
        'image_url': '/img/floral.jpg',
        'references': [
            {'code': 'VF-1', 'grid_type': 'PADRAO', 'price': '129,90'},
            {'code': 'VF-1P', 'grid_type': 'PLUS', 'price': ''},
        ],
        'colors': [
            {'name': 'Azul', 'hex': '#00f', 'stocks': {
                'VF-1': {'P': '2', 'M': '0', 'G1': '5'},
                'VF-1P': {'G1': 3},
            }},
            {'name': 'Rosa', 'hex': '#f0f', 'stocks': {}},
        ],
    }

    def test_create_matrix(self, admin_client, session):
        response = admin_client.post('/inventory/products', json=self.MATRIX)

        assert response.status_code == 201
        products = response.get_json()['products']
        assert len(products) == 4
        assert [(p['reference'], p['color']) for p in products] == [
            ('VF-1', 'Azul'), ('VF-1P', 'Azul'), ('VF-1', 'Rosa'), ('VF-1P', 'Rosa'),
        ]
        assert products[0]['name'] == 'Peça Azul'
        assert products[0]['stocks'] == {'P': 2}
        assert products[0]['price'] == pytest.approx(129.90)
        assert products[1]['stocks'] == {'G1': 3}
        assert products[1]['price'] is None
        assert products[2]['stocks'] == {}

        initial = session.query(StockTransaction).all()
        assert sorted((t.size, t.quantity) for t in initial) == [('G1', 3), ('P', 2)]
        assert all(t.type == TransactionType.IN for t in initial)

    def test_image_required(self, admin_client, session):
        response = admin_client.post('/inventory/products', json={**self.MATRIX, 'image_url': ''})
        assert response.status_code == 400
        assert session.query(Product).count() == 0

    def test_reference_code_required(self, admin_client, session):
        matrix = {**self.MATRIX, 'references': [{'code': ' ', 'grid_type': 'PADRAO'}]}
        response = admin_client.post('/inventory/products', json=matrix)
        assert response.status_code == 400

    def test_color_name_required(self, admin_client, session):
        matrix = {**self.MATRIX, 'colors': [{'name': '', 'hex': '#000'}]}
        response = admin_client.post('/inventory/products', json=matrix)
        assert response.status_code == 400

    @pytest.mark.parametrize('field, value', [
        ('references', ['VF-1']),
        ('references', 'VF-1'),
        ('colors', ['Azul']),
        ('colors', [{'name': 'Azul', 'stocks': ['x']}]),
        ('colors', [{'name': 'Azul', 'stocks': {'VF-1': [2, 3]}}]),
    ])
    def test_malformed_matrix_is_rejected(self, admin_client, session, field, value):
        response = admin_client.post('/inventory/products', json={**self.MATRIX, field: value})

        assert response.status_code == 400
        assert response.get_json()['status'] == 'error'
        assert session.query(Product).count() == 0
        assert session.query(StockTransaction).count() == 0


class TestProductMaintenance:

    def test_edit_product(self, admin_client, session, product):
        response = admin_client.post(f'/inventory/{product.id}/edit', data={
            'reference': 'NEW-1',
            'name': 'Vestido Novo',
            'price': 'abc',
        })

        assert response.status_code == 200
        loaded = session.get(Product, product.id)
        assert loaded.reference == 'NEW-1'
        assert loaded.name == 'Vestido Novo'
        assert loaded.price is None

    def test_rename_color_group(self, admin_client, session, make_product):
        a = make_product(reference='A', color='Azul', name='Vestido Azul')
        b = make_product(reference='B', color='Azul', name='Blusa Azul')

        response = admin_client.post('/inventory/colors/edit', json={
            'product_ids': [a.id, b.id],
            'color': 'Marinho',
            'color_hex': '#001',
        })

        assert response.status_code == 200
        names = sorted(session.get(Product, pid).name for pid in (a.id, b.id))
        assert names == ['Blusa Marinho', 'Vestido Marinho']
        assert session.get(Product, a.id).color_hex == '#001'

    def test_add_variation(self, admin_client, session, product):
        response = admin_client.post('/inventory/variations', json={'product_id': product.id})

        assert response.status_code == 201
        created = response.get_json()['product']
        assert created['name'] == 'Nova Variação'
        assert created['color'] == 'Nova Cor'
        assert created['color_hex'] == '#000000'
        assert created['reference'] == product.reference
        assert created['image_url'] == product.image_url
        assert created['stocks'] == {}

    def test_delete_keeps_history(self, admin_client, session, product):
        admin_client.post('/inventory/grid', json={'grid': {product.id: {'P': 0}}})

        response = admin_client.post(f'/inventory/{product.id}/delete')

        assert response.status_code == 200
        assert session.get(Product, product.id) is None
        assert len(transactions_for(session, product.id)) == 1

    def test_delete_group(self, admin_client, session, make_product):
        a = make_product(reference='A')
        b = make_product(reference='B')

        response = admin_client.post('/inventory/delete', json={'product_ids': [a.id, b.id]})

        assert response.get_json()['deleted'] == 2
        assert session.query(Product).count() == 0

    def test_get_unknown_product(self, admin_client, session):
        response = admin_client.get('/inventory/unknown-id')
        assert response.status_code == 404


class TestInventoryView:

    def test_hide_zero_by_default(self, admin_client, session, make_product):
        make_product(color='Azul', stocks={'P': 0})
        make_product(color='Rosa', stocks={'P': 2})

        groups = admin_client.get('/inventory').get_json()['groups']
        assert [c['color'] for c in groups[0]['colors']] == ['Rosa']

        groups = admin_client.get('/inventory?hide_zero=0').get_json()['groups']
        assert sorted(c['color'] for c in groups[0]['colors']) == ['Azul', 'Rosa']

    def test_public_catalog_search(self, client, session, make_product):
        make_product(reference='VF-1', color='Azul', stocks={'P': 1})
        make_product(reference='BL-2', color='Rosa', image_url='/img/blusa.jpg', stocks={'M': 1})

        data = client.get('/catalog?q=vf-').get_json()
        assert len(data['groups']) == 1
        assert data['groups'][0]['colors'][0]['grade'] == 'P ao GG'

    def test_public_catalog_hides_pieces_without_stock(self, client, session, make_product):
        make_product(color='Azul', image_url='/img/empty.jpg', stocks={'P': 0})
        make_product(color='Azul', image_url='/img/full.jpg', stocks={'P': 3})
        make_product(color='Rosa', image_url='/img/full.jpg', stocks={'P': 0})

        groups = client.get('/catalog').get_json()['groups']

        assert [g['image_url'] for g in groups] == ['/img/full.jpg']
        assert [c['color'] for c in groups[0]['colors']] == ['Azul', 'Rosa']

    def test_admin_sees_pieces_without_stock_when_not_hiding(self, admin_client, session, make_product):
        make_product(image_url='/img/empty.jpg', stocks={'P': 0})

        assert admin_client.get('/inventory').get_json()['groups'] == []
        groups = admin_client.get('/inventory?hide_zero=0').get_json()['groups']
        assert [g['image_url'] for g in groups] == ['/img/empty.jpg']
