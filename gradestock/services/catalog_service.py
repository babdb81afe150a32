"""
Catalog service: product matrix creation and product maintenance.

Products are created from a matrix of colors x references. Every cell of
the matrix becomes one Product with its own size grid; the initial stock of
each positive size is recorded as an IN transaction in the same commit.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from gradestock.exceptions import BusinessLogicError, NotFoundError, RemoteReadError
from gradestock.models import Product, StockTransaction, TransactionType, sizes_for_grid
from gradestock.models.sizes import GridType
from gradestock.services import stock_store
from gradestock.services.cache_service import invalidate_stock_views
from gradestock.services.stock_diff_service import coerce_grid_quantity
from gradestock.utils.formatters import parse_price, utc_timestamp

logger = logging.getLogger(__name__)

NEW_VARIATION_NAME = 'Nova Variação'
NEW_VARIATION_COLOR = 'Nova Cor'
NEW_VARIATION_HEX = '#000000'
DEFAULT_COLOR_HEX = '#000000'


def _new_id() -> str:
    return str(uuid.uuid4())


def list_products(session) -> List[Product]:
    """All products in creation order."""
    try:
        return session.query(Product).order_by(
            Product.created_at, Product.reference, Product.color, Product.id
        ).all()
    except SQLAlchemyError as e:
        logger.error("catalog.list.failed", exc_info=True)
        raise RemoteReadError() from e


def get_product(session, product_id: str) -> Product:
    """
    Raises:
        NotFoundError: Unknown id.
    """
    try:
        product = stock_store.get_record(session, product_id)
    except SQLAlchemyError as e:
        raise RemoteReadError() from e
    if product is None:
        raise NotFoundError('Produto não encontrado')
    return product


def _clean(value: Any) -> str:
    return str(value or '').strip()


def _parse_grid_type(value: Any) -> GridType:
    try:
        return GridType(_clean(value).upper() or GridType.PADRAO.value)
    except ValueError:
        raise BusinessLogicError(f'Tipo de grade inválido: {value}')


def build_matrix(data: Dict[str, Any]) -> List[Product]:
    """
    Turn a product matrix into unsaved Product rows.

    Args:
        data: {
            "name": optional common name,
            "description": optional text,
            "image_url": required,
            "references": [{"code", "grid_type", "price"}],
            "colors": [{"name", "hex", "stocks": {<code>: {<size>: qty}}}]
        }

    Only positive quantities for sizes of the reference's grid are kept.

    Raises:
        BusinessLogicError: Missing image, reference code or color name, or
            references, colors or stocks that are not objects.
    """
    image_url = _clean(data.get('image_url'))
    if not image_url:
        raise BusinessLogicError('Adicione uma foto.')

    references = data.get('references') or []
    colors = data.get('colors') or []
    if not references:
        raise BusinessLogicError('Adicione ao menos uma referência.')
    if not colors:
        raise BusinessLogicError('Adicione ao menos uma cor.')
    if not isinstance(references, list) or any(not isinstance(r, dict) for r in references):
        raise BusinessLogicError('Formato inválido para as referências.')
    if not isinstance(colors, list) or any(not isinstance(c, dict) for c in colors):
        raise BusinessLogicError('Formato inválido para as cores.')
    for color in colors:
        stocks_by_ref = color.get('stocks') or {}
        if not isinstance(stocks_by_ref, dict) or any(
            cells is not None and not isinstance(cells, dict) for cells in stocks_by_ref.values()
        ):
            raise BusinessLogicError(f"Formato inválido para o estoque da cor {_clean(color.get('name'))}.")
    if any(not _clean(r.get('code')) for r in references):
        raise BusinessLogicError('Preencha todos os códigos de referência.')
    if any(not _clean(c.get('name')) for c in colors):
        raise BusinessLogicError('Preencha os nomes das cores.')

    common_name = _clean(data.get('name'))
    description = _clean(data.get('description')) or None

    products = []
    for color in colors:
        color_name = _clean(color.get('name'))
        stocks_by_ref = color.get('stocks') or {}
        for ref in references:
            code = _clean(ref.get('code'))
            grid = sizes_for_grid(_parse_grid_type(ref.get('grid_type')))
            raw_cells = stocks_by_ref.get(code) or {}

            stocks = {}
            for size in grid:
                qty = coerce_grid_quantity(raw_cells.get(size))
                if qty > 0:
                    stocks[size] = qty

            product = Product(
                id=_new_id(),
                reference=code,
                name=common_name or f'Peça {color_name}',
                color=color_name,
                color_hex=_clean(color.get('hex')) or DEFAULT_COLOR_HEX,
                image_url=image_url,
                description=description,
                price=parse_price(ref.get('price')),
            )
            product.set_stocks(stocks)
            products.append(product)
    return products


def initial_transactions(products: Sequence[Product], now: Optional[str] = None) -> List[StockTransaction]:
    """One IN per positive size of each new product, sharing one timestamp."""
    timestamp = now or utc_timestamp()
    rows = []
    for product in products:
        for size, qty in (product.stocks or {}).items():
            if qty > 0:
                rows.append(StockTransaction(
                    id=_new_id(),
                    position=len(rows),
                    product_id=product.id,
                    product_name=product.name,
                    type=TransactionType.IN,
                    quantity=qty,
                    size=size,
                    date=timestamp,
                ))
    return rows


def create_products(session, data: Dict[str, Any], now: Optional[str] = None) -> List[Product]:
    """
    Create every product of a matrix plus its initial IN transactions.

    Returns:
        The created products, colors outer, references inner.
    """
    products = build_matrix(data)
    transactions = initial_transactions(products, now)

    session.add_all(products)
    session.add_all(transactions)
    stock_store.commit_write(session, 'Erro ao salvar produtos no banco de dados.', "catalog.create.failed")
    stock_store.after_stock_commit(transactions)

    logger.info(
        "catalog.products.created",
        extra={"products": len(products), "transactions": len(transactions)},
    )
    return products


def update_product(session, product_id: str, reference: str, name: str, price: Any = None) -> Product:
    """Edit reference, name and price of one product (unparseable price clears it)."""
    product = get_product(session, product_id)
    reference = _clean(reference)
    name = _clean(name)
    if not reference or not name:
        raise BusinessLogicError('Referência e nome são obrigatórios.')

    product.reference = reference
    product.name = name
    product.price = parse_price(price)
    stock_store.commit_write(session, 'Erro ao atualizar produto.', "catalog.update.failed")
    invalidate_stock_views()
    return product


def rename_color_group(session, product_ids: Sequence[str], color: str,
                       color_hex: Optional[str] = None) -> List[Product]:
    """
    Rename the color of every listed product.

    The old color name is also replaced inside each product name.
    """
    color = _clean(color)
    if not color:
        raise BusinessLogicError('Preencha o nome da cor.')
    products = stock_store.load_records(session, product_ids)
    if not products:
        raise NotFoundError('Produto não encontrado')

    for product in products:
        old_color = product.color or ''
        if old_color:
            product.name = product.name.replace(old_color, color)
        product.color = color
        product.color_hex = _clean(color_hex) or product.color_hex or DEFAULT_COLOR_HEX
    stock_store.commit_write(session, 'Erro ao atualizar produto.', "catalog.color.failed")
    invalidate_stock_views()
    return products


def add_variation(session, product_id: str) -> Product:
    """
    Add an empty "Nova Variação" record to the image group of `product_id`.

    Reference, image, description and price come from the first record of
    the group.
    """
    anchor = get_product(session, product_id)
    group = [p for p in list_products(session) if p.image_url == anchor.image_url]
    base = group[0] if group else anchor

    product = Product(
        id=_new_id(),
        reference=base.reference,
        name=NEW_VARIATION_NAME,
        color=NEW_VARIATION_COLOR,
        color_hex=NEW_VARIATION_HEX,
        image_url=base.image_url,
        description=base.description,
        price=base.price,
    )
    product.set_stocks({})
    session.add(product)
    stock_store.commit_write(session, 'Erro ao salvar produtos no banco de dados.', "catalog.variation.failed")
    invalidate_stock_views()
    return product


def delete_products(session, product_ids: Sequence[str]) -> int:
    """
    Delete products. Their transactions stay in the history.

    Returns:
        Number of deleted products.
    """
    products = stock_store.load_records(session, product_ids)
    if not products:
        raise NotFoundError('Produto não encontrado')
    for product in products:
        session.delete(product)
    stock_store.commit_write(session, 'Erro ao excluir produto.', "catalog.delete.failed")
    invalidate_stock_views()
    logger.info("catalog.products.deleted", extra={"count": len(products)})
    return len(products)


DEMO_MATRIX = {
    'name': 'Vestido Longo Floral',
    'description': 'Vestido longo em viscose estampada.',
    'image_url': '/static/demo/vestido-floral.jpg',
    'references': [
        {'code': 'VF-100', 'grid_type': 'PADRAO', 'price': '129,90'},
        {'code': 'VF-100P', 'grid_type': 'PLUS', 'price': '149,90'},
    ],
    'colors': [
        {'name': 'Azul', 'hex': '#1e3a8a', 'stocks': {
            'VF-100': {'P': 3, 'M': 5, 'G': 4, 'GG': 2},
            'VF-100P': {'G1': 2, 'G2': 1},
        }},
        {'name': 'Vermelho', 'hex': '#b91c1c', 'stocks': {
            'VF-100': {'P': 1, 'M': 2, 'G': 0, 'GG': 1},
            'VF-100P': {'G1': 0, 'G3': 3},
        }},
    ],
}


def seed_demo(session) -> List[Product]:
    """Insert the demo catalog."""
    return create_products(session, DEMO_MATRIX)
