"""
Flask CLI commands.

Commands:
- flask init-db: Create the database tables
- flask seed-demo: Insert a small demo catalog
"""

import click

from gradestock import database
from gradestock.exceptions import AppError
from gradestock.models import Product


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create every table that does not exist yet."""
        database.create_tables()
        click.echo(click.style('✅ Tabelas criadas.', fg='green'))

    @app.cli.command('seed-demo')
    @click.option('--force', is_flag=True, help='Insert even if products already exist')
    def seed_demo_command(force):
        """Insert a demo catalog (products and initial stock)."""
        from gradestock.services.catalog_service import seed_demo

        session = database.get_session()
        if not force and session.query(Product).first() is not None:
            click.echo(click.style('❌ Já existem produtos cadastrados. Use --force para inserir mesmo assim.', fg='red'))
            return

        try:
            products = seed_demo(session)
        except AppError as e:
            click.echo(click.style(f'❌ Erro ao inserir demonstração: {e.message}', fg='red'))
            return

        click.echo(click.style(f'\n✅ {len(products)} produtos de demonstração criados!', fg='green', bold=True))
        for p in products:
            click.echo(f'   {p.reference} / {p.color}: {p.total_stock} peças')
