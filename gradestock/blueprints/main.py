"""Main blueprint with health check endpoints."""
from flask import Blueprint, jsonify

from gradestock.database import ping

main_bp = Blueprint('main', __name__)


@main_bp.route('/health')
def health():
    """
    Health check endpoint that validates database connection.

    Returns:
        200: Healthy (DB connected)
        500: Unhealthy (DB error)
    """
    try:
        if ping():
            return jsonify({
                'status': 'healthy',
                'database': 'connected',
                'message': 'Conexão com o banco de dados OK'
            }), 200
        return jsonify({
            'status': 'unhealthy',
            'database': 'error',
            'message': 'Resultado inesperado da consulta'
        }), 500

    except Exception as e:
        return jsonify({
            'status': 'unhealthy',
            'database': 'disconnected',
            'error': str(e),
            'message': 'Falha ao conectar com o banco de dados'
        }), 500


@main_bp.route('/health/cache')
def health_cache():
    """
    Cache health check endpoint.

    Never returns 500: without Redis the app keeps working uncached
    and the status is reported as "degraded".
    """
    try:
        from gradestock.services.cache_service import get_cache
        cache = get_cache()

        if cache.is_available():
            test_key = "health_check"
            cache.set("system", test_key, {"test": "ok"}, ttl=10)
            result = cache.get("system", test_key)

            if result and result.get('test') == 'ok':
                return jsonify({
                    'status': 'ok',
                    'cache': 'connected',
                    'redis': 'healthy',
                    'message': 'Cache funcionando'
                }), 200
            return jsonify({
                'status': 'degraded',
                'cache': 'error',
                'redis': 'connected_but_failing',
                'message': 'Redis conectado, mas as operações falharam'
            }), 200

        return jsonify({
            'status': 'degraded',
            'cache': 'unavailable',
            'redis': 'disconnected',
            'message': 'Cache desativado ou Redis indisponível (o app continua sem cache)'
        }), 200

    except Exception as e:
        return jsonify({
            'status': 'degraded',
            'cache': 'error',
            'redis': 'unknown',
            'error': str(e),
            'message': 'Falha na verificação do cache (o app continua sem cache)'
        }), 200
