"""
Routes Package
Exports all route blueprints
"""
from olpm.routes.tests import tests_bp
from olpm.routes.health import health_bp

__all__ = ['tests_bp', 'health_bp']
