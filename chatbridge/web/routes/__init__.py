"""Blueprint registration."""

from __future__ import annotations


def register_blueprints(app):
    # Import locally to avoid import-time side effects / circular imports.
    from .conversations import bp as conversations_bp
    from .merge import bp as merge_bp
    from .system import bp as system_bp

    app.register_blueprint(conversations_bp)
    app.register_blueprint(merge_bp)
    app.register_blueprint(system_bp)
