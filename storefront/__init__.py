import os

from flask import Flask, jsonify

from .extensions import db, jwt, cors, migrate
from .logging_config import get_logger, setup_logging
from .utils.api import api_error

log = get_logger(__name__)


def create_app(config_object=None):
    app = Flask(__name__, instance_relative_config=True)

    if config_object is None:
        from .config import Config as config_object
    app.config.from_object(config_object)
    config_object.init_app(app)
    os.makedirs(app.instance_path, exist_ok=True)

    setup_logging(app.config.get("LOG_LEVEL", "INFO"), app.config.get("LOG_FILE"))

    # Init extensions
    db.init_app(app)
    jwt.init_app(app)
    cors.init_app(app, resources={r"/*": {"origins": "*"}})
    migrate.init_app(app, db)

    # Register blueprints
    from .auth import bp as auth_bp; app.register_blueprint(auth_bp)
    from .product import bp as product_bp; app.register_blueprint(product_bp)
    from .checkout import bp as checkout_bp; app.register_blueprint(checkout_bp)
    from .order import bp as order_bp; app.register_blueprint(order_bp)
    from .coupon import bp as coupon_bp; app.register_blueprint(coupon_bp)
    from .admin import bp as admin_bp; app.register_blueprint(admin_bp)

    register_error_handlers(app)

    from .cli import register_cli
    register_cli(app)

    app.extensions["checkout_registry"] = _build_checkout_registry(app)

    @app.get("/")
    def health():
        return jsonify(ok=True, msg="API running")

    with app.app_context():
        db.create_all()

    log.info("storefront api ready (%d routes)", len(list(app.url_map.iter_rules())))
    return app


def _build_checkout_registry(app):
    from .checkout import CheckoutRegistry, CheckoutSession
    from .services.coupon_service import SqlCouponRegistry
    from .services.order_service import SqlOrderStore
    from .services.settings_service import get_tax_rate

    def factory(user_id):
        return CheckoutSession(
            SqlCouponRegistry(),
            SqlOrderStore(),
            get_tax_rate,
            user_id=user_id,
            verify_delay=app.config["PAYMENT_VERIFY_DELAY"],
        )

    return CheckoutRegistry(factory)


def register_error_handlers(app):
    @app.errorhandler(ValueError)
    def _value_error(e):
        return jsonify(api_error(str(e))), 422

    @app.errorhandler(404)
    def _not_found(e):
        return jsonify(api_error("Not found")), 404

    @app.errorhandler(405)
    def _method_not_allowed(e):
        return jsonify(api_error("Method not allowed")), 405

    @app.errorhandler(413)
    def _too_large(e):
        return jsonify(api_error("File too large")), 413

    @jwt.unauthorized_loader
    def _missing_token(reason):
        return jsonify(api_error("Unauthorized")), 401

    @jwt.invalid_token_loader
    def _bad_token(reason):
        return jsonify(api_error("Invalid token")), 401

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return jsonify(api_error("Token expired")), 401
