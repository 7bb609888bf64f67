import atexit
import os
from types import SimpleNamespace
from typing import Mapping, Optional

from flask import Flask, g, jsonify, request
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_pymongo import PyMongo
from pymongo.database import Database

from .config import load_settings
from .errors import register_error_handlers
from .guard import token_required
from .products import ProductInput, ProductRepository, serialize_product
from .queries import ProductSearch
from .references import ReferenceResolver
from .tokens import TokenService
from .users import Credentials, UserService


def create_app(config: Optional[Mapping] = None, database: Optional[Database] = None) -> Flask:
    """Create and configure the Flask application.

    ``database`` lets callers hand in an already connected store; otherwise a
    client is opened from ``MONGO_URI`` and closed when the process exits.
    """
    app = Flask(__name__)

    # --- Configuration ---
    app.config.update(load_settings())
    if config:
        app.config.update(config)

    # --- Initialize extensions ---
    CORS(app, origins=app.config["CORS_ALLOWED_ORIGINS"] or "*")
    JWTManager(app)

    if database is None:
        mongo = PyMongo(app)
        database = mongo.db
        atexit.register(mongo.cx.close)

    tokens = TokenService(app.config["JWT_ACCESS_TOKEN_EXPIRES"])
    resolver = ReferenceResolver(database)
    products = ProductRepository(database, resolver)
    users = UserService(database, tokens, rounds=app.config["BCRYPT_ROUNDS"])

    app.extensions["catalog"] = SimpleNamespace(
        db=database,
        tokens=tokens,
        resolver=resolver,
        products=products,
        users=users,
    )

    register_error_handlers(app)

    with app.app_context():
        users.ensure_indexes()

    # --- Routes ---

    @app.route("/", methods=["GET"])
    def index():
        return jsonify({"message": "Welcome to the online supermarket!"})

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok"}), 200

    # Search is the only product route behind the token guard; writes are
    # deliberately left open until access rules for them are settled.
    @app.route("/products", methods=["GET"])
    @token_required
    def list_products():
        search = ProductSearch.from_args(request.args)
        documents = products.search(search)
        app.logger.debug(
            "Product search by %s returned %d results",
            g.current_user.get("email"),
            len(documents),
        )
        return jsonify({"products": products.summarize(documents)})

    @app.route("/products/<product_id>", methods=["GET"])
    def get_product(product_id: str):
        product = products.get(product_id)
        return jsonify(serialize_product(product))

    @app.route("/products", methods=["POST"])
    def create_product():
        product_input = ProductInput.from_payload(request.get_json(silent=True))
        product_id = products.create(product_input)
        app.logger.info("Created product %s (%s)", product_id, product_input.name)
        return (
            jsonify(
                {
                    "message": "New product has been created",
                    "productId": str(product_id),
                }
            ),
            201,
        )

    @app.route("/products/<product_id>", methods=["PUT"])
    def update_product(product_id: str):
        product_input = ProductInput.from_payload(request.get_json(silent=True))
        products.update(product_id, product_input)
        app.logger.info("Updated product %s", product_id)
        return jsonify({"message": "Product updated"}), 200

    @app.route("/products/<product_id>", methods=["DELETE"])
    def delete_product(product_id: str):
        products.delete(product_id)
        app.logger.info("Deleted product %s", product_id)
        return jsonify({"message": "Product has been deleted"})

    # --- Accounts ---

    @app.route("/users", methods=["POST"])
    def signup():
        credentials = Credentials.from_payload(request.get_json(silent=True))
        user_id = users.signup(credentials)
        return jsonify(
            {
                "message": "New user account has been created",
                "userId": str(user_id),
            }
        )

    @app.route("/login", methods=["POST"])
    def login():
        credentials = Credentials.from_payload(request.get_json(silent=True))
        access_token = users.login(credentials)
        return jsonify({"accessToken": access_token})

    return app


if __name__ == "__main__":
    app = create_app()
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port)
