import atexit
import logging
import os

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from dotenv import load_dotenv
from flask import Flask
from flask_sqlalchemy import SQLAlchemy

# Load environment variables from .env before config classes read them
load_dotenv()

from config import Config, DevelopmentConfig, ProductionConfig, TestingConfig  # noqa: E402

logger = logging.getLogger(__name__)

db = SQLAlchemy()

CONFIG_MAP = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": Config,
}


class Storefront:
    """One set of stores per running application, handed to routes and jobs."""

    def __init__(self, catalog, cart, session, advisor, storage):
        self.catalog = catalog
        self.cart = cart
        self.session = session
        self.advisor = advisor
        self.storage = storage


def build_storefront(config, storage, storefront_client=None, chat_client=None):
    from .services.advisor import ShineAdvisor
    from .services.cart import CartEngine
    from .services.catalog import CatalogStore
    from .services.customer import SessionStore
    from .utils.helper import StorefrontClient
    from .utils.llm import ChatCompletionClient

    storefront_client = storefront_client or StorefrontClient.from_config(config)
    chat_client = chat_client or ChatCompletionClient.from_config(config)

    catalog = CatalogStore(storefront_client, page_size=config["CATALOG_PAGE_SIZE"])
    cart = CartEngine.from_config(storage, config)
    session = SessionStore(storefront_client, storage)
    advisor = ShineAdvisor(chat_client, catalog)
    return Storefront(catalog=catalog, cart=cart, session=session, advisor=advisor, storage=storage)


def start_scheduler(app):
    scheduler = BackgroundScheduler()

    # Wrap job inside app.app_context()
    def job_wrapper():
        from .errors import NetworkFailure
        with app.app_context():
            try:
                app.extensions["storefront"].catalog.refresh()
            except NetworkFailure as e:
                app.logger.warning("[Scheduler] Catalog refresh failed: %s", e.message)

    scheduler.add_job(
        func=job_wrapper,
        trigger=IntervalTrigger(hours=app.config["CATALOG_REFRESH_HOURS"]),
        id="refresh_catalog_job",
        name="Refresh the product catalog",
        max_instances=1,
        coalesce=True
    )

    scheduler.start()
    app.logger.info("[Scheduler] Started refresh_catalog job")

    # Shut down scheduler on exit
    atexit.register(lambda: scheduler.shutdown())
    return scheduler


def create_app(config_name=None, storefront_client=None, chat_client=None):
    app = Flask(__name__)

    # Pick config based on FLASK_ENV
    config_type = (config_name or os.getenv("FLASK_ENV", "development")).lower()
    app.config.from_object(CONFIG_MAP.get(config_type, DevelopmentConfig))

    db.init_app(app)

    from .routes import main
    from .routes.advisor import advisor_bp
    from .routes.auth import auth_bp
    from .routes.cart import cart_bp
    from .routes.products import products_bp
    app.register_blueprint(main)
    app.register_blueprint(products_bp)
    app.register_blueprint(cart_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(advisor_bp)

    from .cli import register_commands
    register_commands(app)

    with app.app_context():
        from . import models  # noqa: F401
        from .storage import DatabaseStorage

        db.create_all()

        storefront = build_storefront(
            app.config,
            DatabaseStorage(db),
            storefront_client=storefront_client,
            chat_client=chat_client,
        )
        app.extensions["storefront"] = storefront
        storefront.session.restore()

    if app.config["SCHEDULER_ENABLED"]:
        start_scheduler(app)

    return app
