from flask import Flask
from .config import Config
from .extensions import cors


def create_app(config_class: type[Config] = Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Extensions
    cors.init_app(app)

    # Blueprints
    from .routes.mockups import bp as mockups_pages
    from .routes.mockups_api import bp as mockups_api
    from .routes.templates_api import bp as templates_api
    from .routes.proxy import bp as proxy_api

    app.register_blueprint(mockups_pages)
    app.register_blueprint(mockups_api, url_prefix="/api")
    app.register_blueprint(templates_api, url_prefix="/api")
    app.register_blueprint(proxy_api, url_prefix="/api")

    return app
