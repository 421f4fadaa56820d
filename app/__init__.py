# app/__init__.py
import logging
import os
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_cors import CORS

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()


def create_app():
    app = Flask(__name__)
    app.config.from_object('config.Config')

    logging.basicConfig(
        level=getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO),
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )

    # Inicializar extensões
    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)
    CORS(app)

    # Configurar login
    login_manager.login_view = 'auth.login'
    login_manager.login_message = 'Por favor, faça login para acessar esta página.'

    # Importar modelos e configurar user_loader
    from app.models.profile import Profile

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(Profile, user_id)

    # Registrar blueprints
    from app.routes import auth, dashboard, admin, functions, storage
    app.register_blueprint(auth.bp)
    app.register_blueprint(dashboard.bp)
    app.register_blueprint(admin.bp)
    app.register_blueprint(functions.bp)
    app.register_blueprint(storage.bp)

    from app.commands import register_commands
    register_commands(app)

    # Criar diretórios necessários
    os.makedirs('instance', exist_ok=True)

    return app
