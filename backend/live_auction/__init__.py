from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from live_auction.config import Config

db = SQLAlchemy()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:8081",
    "http://127.0.0.1:8081",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from live_auction.main import main
    flask_app.register_blueprint(main)

    from live_auction.api.auctions import auctions
    flask_app.register_blueprint(auctions, url_prefix='/api/auctions')

    from live_auction.api.lots import lots
    flask_app.register_blueprint(lots, url_prefix='/api/lots')

    from live_auction.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the lot catalog."""
        from live_auction.models import Lot
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed a small demo catalog
            demo = [
                ('K. Mbappe', 91), ('E. Haaland', 91), ('K. De Bruyne', 90),
                ('Vinicius Jr', 89), ('B. Saka', 86), ('Pedri', 85),
                ('D. Rice', 84), ('M. Odegaard', 83), ('J. Bellingham', 82),
                ('A. Davies', 81), ('L. Diaz', 79), ('M. Olise', 78),
                ('F. Wirtz', 77), ('E. Fernandez', 75), ('P. Foden', 74),
                ('A. Garnacho', 72),
            ]
            for name, rating in demo:
                db.session.add(Lot(name=name, rating=rating))

            db.session.commit()
            print(f'Database has been reset and seeded with {len(demo)} lots!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
