from flask import Flask, jsonify
from dotenv import load_dotenv
import logging
import os
from extensions import db, mail, migrate, login_manager
from errors import register_error_handlers

# Setup Flask
load_dotenv()


def env_flag(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def create_app(test_config=None):
    app = Flask(__name__, instance_relative_config=True)

    app.config['SECRET_KEY'] = os.getenv("SECRET_KEY", "secret_key")
    app.config['SQLALCHEMY_DATABASE_URI'] = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(app.instance_path, "dealership.sqlite3"),
    )
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # Token ký bằng JWT_SECRET; thiếu thì endpoint trả 500 chứ không dừng process
    app.config["JWT_SECRET"] = os.getenv("JWT_SECRET")
    app.config["JWT_EXPIRES_HOURS"] = int(os.getenv("JWT_EXPIRES_HOURS", "24"))

    # Lưu và upload ảnh (xe, scanner, biên lai)
    app.config["UPLOAD_FOLDER"] = os.getenv(
        "UPLOAD_FOLDER", os.path.join(os.path.dirname(__file__), "static", "uploads")
    )
    app.config["UPLOAD_URL_PREFIX"] = "/static/uploads"
    app.config["ALLOWED_EXTENSIONS"] = {"png", "jfif", "jpg", "jpeg", "gif", "webp"}
    app.config["MAX_CONTENT_LENGTH"] = 5 * 1024 * 1024  # 5MB/request

    app.config["ENFORCE_BOOKING_TRANSITIONS"] = env_flag("ENFORCE_BOOKING_TRANSITIONS", True)
    app.config["ENFORCE_PAYMENT_TRANSITIONS"] = env_flag("ENFORCE_PAYMENT_TRANSITIONS", True)

    app.config["PUSHER_APP_ID"] = os.getenv("PUSHER_APP_ID")
    app.config["PUSHER_KEY"] = os.getenv("PUSHER_KEY")
    app.config["PUSHER_SECRET"] = os.getenv("PUSHER_SECRET")
    app.config["PUSHER_CLUSTER"] = os.getenv("PUSHER_CLUSTER")

    app.config["YOUTUBE_API_KEY"] = os.getenv("YOUTUBE_API_KEY")
    app.config["YOUTUBE_CACHE_SECONDS"] = int(os.getenv("YOUTUBE_CACHE_SECONDS", "600"))

    app.config["LOG_LEVEL"] = os.getenv("LOG_LEVEL", "INFO")

    # Cấu hình Flask-Mail
    app.config.update(
        MAIL_SERVER=os.getenv("MAIL_SERVER", "smtp.gmail.com"),
        MAIL_PORT=int(os.getenv("MAIL_PORT", "587")),
        MAIL_USE_TLS=env_flag("MAIL_USE_TLS", True),
        MAIL_USERNAME=os.getenv("MAIL_USERNAME"),
        MAIL_PASSWORD=os.getenv("MAIL_PASSWORD"),
        MAIL_DEFAULT_SENDER=os.getenv("MAIL_DEFAULT_SENDER", os.getenv("MAIL_USERNAME")),
    )

    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.logger.setLevel(app.config["LOG_LEVEL"])

    os.makedirs(app.instance_path, exist_ok=True)

    # Khởi tạo db, migrate, mail, login
    db.init_app(app)
    migrate.init_app(app, db)
    mail.init_app(app)
    login_manager.init_app(app)

    # Import models + request_loader sau khi db đã init
    import models  # noqa: F401
    import security  # noqa: F401

    register_error_handlers(app)

    # Import blueprints
    from blueprints.auth.routes import auth_bp
    app.register_blueprint(auth_bp, url_prefix="/api/auth")

    from blueprints.rooms.routes import rooms_bp
    app.register_blueprint(rooms_bp, url_prefix="/api/rooms")

    from blueprints.cars.routes import cars_bp
    app.register_blueprint(cars_bp, url_prefix="/api/cars")

    from blueprints.bookings.routes import bookings_bp
    app.register_blueprint(bookings_bp, url_prefix="/api/bookings")

    from blueprints.payments.routes import payments_bp
    app.register_blueprint(payments_bp, url_prefix="/api/payments")

    from blueprints.admin.routes import admin_bp
    app.register_blueprint(admin_bp, url_prefix="/api/admin")

    from blueprints.superadmin.routes import superadmin_bp
    app.register_blueprint(superadmin_bp, url_prefix="/api/superadmin")

    from blueprints.notifications.routes import notifications_bp
    app.register_blueprint(notifications_bp, url_prefix="/api/notifications")

    from blueprints.media.routes import media_bp
    app.register_blueprint(media_bp, url_prefix="/api")

    from blueprints.chat.routes import chat_bp
    app.register_blueprint(chat_bp, url_prefix="/api/chat")

    from blueprints.favorites.routes import favorites_bp
    app.register_blueprint(favorites_bp, url_prefix="/api/favorites")

    @app.route("/api/health")
    def health():
        return jsonify({"status": "ok"})

    return app


app = create_app()

if __name__ == "__main__":
    app.run(debug=True)
