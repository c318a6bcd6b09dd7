# Main Flask app
import logging

from flask import Flask, jsonify
from flask_jwt_extended import JWTManager
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from comments import CommentTreeBuilder
from config import config
from errors import ApiError, InternalError
from feed import FeedAssembler
from follows import FollowService
from likes import LikeAnnotator
from models import db
from posts import PostService
from recommendations import RecommendationSampler
from routes import main_bp, feed_bp, posts_bp, comments_bp, users_bp

jwt = JWTManager()

HTTP_ACTION_RESULTS = {
    404: 'ERR_NOT_FOUND',
    405: 'ERR_METHOD_NOT_ALLOWED',
}


def create_app(config_name='default'):
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
    )

    # Initialize extensions
    db.init_app(app)
    jwt.init_app(app)

    # Services are shared by every request; they hold no per-request state
    like_annotator = LikeAnnotator()
    recommendation_sampler = RecommendationSampler(limit=app.config['RECOMMENDATION_LIMIT'])
    app.services = {
        'likes': like_annotator,
        'recommendations': recommendation_sampler,
        'feed': FeedAssembler(like_annotator, recommendation_sampler, page_size=app.config['FEED_PAGE_SIZE']),
        'comments': CommentTreeBuilder(like_annotator, page_size=app.config['COMMENT_PAGE_SIZE']),
        'posts': PostService(like_annotator, like_page_size=app.config['LIKE_PAGE_SIZE']),
        'follows': FollowService(),
    }

    # Register blueprints
    app.register_blueprint(main_bp, url_prefix='/')
    app.register_blueprint(feed_bp, url_prefix='/feed')
    app.register_blueprint(posts_bp, url_prefix='/posts')
    app.register_blueprint(comments_bp, url_prefix='/comments')
    app.register_blueprint(users_bp, url_prefix='/users')

    register_error_handlers(app)

    @app.cli.command('init-db')
    def init_db():
        """Create all tables."""
        db.create_all()
        logging.info("Database tables created")

    logging.info(f"Flask app created for '{config_name}' environment.")
    return app


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(err):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(err):
        action_result = HTTP_ACTION_RESULTS.get(err.code, 'ERR_BAD_REQUEST')
        return jsonify({"actionResult": action_result}), err.code

    @app.errorhandler(SQLAlchemyError)
    def handle_storage_error(err):
        logging.error(f"Storage error: {err}", exc_info=True)
        db.session.rollback()
        return handle_api_error(InternalError())

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        return handle_api_error(InternalError())

    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify({"actionResult": "ERR_NO_TOKEN"}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({"actionResult": "ERR_INVALID_TOKEN"}), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({"actionResult": "ERR_AUTH_EXPIRED"}), 401
