# Configuration settings
import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'mysql://localhost/communitty')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'change-me-in-production')
    JWT_TOKEN_LOCATION = ['headers']
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Page sizes for the feed, root comment and liker listings
    FEED_PAGE_SIZE = int(os.getenv('FEED_PAGE_SIZE', 10))
    COMMENT_PAGE_SIZE = int(os.getenv('COMMENT_PAGE_SIZE', 10))
    LIKE_PAGE_SIZE = int(os.getenv('LIKE_PAGE_SIZE', 10))
    RECOMMENDATION_LIMIT = int(os.getenv('RECOMMENDATION_LIMIT', 5))
    DEBUG = False


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    DEBUG = False


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    JWT_SECRET_KEY = 'testing-secret-key-with-enough-length-for-hs256'
    FEED_PAGE_SIZE = 10
    COMMENT_PAGE_SIZE = 10
    LIKE_PAGE_SIZE = 10
    RECOMMENDATION_LIMIT = 5


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
