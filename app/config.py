import os
import logging


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY')
    DEBUG = False
    UPLOAD_FOLDER = os.path.abspath('./uploads')
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB max upload size
    LOG_LEVEL = os.getenv('NETWORK_LOG_LEVEL', 'INFO')
    # Adjacency matrices above this many nodes log a size warning
    MATRIX_SIZE_WARNING = int(os.getenv('NETWORK_MATRIX_SIZE_WARNING', '1000'))


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.getenv('NETWORK_LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    DEBUG = False


class TestingConfig(Config):
    DEBUG = True
    TESTING = True
    UPLOAD_FOLDER = os.path.abspath('./test_uploads')
    LOG_LEVEL = 'WARNING'


config_by_name = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig
}


def log_level(config_class):
    return getattr(logging, str(config_class.LOG_LEVEL).upper(), logging.INFO)
