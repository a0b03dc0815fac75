"""Environment configuration"""
from .settings import config, Config
from .testing import TestingConfig

config['testing'] = TestingConfig

__all__ = ['config', 'Config', 'TestingConfig']
