#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
测试配置加载器模块
"""
import os
import yaml
import pytest
from unittest.mock import patch, mock_open
from config.config_loader import ConfigLoader


@pytest.fixture(autouse=True)
def no_dotenv():
    with patch('config.config_loader.load_dotenv'):
        yield


def test_config_loader_from_file():
    """测试从YAML文件加载配置"""
    mock_config = {
        'metadata': {
            'endpoint': 'http://169.254.169.254',
            'timeout': 2
        },
        's3': {
            'connect_timeout': 10
        }
    }

    with patch.dict(os.environ, {}, clear=True):
        with patch('builtins.open', mock_open(read_data=yaml.dump(mock_config))):
            config_loader = ConfigLoader('config.yaml')

            # 测试获取嵌套配置
            assert config_loader.get('metadata.timeout') == 2
            assert config_loader.get('s3.connect_timeout') == 10
            assert config_loader.get('non_existent.key', 'default') == 'default'
            assert config_loader.get_s3_config() == {'connect_timeout': 10}
            assert config_loader.get_log_config() == {}


def test_config_loader_with_environment_variables():
    """测试环境变量覆盖配置文件"""
    mock_config = {
        'metadata': {
            'endpoint': 'http://169.254.169.254'
        }
    }

    with patch.dict(os.environ, {
        'S3PUT_METADATA_ENDPOINT': 'http://localhost:1338',
        'S3PUT_METADATA_ROLE': 'uploader',
        'S3PUT_LOG_LEVEL': 'DEBUG'
    }, clear=True):
        with patch('builtins.open', mock_open(read_data=yaml.dump(mock_config))):
            config_loader = ConfigLoader('config.yaml')

            metadata_config = config_loader.get_metadata_config()
            assert metadata_config['endpoint'] == 'http://localhost:1338'
            assert metadata_config['role_name'] == 'uploader'
            assert config_loader.get('log.level') == 'DEBUG'


def test_config_loader_empty_file():
    """测试空配置文件"""
    with patch.dict(os.environ, {}, clear=True):
        with patch('builtins.open', mock_open(read_data='')):
            config_loader = ConfigLoader('config.yaml')
            assert config_loader.get_metadata_config() == {}


def test_config_loader_invalid_yaml():
    """测试无效的YAML配置文件"""
    with patch('builtins.open', mock_open(read_data='invalid: yaml: [file')):
        with pytest.raises(yaml.YAMLError):
            ConfigLoader('config.yaml')


def test_config_loader_file_not_found():
    """测试配置文件不存在的情况"""
    with patch('builtins.open', side_effect=FileNotFoundError):
        with pytest.raises(FileNotFoundError):
            ConfigLoader('non_existent_file.yaml')


def test_default_config_file():
    """测试随包发布的默认配置"""
    with patch.dict(os.environ, {}, clear=True):
        config_loader = ConfigLoader()
        assert config_loader.get('metadata.endpoint') == 'http://169.254.169.254'
        assert config_loader.get('metadata.use_token') is False
