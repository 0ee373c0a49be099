#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
配置加载模块
负责从YAML配置文件和环境变量加载配置参数
"""

import os
import yaml
from dotenv import load_dotenv

DEFAULT_CONFIG_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'config.yaml')

# 环境变量 -> 配置键路径
ENV_OVERRIDES = {
    'S3PUT_METADATA_ENDPOINT': 'metadata.endpoint',
    'S3PUT_METADATA_ROLE': 'metadata.role_name',
    'S3PUT_LOG_PATH': 'log.path',
    'S3PUT_LOG_LEVEL': 'log.level',
}


class ConfigLoader:
    """配置加载器类"""

    def __init__(self, config_file=DEFAULT_CONFIG_FILE):
        """
        初始化配置加载器

        Args:
            config_file (str): 配置文件路径
        """
        self.config_file = config_file
        self.config = {}
        self.load_config()

    def load_config(self):
        """
        加载配置文件和环境变量
        """
        # 加载环境变量
        load_dotenv()

        # 加载YAML配置文件
        with open(self.config_file, 'r', encoding='utf-8') as f:
            self.config = yaml.safe_load(f) or {}

        # 环境变量优先于配置文件
        for env_name, key_path in ENV_OVERRIDES.items():
            env_value = os.getenv(env_name)
            if env_value:
                self.set(key_path, env_value)

    def get(self, key_path, default=None):
        """
        获取配置值

        Args:
            key_path (str): 配置键路径，如 "metadata.timeout"
            default: 默认值

        Returns:
            配置值
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path, value):
        """按键路径设置配置值，中间层级不存在时自动创建"""
        keys = key_path.split('.')
        node = self.config
        for key in keys[:-1]:
            if not isinstance(node.get(key), dict):
                node[key] = {}
            node = node[key]
        node[keys[-1]] = value

    def get_metadata_config(self):
        """
        获取实例元数据服务配置

        Returns:
            dict: 元数据服务配置字典
        """
        return self.config.get('metadata', {})

    def get_s3_config(self):
        """
        获取S3上传配置

        Returns:
            dict: S3配置字典
        """
        return self.config.get('s3', {})

    def get_log_config(self):
        return self.config.get('log', {})


# 单例模式
config_loader = ConfigLoader()
