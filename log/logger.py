#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
日志模块
负责配置和提供日志记录功能
"""

import os
import logging
import threading
from logging.handlers import TimedRotatingFileHandler
from config.config_loader import config_loader

LEVEL_MAP = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL
}


class Logger:
    """日志记录器类"""

    def __init__(self, name='s3put'):
        """
        初始化日志记录器

        Args:
            name (str): logging记录器名称
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(self._get_log_level())
        self.logger.propagate = False

        # 确保日志目录存在
        self.log_path = config_loader.get('log.path', './s3put_log/')
        os.makedirs(self.log_path, exist_ok=True)

        self.formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(module_name)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        if not self.logger.handlers:
            self._add_console_handler()
            self._add_file_handler()

        self.lock = threading.Lock()

    def _get_log_level(self):
        level_str = str(config_loader.get('log.level', 'INFO')).upper()
        return LEVEL_MAP.get(level_str, logging.INFO)

    def _add_console_handler(self):
        """
        添加控制台日志处理器，只输出WARNING及以上
        """
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        self.logger.addHandler(console_handler)

    def _add_file_handler(self):
        """
        添加文件日志处理器（按天分割），记录请求与响应的详细过程
        """
        log_file = os.path.join(self.log_path, 's3put.log')

        file_handler = TimedRotatingFileHandler(
            filename=log_file,
            when='midnight',
            backupCount=config_loader.get('log.backup_count', 7),
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(self.formatter)

        self.logger.addHandler(file_handler)

    def set_level(self, level_str):
        """
        运行时调整日志级别

        Args:
            level_str (str): DEBUG/INFO/WARNING/ERROR/CRITICAL
        """
        self.logger.setLevel(LEVEL_MAP.get(level_str.upper(), logging.INFO))

    def _log(self, level, message, module):
        with self.lock:
            self.logger.log(level, message, extra={'module_name': module})

    def debug(self, message, module='main'):
        self._log(logging.DEBUG, message, module)

    def info(self, message, module='main'):
        self._log(logging.INFO, message, module)

    def warning(self, message, module='main'):
        self._log(logging.WARNING, message, module)

    def error(self, message, module='main'):
        self._log(logging.ERROR, message, module)

    def critical(self, message, module='main'):
        self._log(logging.CRITICAL, message, module)


# 单例模式
logger = Logger()
