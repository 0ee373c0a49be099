#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
异常定义模块
区分参数配置、凭证获取、签名计算、网络传输四类错误
"""


class S3PutError(Exception):
    """上传工具异常基类"""

    def __init__(self, message, step=None):
        """
        Args:
            message (str): 错误信息
            step (str, optional): 出错的处理步骤
        """
        super().__init__(message)
        self.message = message
        self.step = step

    def __str__(self):
        if self.step:
            return f"[{self.step}] {self.message}"
        return self.message


class ConfigurationError(S3PutError):
    """参数缺失、源文件不存在、区域与Host不匹配等配置错误"""


class CredentialResolutionError(S3PutError):
    """元数据服务不可达或返回的凭证数据不完整"""


class SigningError(S3PutError):
    """签名计算过程中的内部不一致，属于程序缺陷，不应重试"""


class TransportError(S3PutError):
    """网络失败或存储端返回非2xx响应"""

    def __init__(self, message, step="transport", status_code=None, response_text=None):
        super().__init__(message, step=step)
        self.status_code = status_code
        self.response_text = response_text
