#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
哈希与HMAC工具模块
提供SHA256摘要和HMAC-SHA256计算

HMAC密钥分为两种：
- LiteralKey：字面字符串密钥（如 "AWS4" + SecretAccessKey），按UTF-8编码后使用
- RawKey：上一步HMAC输出的原始字节，直接作为下一步的密钥
调用方必须明确传入其中一种，裸str/bytes会被拒绝
"""

import hashlib
import hmac
from dataclasses import dataclass


@dataclass(frozen=True)
class LiteralKey:
    """字面字符串密钥"""
    passphrase: str

    def to_bytes(self):
        return self.passphrase.encode('utf-8')

    def __repr__(self):
        return "LiteralKey(***)"


@dataclass(frozen=True)
class RawKey:
    """原始字节密钥"""
    material: bytes

    @classmethod
    def from_hex(cls, hex_str):
        """从十六进制字符串构造（对应openssl的hexkey:参数）"""
        return cls(bytes.fromhex(hex_str))

    def to_bytes(self):
        return self.material

    def hex(self):
        return self.material.hex()

    def __repr__(self):
        return f"RawKey({len(self.material)} bytes)"


def sha256_hex(content):
    """
    计算SHA256哈希值

    Args:
        content (bytes | str): 待计算内容，字符串按UTF-8编码

    Returns:
        str: 小写十六进制摘要
    """
    if isinstance(content, str):
        content = content.encode('utf-8')
    return hashlib.sha256(content).hexdigest()


def _key_bytes(key):
    if not isinstance(key, (LiteralKey, RawKey)):
        raise TypeError(f"HMAC密钥必须是LiteralKey或RawKey，实际为：{type(key).__name__}")
    return key.to_bytes()


def hmac_sha256(key, message):
    """
    使用HMAC-SHA256签名

    Args:
        key (LiteralKey | RawKey): 密钥
        message (str | bytes): 消息

    Returns:
        RawKey: 原始摘要字节，可直接作为下一步的密钥
    """
    if isinstance(message, str):
        message = message.encode('utf-8')
    return RawKey(hmac.new(_key_bytes(key), message, hashlib.sha256).digest())


def hmac_sha256_hex(key, message):
    """HMAC-SHA256，返回小写十六进制字符串"""
    return hmac_sha256(key, message).hex()
