#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
测试哈希与HMAC工具模块
"""
import pytest
from core.hash_utils import LiteralKey, RawKey, sha256_hex, hmac_sha256, hmac_sha256_hex


def test_sha256_hex_empty_input():
    """测试空内容的SHA256"""
    assert sha256_hex(b'') == 'e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855'
    assert sha256_hex('') == sha256_hex(b'')


def test_sha256_hex_text_and_bytes():
    """测试字符串按UTF-8编码后计算"""
    expected = '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    assert sha256_hex(b'hello') == expected
    assert sha256_hex('hello') == expected


def test_hmac_sha256_rfc4231_vector():
    """测试RFC 4231测试用例2"""
    signature = hmac_sha256_hex(LiteralKey('Jefe'), 'what do ya want for nothing?')
    assert signature == '5bdcc146bf60754e6a042426089575c75a003f089d2739839dec58b964ec3843'


def test_hmac_sha256_returns_raw_key():
    """测试HMAC输出可直接作为下一步的密钥"""
    first = hmac_sha256(LiteralKey('secret'), 'message')
    assert isinstance(first, RawKey)
    assert len(first.material) == 32
    second = hmac_sha256(first, 'next')
    assert second.hex() == hmac_sha256_hex(RawKey.from_hex(first.hex()), 'next')


def test_raw_key_differs_from_literal_hex_key():
    """测试原始字节密钥与其十六进制字面字符串不能混用"""
    raw = hmac_sha256(LiteralKey('secret'), 'message')
    as_literal = LiteralKey(raw.hex())
    assert hmac_sha256_hex(raw, 'data') != hmac_sha256_hex(as_literal, 'data')


@pytest.mark.parametrize('bad_key', ['plain-string', b'plain-bytes', None])
def test_hmac_sha256_rejects_untagged_key(bad_key):
    """测试裸字符串/字节密钥被拒绝"""
    with pytest.raises(TypeError):
        hmac_sha256(bad_key, 'message')


def test_key_repr_hides_material():
    """测试密钥的repr不泄露内容"""
    assert 'secret' not in repr(LiteralKey('secret'))
    assert repr(RawKey(b'\x00' * 32)) == 'RawKey(32 bytes)'
