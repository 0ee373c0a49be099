#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
AWS4-HMAC-SHA256签名模块
负责构建规范请求、派生签名密钥、计算签名和Authorization头
"""

from dataclasses import dataclass

from core.exceptions import SigningError
from core.hash_utils import LiteralKey, RawKey, hmac_sha256, hmac_sha256_hex, sha256_hex
from log.logger import logger

ALGORITHM = 'AWS4-HMAC-SHA256'
KEY_PREFIX = 'AWS4'
SCOPE_TERMINATOR = 'aws4_request'
SERVICE_NAME = 's3'


@dataclass(frozen=True)
class CanonicalRequest:
    """规范请求"""
    method: str
    canonical_uri: str
    query_string: str
    headers: tuple
    payload_hash: str

    @property
    def canonical_headers(self):
        return ''.join(f"{name}:{value}\n" for name, value in self.headers)

    @property
    def signed_headers(self):
        return ';'.join(name for name, _ in self.headers)

    def to_string(self):
        # 规范头本身以换行结尾，与后面的分隔换行一起形成空行
        return '\n'.join([
            self.method,
            self.canonical_uri,
            self.query_string,
            self.canonical_headers,
            self.signed_headers,
            self.payload_hash,
        ])


@dataclass(frozen=True)
class SignedRequest:
    """签名结果"""
    canonical_request: CanonicalRequest
    string_to_sign: str
    signature: str
    authorization: str
    headers: dict


def build_canonical_request(method, canonical_uri, headers, payload_hash, query_string='', signed_headers=None):
    """
    构建规范请求

    Args:
        method (str): HTTP方法
        canonical_uri (str): 规范URI（已编码，以'/'开头）
        headers (dict): 参与签名的请求头
        payload_hash (str): 请求体SHA256
        query_string (str): 规范查询串，默认为空
        signed_headers (list | str, optional): 预期的已签名头列表，给出时必须与headers一致

    Returns:
        CanonicalRequest: 规范请求
    """
    normalized = {}
    for name, value in headers.items():
        key = name.strip().lower()
        if key in normalized:
            raise SigningError(f"请求头重复：{key}", step="canonical_request")
        normalized[key] = ' '.join(str(value).split())

    sorted_headers = tuple(sorted(normalized.items()))

    if signed_headers is not None:
        if isinstance(signed_headers, str):
            signed_headers = signed_headers.split(';')
        expected = sorted(h.strip().lower() for h in signed_headers)
        actual = [name for name, _ in sorted_headers]
        if expected != actual:
            raise SigningError(
                f"已签名头与规范头不一致：{';'.join(expected)} != {';'.join(actual)}",
                step="canonical_request"
            )

    return CanonicalRequest(method.upper(), canonical_uri, query_string, sorted_headers, payload_hash)


def build_put_headers(host, payload_hash, iso8601, session_token):
    """上传请求参与签名的请求头"""
    return {
        'host': host,
        'x-amz-content-sha256': payload_hash,
        'x-amz-date': iso8601,
        'x-amz-security-token': session_token,
    }


def derive_signing_key(secret_access_key, date_scope, region, service=SERVICE_NAME):
    """
    生成AWS4签名密钥

    日期 -> 区域 -> 服务 -> aws4_request，每一步的输出原始字节作为下一步的密钥

    Returns:
        RawKey: 签名密钥

    Raises:
        SigningError: 密钥或作用域参数不合法
    """
    if not isinstance(secret_access_key, str) or not secret_access_key:
        raise SigningError("SecretAccessKey为空或格式不正确", step="signing_key")
    for label, value in (('date_scope', date_scope), ('region', region), ('service', service)):
        if not isinstance(value, str) or not value:
            raise SigningError(f"签名作用域参数{label}为空", step="signing_key")
    if len(date_scope) != 8 or not date_scope.isdigit():
        raise SigningError(f"日期作用域格式错误：{date_scope}", step="signing_key")

    try:
        k_date = hmac_sha256(LiteralKey(KEY_PREFIX + secret_access_key), date_scope)
        k_region = hmac_sha256(k_date, region)
        k_service = hmac_sha256(k_region, service)
        return hmac_sha256(k_service, SCOPE_TERMINATOR)
    except (TypeError, UnicodeEncodeError) as e:
        raise SigningError(f"签名密钥派生失败：{e}", step="signing_key") from e


def credential_scope(date_scope, region, service=SERVICE_NAME):
    return f"{date_scope}/{region}/{service}/{SCOPE_TERMINATOR}"


def build_string_to_sign(iso8601, scope, canonical_request):
    """
    生成待签名字符串

    Args:
        iso8601 (str): YYYYMMDDTHHMMSSZ
        scope (str): 凭证作用域
        canonical_request (CanonicalRequest | str): 规范请求
    """
    if isinstance(canonical_request, CanonicalRequest):
        canonical_request = canonical_request.to_string()
    return '\n'.join([ALGORITHM, iso8601, scope, sha256_hex(canonical_request)])


def compute_signature(signing_key, string_to_sign):
    if not isinstance(signing_key, RawKey):
        raise SigningError("签名密钥必须是派生出的原始字节", step="signature")
    return hmac_sha256_hex(signing_key, string_to_sign)


def build_authorization_header(access_key_id, scope, signed_headers, signature):
    return f"{ALGORITHM} Credential={access_key_id}/{scope}, SignedHeaders={signed_headers}, Signature={signature}"


class SigV4Signer:
    """AWS4-HMAC-SHA256签名器"""

    def __init__(self, credentials, service=SERVICE_NAME):
        """
        Args:
            credentials (Credentials): 临时凭证
            service (str): 服务名
        """
        self.credentials = credentials
        self.service = service

    def sign(self, method, canonical_uri, host, payload_hash, timestamp):
        """
        对请求签名

        Args:
            method (str): HTTP方法
            canonical_uri (str): 规范URI
            host (str): Host头
            payload_hash (str): 请求体SHA256
            timestamp (RequestTimestamp): 请求时间戳

        Returns:
            SignedRequest: 签名结果，headers中包含Authorization
        """
        creds = self.credentials
        headers = build_put_headers(host, payload_hash, timestamp.iso8601, creds.session_token)
        canonical_request = build_canonical_request(
            method, canonical_uri, headers, payload_hash,
            signed_headers=list(headers.keys())
        )
        # 规范请求中含会话令牌，日志只记录其摘要
        logger.debug(
            f"规范请求：{method} {canonical_uri}，已签名头：{canonical_request.signed_headers}，"
            f"摘要：{sha256_hex(canonical_request.to_string())}",
            module="sigv4_signer"
        )

        scope = credential_scope(timestamp.date_scope, creds.region, self.service)
        string_to_sign = build_string_to_sign(timestamp.iso8601, scope, canonical_request)
        logger.debug(f"待签名字符串：\n{string_to_sign}", module="sigv4_signer")

        signing_key = derive_signing_key(creds.secret_access_key, timestamp.date_scope, creds.region, self.service)
        signature = compute_signature(signing_key, string_to_sign)
        authorization = build_authorization_header(
            creds.access_key_id, scope, canonical_request.signed_headers, signature
        )

        request_headers = {
            'Host': host,
            'Authorization': authorization,
            'x-amz-content-sha256': payload_hash,
            'x-amz-date': timestamp.iso8601,
            'x-amz-security-token': creds.session_token,
        }
        return SignedRequest(canonical_request, string_to_sign, signature, authorization, request_headers)
