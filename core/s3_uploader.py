#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
S3上传模块
负责组装带AWS4-HMAC-SHA256签名的PUT请求并发送
"""

import os
import time
import requests
from core.exceptions import ConfigurationError, TransportError
from core.hash_utils import sha256_hex
from core.metadata_client import InstanceMetadataClient
from core.models import UploadContext, UploadResult, UploadTarget
from core.sigv4_signer import SigV4Signer
from log.logger import logger
from config.config_loader import config_loader

US_EAST_1 = 'us-east-1'


def resolve_host(bucket, region):
    """
    虚拟主机风格的Host头

    us-east-1不带区域段，其它区域为 <bucket>.s3-<region>.amazonaws.com，
    否则请求会被307重定向到正确区域
    """
    if region == US_EAST_1:
        return f"{bucket}.s3.amazonaws.com"
    return f"{bucket}.s3-{region}.amazonaws.com"


def validate_arguments(bucket, dirpath, local_file_path):
    """
    检查上传参数，在任何网络请求之前执行

    Raises:
        ConfigurationError: 参数缺失或源文件不存在
    """
    missing = [name for name, value in (('bucket', bucket), ('dirpath', dirpath), ('source', local_file_path))
               if not value]
    if missing:
        raise ConfigurationError(f"缺少参数：{', '.join(missing)}", step="arguments")
    if not os.path.isfile(local_file_path):
        raise ConfigurationError(f"{local_file_path} doesn't exist.", step="arguments")


class S3Uploader:
    """S3上传类"""

    def __init__(self, metadata_client=None, session=None, timeout=None):
        """
        初始化上传器

        Args:
            metadata_client (InstanceMetadataClient, optional): 元数据客户端
            session (requests.Session, optional): HTTP会话
            timeout (tuple, optional): (连接超时, 读取超时)
        """
        s3_config = config_loader.get_s3_config()

        self.metadata_client = metadata_client or InstanceMetadataClient()
        self.session = session or requests.Session()
        self.timeout = timeout or (s3_config.get('connect_timeout', 10), s3_config.get('read_timeout', 60))

    def _read_file(self, local_file_path):
        try:
            with open(local_file_path, 'rb') as f:
                return f.read()
        except OSError as e:
            raise ConfigurationError(f"读取源文件失败：{local_file_path}，错误：{e}", step="read_file") from e

    def _send_request(self, context, signed, content):
        """发送已签名的PUT请求"""
        url = context.url
        try:
            # 不跟随重定向：307说明Host与桶所在区域不匹配
            response = self.session.put(
                url, data=content, headers=signed.headers,
                allow_redirects=False, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"S3请求失败：PUT {url}，错误：{str(e)}", module="s3_uploader")
            raise TransportError(f"PUT {url} 失败：{e}") from e

        if response.status_code == 307:
            location = response.headers.get('Location', '')
            logger.error(f"S3返回307重定向：{url} -> {location}", module="s3_uploader")
            raise ConfigurationError(
                f"桶{context.target.bucket}不在区域{context.credentials.region}，请求被重定向到：{location}",
                step="transport"
            )

        if not 200 <= response.status_code < 300:
            logger.error(f"S3上传失败：PUT {url}，状态码：{response.status_code}，响应：{response.text}",
                         module="s3_uploader")
            raise TransportError(
                f"PUT {url} 返回状态码{response.status_code}",
                status_code=response.status_code,
                response_text=response.text
            )

        return response

    def upload(self, bucket, dirpath, local_file_path, now=None):
        """
        上传本地文件到 s3://<bucket>/<dirpath>/<文件名>

        Args:
            bucket (str): 桶名称
            dirpath (str): 目标目录
            local_file_path (str): 本地文件路径
            now (datetime, optional): 签名时间，默认当前UTC时间

        Returns:
            UploadResult: 上传结果
        """
        validate_arguments(bucket, dirpath, local_file_path)
        target = UploadTarget.from_paths(bucket, dirpath, local_file_path)

        metadata = self.metadata_client.resolve()
        credentials = metadata.credentials
        context = UploadContext.create(credentials, target, resolve_host(bucket, credentials.region), now=now)

        # 签名使用的哈希必须来自实际发送的字节
        content = self._read_file(local_file_path)
        payload_hash = sha256_hex(content)

        signed = SigV4Signer(credentials).sign(
            'PUT', target.canonical_uri, context.host, payload_hash, context.timestamp
        )

        logger.info(f"开始上传：{local_file_path} -> s3://{bucket}/{target.object_path}，大小：{len(content)}字节",
                    module="s3_uploader")
        start_time = time.time()
        response = self._send_request(context, signed, content)
        logger.info(f"上传成功：s3://{bucket}/{target.object_path}，状态码：{response.status_code}，"
                    f"耗时：{time.time() - start_time:.2f}秒", module="s3_uploader")

        return UploadResult(
            status_code=response.status_code,
            etag=response.headers.get('ETag', '').strip('"'),
            url=context.url,
            object_path=target.object_path,
            payload_hash=payload_hash,
            file_size=len(content)
        )

    def close(self):
        self.session.close()
        self.metadata_client.close()
