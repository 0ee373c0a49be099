#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
数据模型模块
单次上传过程中使用的不可变数据对象
"""

import datetime
import os
from dataclasses import dataclass, field
from urllib.parse import quote


@dataclass(frozen=True)
class Credentials:
    """临时凭证"""
    access_key_id: str
    secret_access_key: str = field(repr=False)
    session_token: str = field(repr=False)
    region: str


@dataclass(frozen=True)
class InstanceMetadata:
    """实例元数据"""
    region: str
    account_id: str
    instance_profile_arn: str
    role_name: str
    credentials: Credentials


@dataclass(frozen=True)
class RequestTimestamp:
    """
    请求时间戳

    full_timestamp、iso8601、date_scope均由同一时刻推导，精确到秒
    """
    instant: datetime.datetime

    @classmethod
    def from_datetime(cls, value):
        """
        Args:
            value (datetime): 时间，无时区信息时按UTC处理
        """
        if value.tzinfo is None:
            value = value.replace(tzinfo=datetime.timezone.utc)
        else:
            value = value.astimezone(datetime.timezone.utc)
        return cls(value.replace(microsecond=0))

    @classmethod
    def now(cls):
        return cls.from_datetime(datetime.datetime.now(datetime.timezone.utc))

    @property
    def full_timestamp(self):
        return self.instant.strftime('%Y-%m-%d %H:%M:%S')

    @property
    def iso8601(self):
        return self.instant.strftime('%Y%m%dT%H%M%SZ')

    @property
    def date_scope(self):
        return self.instant.strftime('%Y%m%d')


@dataclass(frozen=True)
class UploadTarget:
    """上传目标"""
    bucket: str
    dest_dir_path: str
    local_file_path: str

    @classmethod
    def from_paths(cls, bucket, dirpath, local_file_path):
        """
        Args:
            bucket (str): 桶名称
            dirpath (str): 目标目录
            local_file_path (str): 本地文件路径
        """
        return cls(bucket, dirpath, local_file_path)

    @property
    def file_name(self):
        return os.path.basename(self.local_file_path)

    @property
    def object_path(self):
        """目标对象路径：目录/文件名，目录首尾的'/'会被去掉"""
        dir_path = self.dest_dir_path.strip('/')
        if not dir_path:
            return self.file_name
        return f"{dir_path}/{self.file_name}"

    @property
    def canonical_uri(self):
        """规范URI，与实际请求路径一致"""
        return f"/{quote(self.object_path, safe='/')}"


@dataclass(frozen=True)
class UploadContext:
    """单次上传的上下文，每次调用构造一次"""
    credentials: Credentials
    timestamp: RequestTimestamp
    target: UploadTarget
    host: str

    @classmethod
    def create(cls, credentials, target, host, now=None):
        """
        Args:
            credentials (Credentials): 临时凭证
            target (UploadTarget): 上传目标
            host (str): Host头
            now (datetime, optional): 指定时间，默认当前UTC时间
        """
        timestamp = RequestTimestamp.from_datetime(now) if now else RequestTimestamp.now()
        return cls(credentials, timestamp, target, host)

    @property
    def url(self):
        return f"https://{self.host}{self.target.canonical_uri}"


@dataclass(frozen=True)
class UploadResult:
    """上传结果"""
    status_code: int
    etag: str
    url: str
    object_path: str
    payload_hash: str
    file_size: int
